"""
Balance Service - Net positions derived from recorded expenses.

Responsibilities:
- Compute each participant's share under an expense's split policy
- Compute peer (non-group) balances from one user's point of view
- Compute group balances for every resolved member
- Collect the user's known relationships (friends and co-members)

Positive balance = is owed money
Negative balance = owes money

Every lookup miss (unknown user, missing distribution entry) degrades to a
zero contribution.
"""
from typing import Dict, Iterable, List, Optional

from smartsplit.expenses.models import AmountSplit, EqualSplit, Expense, PercentageSplit
from smartsplit.groups.models import Group
from smartsplit.users.model import User

TOLERANCE = 0.01


class BalanceService:
    """Pure balance computation over in-memory users, groups and expenses."""

    @classmethod
    def share_of(cls, expense: Expense, user_id: str) -> float:
        """
        Monetary share of one participant under the expense's split.

        Args:
            expense: The expense being split
            user_id: Participant whose share is wanted

        Returns:
            The share; 0 for users absent from the distribution
        """
        split = expense.split
        if isinstance(split, EqualSplit):
            if not expense.participants:
                return 0.0
            return expense.amount / len(expense.participants)
        if isinstance(split, PercentageSplit):
            return expense.amount * split.distribution.get(user_id, 0) / 100
        if isinstance(split, AmountSplit):
            return float(split.distribution.get(user_id, 0))
        raise TypeError(f"Unsupported split policy: {split!r}")

    @classmethod
    def shares(cls, expense: Expense) -> Dict[str, float]:
        """Share of every participant, in participant order."""
        result: Dict[str, float] = {}
        for participant_id in expense.participants:
            result[participant_id] = result.get(participant_id, 0.0) + cls.share_of(expense, participant_id)
        return result

    @staticmethod
    def _counterparty(expense: Expense, reference_user_id: str) -> Optional[str]:
        for participant_id in expense.participants:
            if participant_id != reference_user_id:
                return participant_id
        return None

    @classmethod
    def compute_peer_balance(
        cls,
        reference_user_id: str,
        expenses: Iterable[Expense],
        known_counterparty_ids: Iterable[str] = ()
    ) -> Dict[str, float]:
        """
        Net balance with every counterparty across non-group expenses.

        Args:
            reference_user_id: User whose point of view is computed
            expenses: Candidate expenses; group expenses and expenses not
                involving the reference user are ignored
            known_counterparty_ids: Friends and co-members listed with 0
                when they have no balance

        Returns:
            Dict of {counterparty_id: balance}; positive means the
            counterparty owes the reference user
        """
        balances: Dict[str, float] = {}

        for expense in expenses:
            if not expense.is_peer or reference_user_id not in expense.participants:
                continue

            other_id = cls._counterparty(expense, reference_user_id)
            if other_id is None:
                continue

            balances.setdefault(other_id, 0.0)
            if expense.paid_by == reference_user_id:
                balances[other_id] += cls.share_of(expense, other_id)
            elif expense.paid_by == other_id:
                balances[other_id] -= cls.share_of(expense, reference_user_id)

        for counterparty_id in known_counterparty_ids:
            if counterparty_id != reference_user_id:
                balances.setdefault(counterparty_id, 0.0)

        return balances

    @classmethod
    def compute_pair_balance(
        cls,
        reference_user_id: str,
        friend_id: str,
        expenses: Iterable[Expense]
    ) -> float:
        """Net balance between exactly two users over their peer expenses."""
        pair_expenses = [e for e in expenses if friend_id in e.participants]
        return cls.compute_peer_balance(reference_user_id, pair_expenses).get(friend_id, 0.0)

    @classmethod
    def non_group_total(
        cls,
        reference_user_id: str,
        expenses: Iterable[Expense],
        counterparty_ids: Optional[Iterable[str]] = None
    ) -> float:
        """
        Overall non-group position of the user (sum of peer balances).

        When `counterparty_ids` is given, only balances with those
        counterparties are counted.
        """
        balances = cls.compute_peer_balance(reference_user_id, expenses)
        if counterparty_ids is not None:
            allowed = set(counterparty_ids)
            balances = {uid: b for uid, b in balances.items() if uid in allowed}
        return sum(balances.values())

    @classmethod
    def compute_group_balances(
        cls,
        group: Group,
        members: Iterable[User],
        expenses: Iterable[Expense]
    ) -> Dict[str, float]:
        """
        Net balance of every resolved member of a group.

        The payer is credited with the full amount and every participant is
        debited their share. Parties that are not resolved members are
        accumulated too, so the ledger stays zero-sum, but they are left out
        of the result.

        Args:
            group: The group being viewed
            members: Group members already resolved to users
            expenses: Expenses tagged with the group's id

        Returns:
            Dict of {member_id: balance} in member order
        """
        member_ids: List[str] = []
        ledger: Dict[str, float] = {}
        for member in members:
            if member.id not in ledger:
                member_ids.append(member.id)
                ledger[member.id] = 0.0

        for expense in expenses:
            if expense.group_id != group.id:
                continue
            ledger[expense.paid_by] = ledger.get(expense.paid_by, 0.0) + expense.amount
            for participant_id, share in cls.shares(expense).items():
                ledger[participant_id] = ledger.get(participant_id, 0.0) - share

        return {member_id: ledger[member_id] for member_id in member_ids}

    @staticmethod
    def resolve_members(group: Group, users: Iterable[User]) -> List[User]:
        """Users whose email is listed in the group, in user order."""
        return [u for u in users if group.has_member(u.email)]

    @classmethod
    def compute_relationship_ids(
        cls,
        reference_user: User,
        users: Iterable[User],
        groups: Iterable[Group]
    ) -> List[str]:
        """
        Every user the reference user knows: co-members of the groups the
        user belongs to, then explicit friends. Ordered, without repeats.
        """
        users = list(users)
        related: Dict[str, None] = {}
        for group in groups:
            if not group.has_member(reference_user.email):
                continue
            for member in cls.resolve_members(group, users):
                related[member.id] = None
        for friend_id in reference_user.friend_ids:
            related[friend_id] = None
        related.pop(reference_user.id, None)
        return list(related)
