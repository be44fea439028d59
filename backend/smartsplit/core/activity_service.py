"""Activity feed and report data assembled from the expense snapshot."""
from typing import Any, Dict, Iterable, List

from smartsplit.expenses.models import Expense
from smartsplit.groups.models import Group
from smartsplit.users.model import User


class ActivityService:

    @staticmethod
    def newest_first(expenses: Iterable[Expense]) -> List[Expense]:
        # ISO timestamps sort chronologically as strings
        return sorted(expenses, key=lambda e: e.date or "", reverse=True)

    @classmethod
    def activity_for(cls, user_id: str, expenses: Iterable[Expense]) -> List[Expense]:
        """Every expense the user takes part in, most recent first."""
        return cls.newest_first(e for e in expenses if user_id in e.participants)

    @classmethod
    def peer_expenses_between(
        cls,
        user_id: str,
        friend_id: str,
        expenses: Iterable[Expense]
    ) -> List[Expense]:
        return cls.newest_first(
            e for e in expenses
            if e.is_peer and user_id in e.participants and friend_id in e.participants
        )

    @staticmethod
    def report_data(
        user_email: str,
        users: Iterable[User],
        groups: Iterable[Group],
        expenses: Iterable[Expense]
    ) -> List[Dict[str, Any]]:
        """
        Per-group spending snapshot of the groups the user belongs to.

        Returns list of: {group_name, members, expenses: [{description,
        amount, category, paid_by}]} with payers shown by email.
        """
        emails = {u.id: u.email for u in users}
        expenses = list(expenses)

        data = []
        for group in groups:
            if not group.has_member(user_email):
                continue
            data.append({
                "group_name": group.name,
                "members": list(group.members),
                "expenses": [
                    {
                        "description": e.description,
                        "amount": e.amount,
                        "category": e.category,
                        "paid_by": emails.get(e.paid_by) or "Unknown",
                    }
                    for e in expenses if e.group_id == group.id
                ],
            })
        return data
