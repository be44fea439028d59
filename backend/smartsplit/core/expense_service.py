"""
Expense Admission Service - Split construction and validation.

Responsibilities:
- Build a split policy from request data
- Validate amounts are positive numbers
- Validate percentage splits sum to 100
- Validate amount splits sum to the total
- Validate participants reference existing users
- Validate split entries belong to participants

Validation happens here, before an expense is admitted; the balance and
settlement services assume admitted expenses are well formed.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId

from smartsplit.core.balance_service import TOLERANCE
from smartsplit.expenses.models import AmountSplit, EqualSplit, Expense, PercentageSplit, Split
from smartsplit.utils.enums import SplitType
from smartsplit.utils.validators import parse_amount

DEFAULT_CATEGORY = "Other"


class ExpenseValidationService:
    """Service for admission-time expense validation."""

    @classmethod
    def build_split(
        cls,
        split_type: Optional[str],
        distribution: Optional[Dict[str, Any]] = None
    ) -> Tuple[Optional[Split], Optional[str]]:
        """
        Build a split policy from a type name and an optional distribution.

        Returns:
            Tuple of (split, error message if invalid)
        """
        split_type = split_type or SplitType.EQUALLY.value
        if split_type == SplitType.EQUALLY.value:
            return EqualSplit(), None

        if split_type not in (SplitType.PERCENTAGE.value, SplitType.AMOUNT.value):
            return None, f"Unknown split type: {split_type}"

        if not isinstance(distribution, dict) or not distribution:
            return None, "A distribution is required for this split type"

        parsed = {}
        for user_id, value in distribution.items():
            number = parse_amount(value)
            if number is None or number < 0:
                return None, f"Invalid share for {user_id}"
            parsed[str(user_id)] = number

        if split_type == SplitType.PERCENTAGE.value:
            return PercentageSplit(parsed), None
        return AmountSplit(parsed), None

    @classmethod
    def validate_split(cls, amount: float, split: Split) -> Optional[str]:
        """Return an error message when the split does not add up."""
        if isinstance(split, EqualSplit):
            return None
        if isinstance(split, PercentageSplit):
            total_pct = sum(split.distribution.values())
            if abs(total_pct - 100) > TOLERANCE:
                return "Percentages must add up to 100."
            return None
        if isinstance(split, AmountSplit):
            amounts_sum = sum(split.distribution.values())
            if abs(amounts_sum - amount) > TOLERANCE:
                return "The sum of split amounts must equal the total expense amount."
            return None
        return f"Unsupported split policy: {split!r}"

    @classmethod
    def validate(
        cls,
        description: str,
        amount,
        paid_by: str,
        participants: List[str],
        split: Split,
        known_user_ids: Iterable[str]
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate an expense before it is admitted.

        Args:
            description: Expense description
            amount: Raw amount as submitted
            paid_by: Payer user ID
            participants: Participant user IDs
            split: Split policy
            known_user_ids: IDs of every existing user

        Returns:
            Tuple of (is_valid, error_message)
        """
        number = parse_amount(amount)
        if not (description or "").strip() or number is None or number <= 0:
            return False, "Please enter a valid description and amount."

        if not participants:
            return False, "An expense needs at least one participant."

        known = set(known_user_ids)
        unknown = [p for p in participants if p not in known]
        if unknown:
            return False, f"Unknown participants: {', '.join(unknown)}"

        if paid_by not in known:
            return False, "Unknown payer"

        if not isinstance(split, EqualSplit):
            members = set(participants)
            if any(user_id not in members for user_id in split.distribution):
                return False, "Split entries must belong to participants."

        split_error = cls.validate_split(number, split)
        if split_error:
            return False, split_error

        return True, None

    @classmethod
    def create_expense(
        cls,
        description: str,
        amount,
        paid_by: str,
        participants: List[str],
        split: Split,
        known_user_ids: Iterable[str],
        group_id: Optional[str] = None,
        category: Optional[str] = None,
        date: Optional[str] = None
    ) -> Tuple[Optional[Expense], Optional[str]]:
        """
        Validate and build a new expense (not persisted).

        Returns:
            Tuple of (expense, error message if invalid)
        """
        # Keep participant order, drop repeats
        participants = list(dict.fromkeys(participants or []))

        is_valid, error = cls.validate(description, amount, paid_by, participants, split, known_user_ids)
        if not is_valid:
            return None, error

        expense = Expense(
            id=str(ObjectId()),
            group_id=group_id,
            description=description.strip(),
            amount=parse_amount(amount),
            paid_by=paid_by,
            participants=participants,
            split=split,
            date=date or datetime.now(timezone.utc).isoformat(),
            category=category or DEFAULT_CATEGORY,
        )
        return expense, None
