"""Settlement planning - Splitwise-style debt minimization."""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from smartsplit.core.balance_service import TOLERANCE
from smartsplit.users.model import User


@dataclass(frozen=True)
class Settlement:
    from_user: str
    to_user: str
    amount: float


class SettlementPlanner:
    """Collapse group balances into a short list of settling transfers."""

    @staticmethod
    def plan(balances: Dict[str, float]) -> List[Settlement]:
        """
        Calculate who pays whom using greedy largest-debt-to-largest-credit matching.

        Members within the tolerance band of zero are treated as settled.
        Ties keep the enumeration order of `balances`, so the output is
        reproducible. Emits at most len(balances) - 1 transfers.

        Returns list of Settlement(from_user, to_user, amount)
        """
        # [user_id, remaining] pairs; debtors carry negative amounts
        debtors = [[uid, b] for uid, b in balances.items() if b < -TOLERANCE]
        creditors = [[uid, b] for uid, b in balances.items() if b > TOLERANCE]

        # list.sort is stable, equal balances stay in enumeration order
        debtors.sort(key=lambda d: d[1])
        creditors.sort(key=lambda c: -c[1])

        settlements = []
        while debtors and creditors:
            debtor = debtors[0]
            creditor = creditors[0]

            amount = min(-debtor[1], creditor[1])
            settlements.append(Settlement(from_user=debtor[0], to_user=creditor[0], amount=amount))

            debtor[1] += amount
            creditor[1] -= amount

            if abs(debtor[1]) < TOLERANCE:
                debtors.pop(0)
            if abs(creditor[1]) < TOLERANCE:
                creditors.pop(0)

        return settlements

    @staticmethod
    def apply(balances: Dict[str, float], settlements: Iterable[Settlement]) -> Dict[str, float]:
        """Balances after every settlement is paid (debtor credited, creditor debited)."""
        result = dict(balances)
        for s in settlements:
            result[s.from_user] = result.get(s.from_user, 0.0) + s.amount
            result[s.to_user] = result.get(s.to_user, 0.0) - s.amount
        return result

    @staticmethod
    def describe(settlements: Iterable[Settlement], users: Iterable[User]) -> List[Dict[str, Any]]:
        """Display-ready settlement rows with names next to the ids."""
        by_id = {u.id: u for u in users}

        def name_of(user_id):
            user = by_id.get(user_id)
            return user.display_name if user else "Unknown"

        return [
            {
                "from_user": s.from_user,
                "from_name": name_of(s.from_user),
                "to_user": s.to_user,
                "to_name": name_of(s.to_user),
                "amount": round(s.amount, 2),
            }
            for s in settlements
        ]
