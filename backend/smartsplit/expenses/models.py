"""Expense models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from bson.objectid import ObjectId

from smartsplit.extensions import db
from smartsplit.utils.enums import SplitType


@dataclass(frozen=True)
class EqualSplit:
    type = SplitType.EQUALLY


@dataclass(frozen=True)
class PercentageSplit:
    distribution: Dict[str, float] = field(default_factory=dict)
    type = SplitType.PERCENTAGE


@dataclass(frozen=True)
class AmountSplit:
    distribution: Dict[str, float] = field(default_factory=dict)
    type = SplitType.AMOUNT


Split = Union[EqualSplit, PercentageSplit, AmountSplit]


def split_from_document(doc: Optional[Dict[str, Any]]) -> Split:
    """Decode a stored split; a missing or unknown type is an equal split."""
    if not doc:
        return EqualSplit()
    split_type = doc.get("type")
    distribution = {
        str(user_id): float(value or 0)
        for user_id, value in (doc.get("distribution") or {}).items()
    }
    if split_type == SplitType.PERCENTAGE.value:
        return PercentageSplit(distribution)
    if split_type == SplitType.AMOUNT.value:
        return AmountSplit(distribution)
    return EqualSplit()


def split_to_document(split: Split) -> Dict[str, Any]:
    if isinstance(split, EqualSplit):
        return {"type": SplitType.EQUALLY.value}
    return {"type": split.type.value, "distribution": dict(split.distribution)}


@dataclass
class Expense:
    id: str
    description: str
    amount: float
    paid_by: str
    participants: List[str]
    split: Split = field(default_factory=EqualSplit)
    date: str = ""
    category: str = "Other"
    group_id: Optional[str] = None

    @property
    def is_peer(self) -> bool:
        return not self.group_id

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Expense":
        group_id = doc.get("group_id")
        return cls(
            id=str(doc["_id"]),
            group_id=str(group_id) if group_id else None,
            description=doc.get("description", ""),
            amount=float(doc.get("amount", 0)),
            paid_by=str(doc.get("paid_by", "")),
            participants=[str(p) for p in doc.get("participants", [])],
            split=split_from_document(doc.get("split")),
            date=doc.get("date", ""),
            category=doc.get("category") or "Other",
        )

    def to_document(self) -> Dict[str, Any]:
        """Fields persisted to the expenses collection (without _id)."""
        return {
            "group_id": self.group_id,
            "description": self.description,
            "amount": self.amount,
            "paid_by": self.paid_by,
            "participants": list(self.participants),
            "split": split_to_document(self.split),
            "date": self.date,
            "category": self.category,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_document()
        data["_id"] = self.id
        return data

    def insert(self):
        db.expenses.insert_one({"_id": ObjectId(self.id), **self.to_document()})
        return self

    @staticmethod
    def find_for_group(group_id: str) -> List["Expense"]:
        return [Expense.from_document(d) for d in db.expenses.find({"group_id": group_id})]

    @staticmethod
    def find_involving(user_id: str) -> List["Expense"]:
        """Every expense, group or peer, that lists the user as a participant."""
        return [Expense.from_document(d) for d in db.expenses.find({"participants": user_id})]
