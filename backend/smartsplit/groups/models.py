"""Group models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from bson.objectid import ObjectId

from smartsplit.extensions import db
from smartsplit.utils.validators import safe_object_id


@dataclass
class Group:
    id: str
    name: str
    members: List[str] = field(default_factory=list)  # member emails
    expenses: List[str] = field(default_factory=list)  # expense ids
    created_by: str = ""

    def has_member(self, email: str) -> bool:
        return bool(email) and email in self.members

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Group":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            members=list(doc.get("members") or []),
            expenses=[str(e) for e in doc.get("expenses") or []],
            created_by=str(doc.get("created_by", "")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "members": list(self.members),
            "expenses": list(self.expenses),
            "created_by": self.created_by,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_document()
        data["_id"] = self.id
        return data

    def save(self):
        db.groups.update_one(
            {"_id": ObjectId(self.id)},
            {"$set": self.to_document()},
            upsert=True
        )
        return self

    @staticmethod
    def find_by_id(group_id):
        oid = safe_object_id(group_id)
        if oid is None:
            return None
        doc = db.groups.find_one({"_id": oid})
        return Group.from_document(doc) if doc else None

    @staticmethod
    def find_for_member(email: str) -> List["Group"]:
        if not email:
            return []
        return [Group.from_document(d) for d in db.groups.find({"members": email})]
