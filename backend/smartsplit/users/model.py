from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bson.objectid import ObjectId

from smartsplit.extensions import db
from smartsplit.utils.enums import IdentifierKind
from smartsplit.utils.validators import classify_identifier, safe_object_id


@dataclass
class User:
    id: str
    name: Optional[str] = None
    email: str = ""
    mobile: str = ""
    friend_ids: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.mobile or "Unknown"

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "User":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name"),
            email=doc.get("email") or "",
            mobile=doc.get("mobile") or "",
            friend_ids=[str(f) for f in doc.get("friend_ids") or []],
        )

    @classmethod
    def new_from_identifier(cls, identifier: str) -> "User":
        """Build (but do not save) a user for an email or mobile identifier."""
        kind = classify_identifier(identifier)
        is_email = kind == IdentifierKind.EMAIL
        return cls(
            id=str(ObjectId()),
            name=identifier.split("@")[0] if is_email else identifier,
            email=identifier if is_email else "",
            mobile="" if is_email else identifier,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "friend_ids": list(self.friend_ids),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_document()
        data["_id"] = self.id
        return data

    def save(self):
        """Write with merge-on-update semantics."""
        db.users.update_one(
            {"_id": ObjectId(self.id)},
            {"$set": self.to_document()},
            upsert=True
        )
        return self

    @staticmethod
    def find_by_id(user_id) -> Optional["User"]:
        oid = safe_object_id(user_id)
        if oid is None:
            print(f"[User.find_by_id] Invalid user_id: {user_id}")
            return None
        doc = db.users.find_one({"_id": oid})
        return User.from_document(doc) if doc else None

    @staticmethod
    def find_by_identifier(identifier: str) -> Optional["User"]:
        """Look a user up by email or mobile, depending on the identifier."""
        if classify_identifier(identifier) == IdentifierKind.EMAIL:
            doc = db.users.find_one({"email": identifier})
        else:
            doc = db.users.find_one({"mobile": identifier})
        return User.from_document(doc) if doc else None

    @staticmethod
    def find_by_emails(emails) -> List["User"]:
        emails = [e for e in emails if e]
        if not emails:
            return []
        return [User.from_document(d) for d in db.users.find({"email": {"$in": list(emails)}})]
