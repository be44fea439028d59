"""Request validators."""
import re
from typing import Optional

from bson import ObjectId, errors

from smartsplit.utils.enums import IdentifierKind

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
MOBILE_RE = re.compile(r"^\d{10}$")


def is_email(identifier: str) -> bool:
    return bool(EMAIL_RE.search(identifier or ""))


def is_mobile(identifier: str) -> bool:
    return bool(MOBILE_RE.match(identifier or ""))


def classify_identifier(identifier: str) -> Optional[IdentifierKind]:
    """Return whether a sign-in identifier is an email or a 10-digit mobile."""
    if is_email(identifier):
        return IdentifierKind.EMAIL
    if is_mobile(identifier):
        return IdentifierKind.MOBILE
    return None


def safe_object_id(value):
    try:
        return ObjectId(value)
    except (errors.InvalidId, TypeError):
        return None


def parse_amount(value) -> Optional[float]:
    """Parse a user-entered amount; None when it is not a number."""
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None
    return amount
