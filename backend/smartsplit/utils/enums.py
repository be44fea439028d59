from enum import Enum

class SplitType(str, Enum):
    EQUALLY = "equally"
    PERCENTAGE = "percentage"
    AMOUNT = "amount"

class IdentifierKind(str, Enum):
    EMAIL = "email"
    MOBILE = "mobile"
