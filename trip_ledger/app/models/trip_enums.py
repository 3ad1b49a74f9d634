"""
Trip ledger enumerations.
"""

import enum


class TripType(str, enum.Enum):
    """Trip type enumeration. Fixed lives in the Fixed store, the others in the Ad-hoc store."""
    FIXED = "Fixed"
    ADHOC = "Adhoc"
    REPLACEMENT = "Replacement"


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentMode(str, enum.Enum):
    """How an advance or balance was paid out."""
    UPI = "UPI"
    BANK_TRANSFER = "Bank Transfer"
    CASH = "Cash"
    CHEQUE = "Cheque"
