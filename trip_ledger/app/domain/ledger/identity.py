"""
Unified Transaction IDs.

Both stores number their rows from 1, so a bare integer never identifies a
trip. Every id handed to callers is the store tag plus the store-local key,
rendered as ``<PREFIX>-<local id>`` (``FIX-7``, ``ADH-7``).
"""

import enum
import re
from dataclasses import dataclass
from typing import Any

from trip_ledger.app.core.exceptions import MalformedIdError, UnknownStoreError
from trip_ledger.app.models.trip_enums import TripType


class StoreTag(str, enum.Enum):
    """Physical store a trip record lives in."""
    FIXED = "FIX"
    ADHOC = "ADH"

    @property
    def sort_rank(self) -> int:
        # Tiebreak order when two stores share updated_at and transaction_date
        return 0 if self is StoreTag.FIXED else 1

    @classmethod
    def for_trip_type(cls, trip_type: TripType) -> "StoreTag":
        return cls.FIXED if trip_type == TripType.FIXED else cls.ADHOC


_ID_PATTERN = re.compile(r"^([A-Za-z]+)-([1-9][0-9]{0,9})$")

# Both stores key rows with a 32-bit INTEGER
MAX_LOCAL_ID = 2 ** 31 - 1


@dataclass(frozen=True, order=True)
class UnifiedTransactionId:
    store: StoreTag
    local_id: int

    def __str__(self) -> str:
        return f"{self.store.value}-{self.local_id}"


def encode(store: StoreTag, local_id: int) -> str:
    """Render the opaque id for a store-local key."""
    if isinstance(local_id, bool) or not isinstance(local_id, int) or not 1 <= local_id <= MAX_LOCAL_ID:
        raise ValueError(f"local_id must be an integer in 1..{MAX_LOCAL_ID}, got {local_id!r}")
    return str(UnifiedTransactionId(StoreTag(store), local_id))


def decode(value: Any) -> UnifiedTransactionId:
    """
    Parse an opaque id back into its store and local key.

    Raises:
        MalformedIdError: value is not ``<PREFIX>-<positive int>`` (bare integers included)
            or the local key is beyond the stores' INTEGER range
        UnknownStoreError: prefix does not name a known store
    """
    if not isinstance(value, str):
        raise MalformedIdError(value)

    match = _ID_PATTERN.match(value.strip())
    if match is None:
        raise MalformedIdError(value)

    prefix, local_id = match.group(1).upper(), int(match.group(2))
    if local_id > MAX_LOCAL_ID:
        raise MalformedIdError(value)

    try:
        store = StoreTag(prefix)
    except ValueError:
        raise UnknownStoreError(prefix) from None

    return UnifiedTransactionId(store, local_id)
