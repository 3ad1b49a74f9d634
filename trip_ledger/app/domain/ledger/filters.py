"""
List filter shared by the federation engine and both store adapters.
"""

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Optional

from trip_ledger.app.models.trip_enums import TripStatus, TripType


@dataclass(frozen=True)
class TransactionFilter:
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    customer_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[TripStatus] = None
    trip_close: Optional[bool] = None
    trip_types: Optional[FrozenSet[TripType]] = None
    # Fixed trips reference master-data vehicles; ad-hoc trips carry a registration number
    vehicle_id: Optional[int] = None
    vehicle_number: Optional[str] = None

    def admits(self, trip_types: FrozenSet[TripType]) -> bool:
        """Whether a store holding ``trip_types`` can contribute rows."""
        return self.trip_types is None or bool(self.trip_types & trip_types)
