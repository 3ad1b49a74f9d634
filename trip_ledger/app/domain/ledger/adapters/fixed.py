"""
Fixed-contract store adapter.
"""

from typing import Any, Dict, Iterable

from trip_ledger.app.domain.ledger.adapters.sql import SqlTripStoreAdapter
from trip_ledger.app.domain.ledger.calculator import FinancialInputs
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import StoreTag
from trip_ledger.app.models.fixed_transaction import FixedTransaction
from trip_ledger.app.models.trip_enums import TripType
from trip_ledger.app.schemas.transaction import FixedTripDetails, FixedTripDraft


def fence_ids(ids: Iterable[int]) -> str:
    return "," + ",".join(str(ref) for ref in ids) + ","


class FixedStoreAdapter(SqlTripStoreAdapter):
    store = StoreTag.FIXED
    model = FixedTransaction
    draft_schema = FixedTripDraft
    trip_types = frozenset({TripType.FIXED})

    def accepts(self, trip_filter: TransactionFilter) -> bool:
        # No registration numbers here; vehicles are master-data references
        return super().accepts(trip_filter) and not trip_filter.vehicle_number

    def _apply_store_filter(self, stmt, trip_filter: TransactionFilter):
        if trip_filter.vehicle_id is not None:
            stmt = stmt.where(self.model.vehicle_refs.like(f"%,{trip_filter.vehicle_id},%"))
        return stmt

    def _prepare_row(self, row: FixedTransaction) -> None:
        row.vehicle_refs = fence_ids(row.vehicle_ids or [])

    def financial_inputs(self, row: FixedTransaction) -> FinancialInputs:
        # Fixed contracts carry no per-km rate, loading or payment sub-records
        return FinancialInputs(
            fixed_freight=row.fixed_freight,
            toll_expenses=row.toll_expenses,
            parking_charges=row.parking_charges,
            opening_km=row.opening_km,
            closing_km=row.closing_km,
        )

    def details(self, row: FixedTransaction) -> Dict[str, Any]:
        vehicle_ids = list(row.vehicle_ids or [])
        driver_ids = list(row.driver_ids or [])
        return {
            "fixed": FixedTripDetails(
                vehicle_ids=vehicle_ids,
                driver_ids=driver_ids,
                primary_vehicle_id=vehicle_ids[0],
                primary_driver_id=driver_ids[0],
                vendor_id=row.vendor_id,
                replacement_driver_id=row.replacement_driver_id,
                replacement_driver_name=row.replacement_driver_name,
                replacement_driver_no=row.replacement_driver_no,
                total_deliveries=row.total_deliveries,
                total_deliveries_attempted=row.total_deliveries_attempted,
                total_deliveries_done=row.total_deliveries_done,
                handling_charges=row.handling_charges,
            )
        }
