"""
Ad-hoc/Replacement store adapter.
"""

from typing import Any, Dict

from sqlalchemy import func

from trip_ledger.app.domain.ledger.adapters.sql import SqlTripStoreAdapter
from trip_ledger.app.domain.ledger.calculator import FinancialInputs
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import StoreTag
from trip_ledger.app.models.adhoc_transaction import AdhocTransaction
from trip_ledger.app.models.trip_enums import TripType
from trip_ledger.app.schemas.transaction import (
    AdhocTripDetails,
    AdhocTripDraft,
    AdvancePayment,
    BalancePayment,
)


class AdhocStoreAdapter(SqlTripStoreAdapter):
    store = StoreTag.ADHOC
    model = AdhocTransaction
    draft_schema = AdhocTripDraft
    trip_types = frozenset({TripType.ADHOC, TripType.REPLACEMENT})

    def accepts(self, trip_filter: TransactionFilter) -> bool:
        # Ad-hoc vehicles are free text, never master-data ids
        return super().accepts(trip_filter) and trip_filter.vehicle_id is None

    def _apply_store_filter(self, stmt, trip_filter: TransactionFilter):
        if trip_filter.vehicle_number:
            number = trip_filter.vehicle_number.replace(" ", "").upper()
            stmt = stmt.where(func.upper(func.replace(self.model.vehicle_number, " ", "")) == number)
        return stmt

    def financial_inputs(self, row: AdhocTransaction) -> FinancialInputs:
        return FinancialInputs(
            fixed_freight=row.fixed_freight,
            per_km_variable_rate=row.per_km_variable_rate,
            toll_expenses=row.toll_expenses,
            parking_charges=row.parking_charges,
            loading_charges=row.loading_charges,
            unloading_charges=row.unloading_charges,
            other_charges=row.other_charges,
            opening_km=row.opening_km,
            closing_km=row.closing_km,
            advance_paid=row.advance_paid_amount,
            balance_paid_so_far=row.balance_paid_amount,
            revenue_override=row.revenue_override,
        )

    def details(self, row: AdhocTransaction) -> Dict[str, Any]:
        return {
            "adhoc": AdhocTripDetails(
                trip_no=row.trip_no,
                vehicle_number=row.vehicle_number,
                vehicle_type=row.vehicle_type,
                vendor_name=row.vendor_name,
                vendor_number=row.vendor_number,
                driver_name=row.driver_name,
                driver_number=row.driver_number,
                driver_aadhar_number=row.driver_aadhar_number,
                driver_licence_number=row.driver_licence_number,
                total_shipments_for_deliveries=row.total_shipments_for_deliveries,
                total_shipment_deliveries_attempted=row.total_shipment_deliveries_attempted,
                total_shipment_deliveries_done=row.total_shipment_deliveries_done,
                fix_km=row.fix_km,
                other_charges_remarks=row.other_charges_remarks,
                advance=AdvancePayment(
                    request_no=row.advance_request_no,
                    to_be_paid=row.advance_to_be_paid,
                    approved_amount=row.advance_approved_amount,
                    approved_by=row.advance_approved_by,
                    paid_amount=row.advance_paid_amount,
                    paid_mode=row.advance_paid_mode,
                    paid_date=row.advance_paid_date,
                    paid_by=row.advance_paid_by,
                    employee_details=row.employee_details_advance,
                ),
                balance=BalancePayment(
                    paid_amount=row.balance_paid_amount,
                    paid_date=row.balance_paid_date,
                    paid_by=row.balance_paid_by,
                    employee_details=row.employee_details_balance,
                ),
            )
        }
