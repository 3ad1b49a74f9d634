"""
Transaction schemas.

Draft schemas validate a whole trip for one store (create, and the merged
record on update). Response schemas present both stores in one shape, with
the store-specific payload under ``fixed`` or ``adhoc``.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trip_ledger.app.models.trip_enums import TripType, TripStatus, PaymentMode

Money = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
TimeOfDay = Annotated[str, Field(pattern=r"^([01][0-9]|2[0-3]):[0-5][0-9]$")]
MobileNumber = Annotated[str, Field(pattern=r"^[0-9]{10}$")]
AadharNumber = Annotated[str, Field(pattern=r"^[0-9]{12}$")]


class TripDraftBase(BaseModel):
    """Fields every trip carries, whichever store it lives in."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    transaction_date: date
    customer_id: int = Field(..., ge=1)
    project_id: Optional[int] = Field(None, ge=1)
    shift: Optional[str] = Field(None, max_length=20)

    arrival_time_at_hub: Optional[TimeOfDay] = None
    in_time_by_cust: Optional[TimeOfDay] = None
    out_time_from_hub: Optional[TimeOfDay] = None
    return_reporting_time: Optional[TimeOfDay] = None
    out_time_from: Optional[TimeOfDay] = None
    total_duty_hours: Optional[Decimal] = Field(None, ge=0, max_digits=6, decimal_places=2)

    opening_km: int = Field(..., ge=0)
    closing_km: Optional[int] = Field(None, ge=0)

    driver_aadhar_doc: Optional[str] = Field(None, max_length=255)
    driver_licence_doc: Optional[str] = Field(None, max_length=255)
    toll_expenses_doc: Optional[str] = Field(None, max_length=255)
    parking_charges_doc: Optional[str] = Field(None, max_length=255)

    status: TripStatus = TripStatus.PENDING
    trip_close: bool = False
    remarks: Optional[str] = None

    @field_validator("closing_km")
    @classmethod
    def closing_not_before_opening(cls, value, info):
        opening = info.data.get("opening_km")
        if value is not None and opening is not None and value < opening:
            raise ValueError("closing_km must be greater than or equal to opening_km")
        return value


class FixedTripDraft(TripDraftBase):
    """Fixed-contract trip: vehicles, drivers and vendor come from master data."""
    trip_type: Literal["Fixed"]

    vehicle_ids: List[int] = Field(..., min_length=1)
    driver_ids: List[int] = Field(..., min_length=1)
    vendor_id: Optional[int] = Field(None, ge=1)

    replacement_driver_id: Optional[int] = Field(None, ge=1)
    replacement_driver_name: Optional[str] = Field(None, max_length=100)
    replacement_driver_no: Optional[MobileNumber] = None

    total_deliveries: Optional[int] = Field(None, ge=0)
    total_deliveries_attempted: Optional[int] = Field(None, ge=0)
    total_deliveries_done: Optional[int] = Field(None, ge=0)

    fixed_freight: Optional[Money] = None
    toll_expenses: Optional[Money] = None
    parking_charges: Optional[Money] = None
    handling_charges: Optional[Money] = None

    @field_validator("vehicle_ids", "driver_ids")
    @classmethod
    def ordered_set_of_references(cls, value: List[int]) -> List[int]:
        if any(ref < 1 for ref in value):
            raise ValueError("references must be positive ids")
        if len(set(value)) != len(value):
            raise ValueError("references must not repeat")
        return value


class AdhocTripDraft(TripDraftBase):
    """Ad-hoc or Replacement trip: vehicle, vendor and driver are free text."""
    trip_type: Literal["Adhoc", "Replacement"]
    trip_no: str = Field(..., min_length=1, max_length=50)

    vehicle_number: str = Field(..., min_length=1, max_length=20)
    vehicle_type: Optional[str] = Field(None, max_length=50)
    vendor_name: str = Field(..., min_length=1, max_length=150)
    vendor_number: Optional[MobileNumber] = None
    driver_name: str = Field(..., min_length=1, max_length=100)
    driver_number: MobileNumber
    driver_aadhar_number: Optional[AadharNumber] = None
    driver_licence_number: Optional[str] = Field(None, max_length=30)

    total_shipments_for_deliveries: Optional[int] = Field(None, ge=0)
    total_shipment_deliveries_attempted: Optional[int] = Field(None, ge=0)
    total_shipment_deliveries_done: Optional[int] = Field(None, ge=0)

    fixed_freight: Optional[Money] = None
    fix_km: Optional[int] = Field(None, ge=0)
    per_km_variable_rate: Optional[Money] = None
    toll_expenses: Optional[Money] = None
    parking_charges: Optional[Money] = None
    loading_charges: Optional[Money] = None
    unloading_charges: Optional[Money] = None
    other_charges: Optional[Money] = None
    other_charges_remarks: Optional[str] = Field(None, max_length=255)

    advance_request_no: Optional[str] = Field(None, max_length=50)
    advance_to_be_paid: Optional[Money] = None
    advance_approved_amount: Optional[Money] = None
    advance_approved_by: Optional[str] = Field(None, max_length=100)
    advance_paid_amount: Optional[Money] = None
    advance_paid_mode: Optional[PaymentMode] = None
    advance_paid_date: Optional[date] = None
    advance_paid_by: Optional[str] = Field(None, max_length=100)
    employee_details_advance: Optional[str] = Field(None, max_length=255)

    balance_paid_amount: Optional[Money] = None
    balance_paid_date: Optional[date] = None
    balance_paid_by: Optional[str] = Field(None, max_length=100)
    employee_details_balance: Optional[str] = Field(None, max_length=255)

    revenue_override: Optional[Money] = None


# Response schemas

class FinancialsResponse(BaseModel):
    """Derived money fields, recomputed on every read."""
    km_travelled: int
    variable_freight: Decimal
    total_freight: Decimal
    balance_to_be_paid: Decimal
    variance: Decimal
    revenue: Decimal
    margin: Decimal
    margin_percentage: Decimal


class ChargesResponse(BaseModel):
    """Freight inputs in one shape for both stores; a store without a column reports null."""
    fixed_freight: Optional[Decimal] = None
    per_km_variable_rate: Optional[Decimal] = None
    toll_expenses: Optional[Decimal] = None
    parking_charges: Optional[Decimal] = None
    loading_charges: Optional[Decimal] = None
    unloading_charges: Optional[Decimal] = None
    other_charges: Optional[Decimal] = None
    advance_paid: Optional[Decimal] = None
    balance_paid_so_far: Optional[Decimal] = None
    revenue_override: Optional[Decimal] = None


class FixedTripDetails(BaseModel):
    vehicle_ids: List[int]
    driver_ids: List[int]
    primary_vehicle_id: int
    primary_driver_id: int
    vendor_id: Optional[int]
    replacement_driver_id: Optional[int]
    replacement_driver_name: Optional[str]
    replacement_driver_no: Optional[str]
    total_deliveries: Optional[int]
    total_deliveries_attempted: Optional[int]
    total_deliveries_done: Optional[int]
    handling_charges: Optional[Decimal]


class AdvancePayment(BaseModel):
    request_no: Optional[str] = None
    to_be_paid: Optional[Decimal] = None
    approved_amount: Optional[Decimal] = None
    approved_by: Optional[str] = None
    paid_amount: Optional[Decimal] = None
    paid_mode: Optional[PaymentMode] = None
    paid_date: Optional[date] = None
    paid_by: Optional[str] = None
    employee_details: Optional[str] = None


class BalancePayment(BaseModel):
    paid_amount: Optional[Decimal] = None
    paid_date: Optional[date] = None
    paid_by: Optional[str] = None
    employee_details: Optional[str] = None


class AdhocTripDetails(BaseModel):
    trip_no: str
    vehicle_number: str
    vehicle_type: Optional[str]
    vendor_name: str
    vendor_number: Optional[str]
    driver_name: str
    driver_number: str
    driver_aadhar_number: Optional[str]
    driver_licence_number: Optional[str]
    total_shipments_for_deliveries: Optional[int]
    total_shipment_deliveries_attempted: Optional[int]
    total_shipment_deliveries_done: Optional[int]
    fix_km: Optional[int]
    other_charges_remarks: Optional[str]
    advance: AdvancePayment
    balance: BalancePayment


class TransactionResponse(BaseModel):
    """One trip from either store, addressed by its unified id."""
    unified_id: str
    store: str
    local_id: int
    display_serial: Optional[int] = None
    trip_type: TripType
    transaction_date: date
    customer_id: int
    project_id: Optional[int]
    shift: Optional[str]
    arrival_time_at_hub: Optional[str]
    in_time_by_cust: Optional[str]
    out_time_from_hub: Optional[str]
    return_reporting_time: Optional[str]
    out_time_from: Optional[str]
    total_duty_hours: Optional[Decimal]
    opening_km: int
    closing_km: Optional[int]
    driver_aadhar_doc: Optional[str]
    driver_licence_doc: Optional[str]
    toll_expenses_doc: Optional[str]
    parking_charges_doc: Optional[str]
    status: TripStatus
    trip_close: bool
    remarks: Optional[str]
    created_at: datetime
    updated_at: datetime
    charges: ChargesResponse
    financials: FinancialsResponse
    fixed: Optional[FixedTripDetails] = None
    adhoc: Optional[AdhocTripDetails] = None


class TransactionPageResponse(BaseModel):
    """One window over the merged, sorted trip sequence."""
    items: List[TransactionResponse]
    total_approx: int
    offset: int
    limit: int
    warnings: List[str] = []


class LedgerSummaryResponse(BaseModel):
    transaction_count: int
    by_trip_type: Dict[str, int]
    closed_trips: int
    total_km: int
    total_freight: Decimal
    total_advance_paid: Decimal
    total_balance_to_be_paid: Decimal
    total_revenue: Decimal
    total_margin: Decimal
    warnings: List[str] = []


def error_fields(errors: List[Dict[str, Any]]) -> List[str]:
    """Field names named by pydantic error locations."""
    fields = []
    for error in errors:
        loc = error.get("loc") or ()
        fields.append(str(loc[0]) if loc else "__root__")
    return fields
