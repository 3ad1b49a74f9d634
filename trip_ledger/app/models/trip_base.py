"""
Columns shared by both trip stores.

Each store keeps its own table and its own auto-incrementing key; only the
column definitions are shared.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Numeric, Enum, Text

from trip_ledger.app.models.trip_enums import TripStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


Money = Numeric(12, 2)


class TripColumnsMixin:
    """Base trip columns present in both the Fixed and the Ad-hoc table."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    transaction_date = Column(Date, nullable=False, index=True)
    customer_id = Column(Integer, nullable=False, index=True)
    project_id = Column(Integer, nullable=True, index=True)
    shift = Column(String(20), nullable=True)

    # Duty timestamps as captured on the trip sheet (HH:MM)
    arrival_time_at_hub = Column(String(8), nullable=True)
    in_time_by_cust = Column(String(8), nullable=True)
    out_time_from_hub = Column(String(8), nullable=True)
    return_reporting_time = Column(String(8), nullable=True)
    out_time_from = Column(String(8), nullable=True)
    total_duty_hours = Column(Numeric(6, 2), nullable=True)

    opening_km = Column(Integer, nullable=False)
    closing_km = Column(Integer, nullable=True)

    # Opaque identifiers owned by the upload service
    driver_aadhar_doc = Column(String(255), nullable=True)
    driver_licence_doc = Column(String(255), nullable=True)
    toll_expenses_doc = Column(String(255), nullable=True)
    parking_charges_doc = Column(String(255), nullable=True)

    status = Column(Enum(TripStatus), default=TripStatus.PENDING, nullable=False, index=True)
    trip_close = Column(Boolean, default=False, nullable=False)
    remarks = Column(Text, nullable=True)

    # Server-assigned, restamped on every mutation
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
