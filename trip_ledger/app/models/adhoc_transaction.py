"""
Ad-hoc/Replacement trip store.

Used when the vehicle, vendor or driver is not in master data, so those
fields are free text with no referential integrity.
"""

from sqlalchemy import Column, Integer, String, Date, Enum

from trip_ledger.app.db.session import Base
from trip_ledger.app.models.trip_base import TripColumnsMixin, Money
from trip_ledger.app.models.trip_enums import TripType, PaymentMode


class AdhocTransaction(TripColumnsMixin, Base):
    """
    Ad-hoc or Replacement trip record.
    
    Holds the advance and balance payment sub-records alongside the freight
    inputs. ``revenue_override`` is the only persisted money value that feeds
    a derived field directly.
    """
    __tablename__ = "adhoc_transactions"

    trip_type = Column(Enum(TripType), default=TripType.ADHOC, nullable=False, index=True)
    trip_no = Column(String(50), nullable=False, index=True)

    # Free-text vehicle / vendor / driver
    vehicle_number = Column(String(20), nullable=False)
    vehicle_type = Column(String(50), nullable=True)
    vendor_name = Column(String(150), nullable=False)
    vendor_number = Column(String(10), nullable=True)
    driver_name = Column(String(100), nullable=False)
    driver_number = Column(String(10), nullable=False)
    driver_aadhar_number = Column(String(12), nullable=True)
    driver_licence_number = Column(String(30), nullable=True)

    # Shipment counters
    total_shipments_for_deliveries = Column(Integer, nullable=True)
    total_shipment_deliveries_attempted = Column(Integer, nullable=True)
    total_shipment_deliveries_done = Column(Integer, nullable=True)

    # Freight inputs
    fixed_freight = Column(Money, nullable=True)
    fix_km = Column(Integer, nullable=True)
    per_km_variable_rate = Column(Money, nullable=True)
    toll_expenses = Column(Money, nullable=True)
    parking_charges = Column(Money, nullable=True)
    loading_charges = Column(Money, nullable=True)
    unloading_charges = Column(Money, nullable=True)
    other_charges = Column(Money, nullable=True)
    other_charges_remarks = Column(String(255), nullable=True)

    # Advance sub-record
    advance_request_no = Column(String(50), nullable=True)
    advance_to_be_paid = Column(Money, nullable=True)
    advance_approved_amount = Column(Money, nullable=True)
    advance_approved_by = Column(String(100), nullable=True)
    advance_paid_amount = Column(Money, nullable=True)
    advance_paid_mode = Column(Enum(PaymentMode), nullable=True)
    advance_paid_date = Column(Date, nullable=True)
    advance_paid_by = Column(String(100), nullable=True)
    employee_details_advance = Column(String(255), nullable=True)

    # Balance sub-record
    balance_paid_amount = Column(Money, nullable=True)
    balance_paid_date = Column(Date, nullable=True)
    balance_paid_by = Column(String(100), nullable=True)
    employee_details_balance = Column(String(255), nullable=True)

    revenue_override = Column(Money, nullable=True)

    def __repr__(self):
        return f"<AdhocTransaction(id={self.id}, trip_no='{self.trip_no}', type='{self.trip_type.value}')>"
