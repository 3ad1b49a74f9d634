"""
Fixed-contract trip store.

Vehicles and drivers are master-data references kept as JSON id arrays;
the first entry of each array is the primary one shown in listings.
"""

from sqlalchemy import Column, Integer, String, JSON, Enum

from trip_ledger.app.db.session import Base
from trip_ledger.app.models.trip_base import TripColumnsMixin, Money
from trip_ledger.app.models.trip_enums import TripType


class FixedTransaction(TripColumnsMixin, Base):
    """
    Fixed trip record.
    
    Only ``TripType.FIXED`` rows live here. Derived money fields are not
    stored; they are computed on every read.
    """
    __tablename__ = "fixed_transactions"

    trip_type = Column(Enum(TripType), default=TripType.FIXED, nullable=False)

    # Master-data references
    vehicle_ids = Column(JSON, nullable=False)
    # Comma-fenced copy of vehicle_ids (",5,6,") for dialect-neutral membership filters
    vehicle_refs = Column(String(500), nullable=True, index=True)
    driver_ids = Column(JSON, nullable=False)
    vendor_id = Column(Integer, nullable=True, index=True)

    # Replacement driver override
    replacement_driver_id = Column(Integer, nullable=True)
    replacement_driver_name = Column(String(100), nullable=True)
    replacement_driver_no = Column(String(15), nullable=True)

    # Delivery counters
    total_deliveries = Column(Integer, nullable=True)
    total_deliveries_attempted = Column(Integer, nullable=True)
    total_deliveries_done = Column(Integer, nullable=True)

    # Freight inputs
    fixed_freight = Column(Money, nullable=True)
    toll_expenses = Column(Money, nullable=True)
    parking_charges = Column(Money, nullable=True)
    handling_charges = Column(Money, nullable=True)

    def __repr__(self):
        return f"<FixedTransaction(id={self.id}, date={self.transaction_date}, vehicles={self.vehicle_ids})>"
