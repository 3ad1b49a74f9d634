"""
Audit Log Database Model.

Tracks every mutation routed through the transaction ledger.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from trip_ledger.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for ledger mutations.
    
    Events logged:
    - TRANSACTION_CREATED
    - TRANSACTION_UPDATED
    - TRANSACTION_DELETED
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)
    
    # What action was performed
    action = Column(String(100), nullable=False, index=True)
    
    # Which record was touched (unified transaction id, e.g. FIX-7)
    target_id = Column(String(40), index=True, nullable=True)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, target={self.target_id})>"
