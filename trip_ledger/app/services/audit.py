"""
Audit logging service for ledger mutations.

Audit rows are staged on the caller's session and land with the same commit
as the trip write they describe, so a mutation and its audit row are stored
together or not at all.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from trip_ledger.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    TRANSACTION_CREATED = "TRANSACTION_CREATED"
    TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"


@dataclass(frozen=True)
class Actor:
    """Who asked for a mutation. Both fields are empty for system writes."""
    user_id: Optional[int] = None
    username: Optional[str] = None

    @classmethod
    def from_token(cls, payload: Dict[str, Any]) -> "Actor":
        return cls(user_id=payload.get("user_id"), username=payload.get("sub"))


SYSTEM_ACTOR = Actor()


def stage_event(
    db: AsyncSession,
    action: str,
    actor: Optional[Actor] = None,
    target_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Add a ledger event to the session without committing.

    Args:
        db: Session the mutation is running on
        action: Action being performed (use AuditAction constants)
        actor: User performing the action; None records a system write
        target_id: Unified transaction id of the record acted upon
        metadata: Additional context as JSON

    Returns:
        Pending AuditLog instance
    """
    actor = actor or SYSTEM_ACTOR
    audit_log = AuditLog(
        actor_id=actor.user_id,
        actor_username=actor.username,
        action=action,
        target_id=target_id,
        meta_data=metadata,
    )

    db.add(audit_log)
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    target_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_id:
        query = query.where(AuditLog.target_id == target_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
