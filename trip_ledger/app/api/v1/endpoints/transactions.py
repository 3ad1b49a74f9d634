"""
Daily Trip Transactions API Endpoints.

One collection over both trip stores. Records are addressed only by their
unified id (``FIX-12``, ``ADH-3``); the row position in a list is for display
and never used to look a record up.
"""

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from trip_ledger.app.core.dependencies import get_current_user
from trip_ledger.app.core.exceptions import ResourceNotFoundError
from trip_ledger.app.db.session import get_db
from trip_ledger.app.domain.ledger.federation import FederationEngine, LedgerItem, get_federation_engine
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import decode
from trip_ledger.app.domain.ledger.reporting import summarize
from trip_ledger.app.models.trip_enums import TripStatus, TripType
from trip_ledger.app.schemas.transaction import (
    ChargesResponse,
    FinancialsResponse,
    LedgerSummaryResponse,
    TransactionPageResponse,
    TransactionResponse,
)
from trip_ledger.app.schemas.audit import AuditLogResponse, AuditTrailResponse
from trip_ledger.app.services.audit import Actor, get_audit_trail

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def build_transaction_response(item: LedgerItem) -> TransactionResponse:
    row = item.row
    return TransactionResponse(
        unified_id=str(item.unified_id),
        store=item.unified_id.store.name.title(),
        local_id=item.unified_id.local_id,
        display_serial=item.display_serial,
        trip_type=row.trip_type,
        transaction_date=row.transaction_date,
        customer_id=row.customer_id,
        project_id=row.project_id,
        shift=row.shift,
        arrival_time_at_hub=row.arrival_time_at_hub,
        in_time_by_cust=row.in_time_by_cust,
        out_time_from_hub=row.out_time_from_hub,
        return_reporting_time=row.return_reporting_time,
        out_time_from=row.out_time_from,
        total_duty_hours=row.total_duty_hours,
        opening_km=row.opening_km,
        closing_km=row.closing_km,
        driver_aadhar_doc=row.driver_aadhar_doc,
        driver_licence_doc=row.driver_licence_doc,
        toll_expenses_doc=row.toll_expenses_doc,
        parking_charges_doc=row.parking_charges_doc,
        status=row.status,
        trip_close=row.trip_close,
        remarks=row.remarks,
        created_at=row.created_at,
        updated_at=row.updated_at,
        charges=ChargesResponse(**_charges(item)),
        financials=FinancialsResponse(**item.financials.as_dict()),
        **item.details,
    )


def _charges(item: LedgerItem) -> Dict[str, Any]:
    values = asdict(item.inputs)
    values.pop("opening_km")
    values.pop("closing_km")
    return values


def trip_filter_params(
    from_date: Optional[date] = Query(None, description="Earliest transaction date (inclusive)"),
    to_date: Optional[date] = Query(None, description="Latest transaction date (inclusive)"),
    customer_id: Optional[int] = Query(None),
    project_id: Optional[int] = Query(None),
    trip_status: Optional[TripStatus] = Query(None, alias="status"),
    trip_close: Optional[bool] = Query(None),
    trip_type: Optional[List[TripType]] = Query(None),
    vehicle_id: Optional[int] = Query(None, description="Master-data vehicle on a Fixed trip"),
    vehicle_number: Optional[str] = Query(None, description="Registration number on an Ad-hoc trip"),
) -> TransactionFilter:
    """Query-string filter shared by the list and summary endpoints."""
    return TransactionFilter(
        from_date=from_date,
        to_date=to_date,
        customer_id=customer_id,
        project_id=project_id,
        status=trip_status,
        trip_close=trip_close,
        trip_types=frozenset(trip_type) if trip_type else None,
        vehicle_id=vehicle_id,
        vehicle_number=(vehicle_number or "").strip() or None,
    )


@router.get("", response_model=TransactionPageResponse)
async def list_transactions(
    trip_filter: TransactionFilter = Depends(trip_filter_params),
    offset: int = Query(0),
    limit: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    """
    List trips from both stores as one collection.

    Sorted by most recently updated, then by transaction date. ``warnings``
    names any store whose trips could not be read for this page.
    """
    page = await engine.list(db, trip_filter, offset=offset, limit=limit)

    return TransactionPageResponse(
        items=[build_transaction_response(item) for item in page.items],
        total_approx=page.total_approx,
        offset=page.offset,
        limit=page.limit,
        warnings=page.warnings,
    )


@router.get("/summary", response_model=LedgerSummaryResponse)
async def transactions_summary(
    trip_filter: TransactionFilter = Depends(trip_filter_params),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    """Totals for trip counts, kilometres and money across both stores."""
    summary = await summarize(engine, db, trip_filter)
    return LedgerSummaryResponse(**asdict(summary))


@router.get("/{unified_id}", response_model=TransactionResponse)
async def get_transaction(
    unified_id: str = Path(..., description="Unified transaction id, e.g. FIX-12"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    item = await engine.get(db, unified_id)
    if item is None:
        raise ResourceNotFoundError("Transaction", unified_id)
    return build_transaction_response(item)


@router.get("/{unified_id}/audit", response_model=AuditTrailResponse)
async def get_transaction_audit(
    unified_id: str = Path(..., description="Unified transaction id, e.g. FIX-12"),
    limit: int = Query(100, ge=1, le=500),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Mutations recorded against a transaction, most recent first.

    Still answers after the transaction is deleted; an id with no history
    returns an empty list.
    """
    uid = str(decode(unified_id))
    logs = await get_audit_trail(db, target_id=uid, limit=limit)
    return AuditTrailResponse(
        unified_id=uid,
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs),
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    draft: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    """
    Record a trip.

    ``trip_type`` picks the store: Fixed goes to the fixed-contract store,
    Adhoc and Replacement to the ad-hoc store. Derived money fields are
    computed here and may not be supplied. The audit row commits with the trip.
    """
    item = await engine.create(db, draft, actor=Actor.from_token(current_user))
    return build_transaction_response(item)


@router.put("/{unified_id}", response_model=TransactionResponse)
async def update_transaction(
    unified_id: str = Path(..., description="Unified transaction id, e.g. ADH-3"),
    patch: Dict[str, Any] = Body(...),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    """
    Partially update a trip.

    The patched record is re-validated as a whole. ``trip_type`` cannot change
    and server-assigned or derived fields are rejected.
    """
    item = await engine.update(db, unified_id, patch, actor=Actor.from_token(current_user))
    if item is None:
        raise ResourceNotFoundError("Transaction", unified_id)
    return build_transaction_response(item)


@router.delete("/{unified_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    unified_id: str = Path(..., description="Unified transaction id"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engine: FederationEngine = Depends(get_federation_engine),
):
    deleted = await engine.delete(db, unified_id, actor=Actor.from_token(current_user))
    if not deleted:
        raise ResourceNotFoundError("Transaction", unified_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
