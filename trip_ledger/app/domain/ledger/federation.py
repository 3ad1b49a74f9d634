"""
Federation Engine.

Presents the Fixed and Ad-hoc stores as one sorted, paginated collection and
routes point operations back to exactly one store through the unified id.

Consistency is best-effort across stores: a page is built from one query per
store with no shared transaction. An insert or delete racing with a list call
can move a record across a page boundary, so adjacent pages may repeat or
skip one record. Point operations are unaffected because they never depend on
row position.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from trip_ledger.app.core.config import settings
from trip_ledger.app.core.exceptions import AdapterIOError, UnknownStoreError, ValidationError
from trip_ledger.app.domain.ledger.adapters.adhoc import AdhocStoreAdapter
from trip_ledger.app.domain.ledger.adapters.fixed import FixedStoreAdapter
from trip_ledger.app.domain.ledger.adapters.interface import ITripStoreAdapter
from trip_ledger.app.domain.ledger.calculator import (
    DERIVED_FIELDS,
    DerivedFinancials,
    FinancialInputs,
    compute_financials,
)
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import StoreTag, UnifiedTransactionId, decode
from trip_ledger.app.models.trip_enums import TripType
from trip_ledger.app.services.audit import Actor

logger = logging.getLogger("trip_ledger.federation")

# Assigned by the server, never by a patch
SERVER_FIELDS = frozenset({"id", "local_id", "unified_id", "store", "display_serial", "created_at", "updated_at"})


@dataclass
class LedgerItem:
    """A store row annotated with its unified id and freshly derived money fields."""
    unified_id: UnifiedTransactionId
    row: Any
    inputs: FinancialInputs
    financials: DerivedFinancials
    details: Dict[str, Any]
    display_serial: Optional[int] = None


@dataclass
class FederatedPage:
    items: List[LedgerItem]
    total_approx: int
    offset: int
    limit: int
    warnings: List[str] = field(default_factory=list)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_ledger(items: List[LedgerItem]) -> List[LedgerItem]:
    """
    Order by (updated_at desc, transaction_date desc, store tag, local_id desc).

    Stable sorts applied from the least significant key up.
    """
    items = sorted(items, key=lambda item: item.unified_id.local_id, reverse=True)
    items.sort(key=lambda item: item.unified_id.store.sort_rank)
    items.sort(key=lambda item: item.row.transaction_date, reverse=True)
    items.sort(key=lambda item: _as_utc(item.row.updated_at), reverse=True)
    return items


class FederationEngine:
    """
    List/get/create/update/delete over Unified Transaction IDs.

    Holds no per-request state; every call queries the adapters afresh, so
    concurrent requests never serialize here.
    """

    def __init__(self, adapters: Iterable[ITripStoreAdapter]):
        self.adapters: Dict[StoreTag, ITripStoreAdapter] = {adapter.store: adapter for adapter in adapters}

    async def list(
        self,
        db: AsyncSession,
        trip_filter: Optional[TransactionFilter] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> FederatedPage:
        trip_filter = trip_filter or TransactionFilter()
        limit = settings.default_page_limit if limit is None else limit
        self._check_window(trip_filter, offset, limit)

        # Each store must supply everything that could land in the window
        window = offset + limit
        collected: List[LedgerItem] = []
        total_approx = 0
        warnings: List[str] = []

        for adapter in self.adapters.values():
            if not adapter.accepts(trip_filter):
                continue
            store_name = adapter.store.name.title()

            try:
                rows = await adapter.list_page(db, trip_filter, 0, window)
            except AdapterIOError as exc:
                logger.warning(
                    "Store degraded to empty page",
                    extra={"store": adapter.store.value, "operation": exc.operation},
                )
                warnings.append(f"{store_name} store unavailable; its trips are missing from this page")
                continue
            collected.extend(self._item(adapter, row) for row in rows)

            try:
                total_approx += await adapter.count(db, trip_filter)
            except AdapterIOError as exc:
                # Keep the rows already read; the total falls back to what was seen
                logger.warning(
                    "Store count unavailable",
                    extra={"store": adapter.store.value, "operation": exc.operation},
                )
                warnings.append(f"{store_name} store count unavailable; total_approx is a lower bound")
                total_approx += len(rows)

        page = sort_ledger(collected)[offset:window]
        for position, item in enumerate(page):
            item.display_serial = offset + position + 1

        return FederatedPage(
            items=page,
            total_approx=total_approx,
            offset=offset,
            limit=limit,
            warnings=warnings,
        )

    async def get(self, db: AsyncSession, unified_id: str) -> Optional[LedgerItem]:
        uid = decode(unified_id)
        adapter = self._adapter(uid.store)
        row = await adapter.get_by_local_id(db, uid.local_id)
        if row is None:
            return None
        return self._item(adapter, row)

    async def create(
        self, db: AsyncSession, draft: Mapping[str, Any], actor: Optional[Actor] = None
    ) -> LedgerItem:
        if not isinstance(draft, Mapping):
            raise ValidationError("Transaction body must be an object", fields=["__root__"])

        try:
            trip_type = TripType(draft.get("trip_type"))
        except ValueError:
            raise ValidationError(
                "trip_type must be one of Fixed, Adhoc, Replacement", fields=["trip_type"]
            ) from None

        self._reject_computed_fields(draft)
        adapter = self._adapter(StoreTag.for_trip_type(trip_type))
        row = await adapter.insert(db, dict(draft), actor=actor)
        return self._item(adapter, row)

    async def update(
        self,
        db: AsyncSession,
        unified_id: str,
        patch: Mapping[str, Any],
        actor: Optional[Actor] = None,
    ) -> Optional[LedgerItem]:
        uid = decode(unified_id)
        if not isinstance(patch, Mapping):
            raise ValidationError("Patch body must be an object", fields=["__root__"])

        self._reject_computed_fields(patch)
        adapter = self._adapter(uid.store)
        row = await adapter.update_by_local_id(db, uid.local_id, dict(patch), actor=actor)
        if row is None:
            return None
        return self._item(adapter, row)

    async def delete(self, db: AsyncSession, unified_id: str, actor: Optional[Actor] = None) -> bool:
        uid = decode(unified_id)
        return await self._adapter(uid.store).delete_by_local_id(db, uid.local_id, actor=actor)

    def _adapter(self, store: StoreTag) -> ITripStoreAdapter:
        adapter = self.adapters.get(store)
        if adapter is None:
            raise UnknownStoreError(store.value)
        return adapter

    def _item(self, adapter: ITripStoreAdapter, row: Any) -> LedgerItem:
        inputs = adapter.financial_inputs(row)
        return LedgerItem(
            unified_id=UnifiedTransactionId(adapter.store, row.id),
            row=row,
            inputs=inputs,
            financials=compute_financials(inputs),
            details=adapter.details(row),
        )

    @staticmethod
    def _reject_computed_fields(values: Mapping[str, Any]) -> None:
        derived = sorted(DERIVED_FIELDS & set(values))
        if derived:
            raise ValidationError(
                "Derived money fields are computed by the server and cannot be supplied",
                fields=derived,
            )
        server = sorted(SERVER_FIELDS & set(values))
        if server:
            raise ValidationError("Server-assigned fields cannot be supplied", fields=server)

    @staticmethod
    def _check_window(trip_filter: TransactionFilter, offset: int, limit: int) -> None:
        if limit < 1 or limit > settings.max_page_limit:
            raise ValidationError(
                f"limit must be between 1 and {settings.max_page_limit}", fields=["limit"]
            )
        if offset < 0:
            raise ValidationError("offset must not be negative", fields=["offset"])
        if (
            trip_filter.from_date is not None
            and trip_filter.to_date is not None
            and trip_filter.from_date > trip_filter.to_date
        ):
            raise ValidationError("from_date must not be after to_date", fields=["from_date", "to_date"])


federation_engine = FederationEngine([FixedStoreAdapter(), AdhocStoreAdapter()])


def get_federation_engine() -> FederationEngine:
    """FastAPI dependency returning the shared, stateless engine."""
    return federation_engine
