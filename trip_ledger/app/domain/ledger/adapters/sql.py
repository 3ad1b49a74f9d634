"""
SQLAlchemy implementation shared by both trip stores.

Subclasses bind a model, a draft schema and the column mapping onto
calculator inputs. Every mutation commits once on the caller's session,
together with its audit row. Reads go through the bounded retry policy,
writes never do.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from trip_ledger.app.core.exceptions import AdapterIOError, ValidationError, jsonable_errors
from trip_ledger.app.core.reliability import ReadRetryPolicy, read_retry_policy
from trip_ledger.app.domain.ledger.adapters.interface import ITripStoreAdapter
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import encode
from trip_ledger.app.models.trip_base import utcnow
from trip_ledger.app.models.trip_enums import TripType
from trip_ledger.app.schemas.transaction import error_fields
from trip_ledger.app.services.audit import Actor, AuditAction, stage_event

logger = logging.getLogger("trip_ledger.stores")

T = TypeVar("T")


class SqlTripStoreAdapter(ITripStoreAdapter):
    model: Type[Any]
    draft_schema: Type[BaseModel]
    trip_types: FrozenSet[TripType]

    def __init__(self, retry_policy: Optional[ReadRetryPolicy] = None):
        self.retry_policy = retry_policy or read_retry_policy

    # Reads

    async def list_page(
        self,
        db_session: AsyncSession,
        trip_filter: TransactionFilter,
        offset: int,
        limit: int,
    ) -> List[Any]:
        return await self._read(
            db_session, "list_page", lambda: self._fetch_page(db_session, trip_filter, offset, limit)
        )

    async def count(self, db_session: AsyncSession, trip_filter: TransactionFilter) -> int:
        return await self._read(db_session, "count", lambda: self._fetch_count(db_session, trip_filter))

    async def get_by_local_id(self, db_session: AsyncSession, local_id: int) -> Optional[Any]:
        return await self._read(
            db_session, "get", lambda: self._fetch_one(db_session, local_id), local_id=local_id
        )

    async def _fetch_page(
        self,
        db_session: AsyncSession,
        trip_filter: TransactionFilter,
        offset: int,
        limit: int,
    ) -> List[Any]:
        stmt = self._apply_filter(select(self.model), trip_filter)
        stmt = (
            stmt.order_by(
                self.model.updated_at.desc(),
                self.model.transaction_date.desc(),
                self.model.id.desc(),
            )
            .offset(offset)
            .limit(limit)
        )
        result = await db_session.execute(stmt)
        return list(result.scalars().all())

    async def _fetch_count(self, db_session: AsyncSession, trip_filter: TransactionFilter) -> int:
        stmt = self._apply_filter(select(func.count()).select_from(self.model), trip_filter)
        result = await db_session.execute(stmt)
        return int(result.scalar_one())

    async def _fetch_one(self, db_session: AsyncSession, local_id: int) -> Optional[Any]:
        result = await db_session.execute(select(self.model).where(self.model.id == local_id))
        return result.scalar_one_or_none()

    def _apply_filter(self, stmt, trip_filter: TransactionFilter):
        model = self.model
        if trip_filter.from_date is not None:
            stmt = stmt.where(model.transaction_date >= trip_filter.from_date)
        if trip_filter.to_date is not None:
            stmt = stmt.where(model.transaction_date <= trip_filter.to_date)
        if trip_filter.customer_id is not None:
            stmt = stmt.where(model.customer_id == trip_filter.customer_id)
        if trip_filter.project_id is not None:
            stmt = stmt.where(model.project_id == trip_filter.project_id)
        if trip_filter.status is not None:
            stmt = stmt.where(model.status == trip_filter.status)
        if trip_filter.trip_close is not None:
            stmt = stmt.where(model.trip_close == trip_filter.trip_close)
        if trip_filter.trip_types is not None:
            stmt = stmt.where(model.trip_type.in_(sorted(trip_filter.trip_types & self.trip_types)))
        return self._apply_store_filter(stmt, trip_filter)

    def _apply_store_filter(self, stmt, trip_filter: TransactionFilter):
        """Criteria that only make sense against this store's own columns."""
        return stmt

    def accepts(self, trip_filter: TransactionFilter) -> bool:
        return trip_filter.admits(self.trip_types)

    # Writes

    async def insert(
        self, db_session: AsyncSession, draft: Dict[str, Any], actor: Optional[Actor] = None
    ) -> Any:
        validated = self.validate_draft(draft)
        now = utcnow()
        row = self.model(**self._columns(validated), created_at=now, updated_at=now)
        self._prepare_row(row)

        async def write():
            db_session.add(row)
            # Flush first so the audit row can name the new key
            await db_session.flush()
            stage_event(
                db_session,
                AuditAction.TRANSACTION_CREATED,
                actor=actor,
                target_id=encode(self.store, row.id),
                metadata={"store": self.store.value, "trip_type": row.trip_type.value},
            )
            await db_session.commit()
            await db_session.refresh(row)
            return row

        row = await self._guarded(db_session, "insert", write)
        logger.info("Trip inserted", extra={"store": self.store.value, "local_id": row.id})
        return row

    async def update_by_local_id(
        self,
        db_session: AsyncSession,
        local_id: int,
        patch: Dict[str, Any],
        actor: Optional[Actor] = None,
    ) -> Optional[Any]:
        row = await self.get_by_local_id(db_session, local_id)
        if row is None:
            return None

        if "trip_type" in patch and patch["trip_type"] != row.trip_type.value:
            raise ValidationError(
                f"trip_type cannot be changed from {row.trip_type.value}", fields=["trip_type"]
            )

        # Validate the record as it will look after the patch, not just the patch
        merged = {**self.snapshot(row), **patch}
        columns = self._columns(self.validate_draft(merged))

        async def write():
            for field in patch:
                setattr(row, field, columns[field])
            row.updated_at = utcnow()
            self._prepare_row(row)
            stage_event(
                db_session,
                AuditAction.TRANSACTION_UPDATED,
                actor=actor,
                target_id=encode(self.store, local_id),
                metadata={"store": self.store.value, "fields": sorted(patch)},
            )
            await db_session.commit()
            await db_session.refresh(row)
            return row

        row = await self._guarded(db_session, "update", write, local_id=local_id)
        logger.info(
            "Trip updated",
            extra={"store": self.store.value, "local_id": local_id, "fields": sorted(patch)},
        )
        return row

    async def delete_by_local_id(
        self, db_session: AsyncSession, local_id: int, actor: Optional[Actor] = None
    ) -> bool:
        async def write():
            result = await db_session.execute(delete(self.model).where(self.model.id == local_id))
            if result.rowcount == 0:
                await db_session.rollback()
                return False
            stage_event(
                db_session,
                AuditAction.TRANSACTION_DELETED,
                actor=actor,
                target_id=encode(self.store, local_id),
                metadata={"store": self.store.value},
            )
            await db_session.commit()
            return True

        deleted = await self._guarded(db_session, "delete", write, local_id=local_id)
        if deleted:
            logger.info("Trip deleted", extra={"store": self.store.value, "local_id": local_id})
        return deleted

    def _prepare_row(self, row: Any) -> None:
        """Hook for store-maintained columns, run before every insert and update."""

    # Validation

    def validate_draft(self, data: Dict[str, Any]) -> BaseModel:
        try:
            return self.draft_schema.model_validate(data)
        except PydanticValidationError as exc:
            errors = exc.errors()
            raise ValidationError(
                f"Invalid {self.store.name.title()} trip",
                fields=error_fields(errors),
                errors=jsonable_errors(errors),
            ) from None

    def snapshot(self, row: Any) -> Dict[str, Any]:
        """Current row values keyed by draft field name."""
        values = {name: getattr(row, name) for name in self.draft_schema.model_fields}
        values["trip_type"] = row.trip_type.value
        return values

    def _columns(self, validated: BaseModel) -> Dict[str, Any]:
        values = validated.model_dump()
        values["trip_type"] = TripType(values["trip_type"])
        return values

    # Failure handling

    async def _read(
        self,
        db_session: AsyncSession,
        operation: str,
        func: Callable[[], Awaitable[T]],
        local_id: Optional[int] = None,
    ) -> T:
        return await self.retry_policy.call(
            lambda: self._guarded(db_session, operation, func, local_id=local_id)
        )

    async def _guarded(
        self,
        db_session: AsyncSession,
        operation: str,
        func: Callable[[], Awaitable[T]],
        local_id: Optional[int] = None,
    ) -> T:
        try:
            return await func()
        except SQLAlchemyError as exc:
            await db_session.rollback()
            logger.error(
                "Store call failed",
                extra={
                    "store": self.store.value,
                    "operation": operation,
                    "local_id": local_id,
                    "error": type(exc).__name__,
                },
            )
            raise AdapterIOError(
                self.store.name.title(), operation, local_id=local_id, reason=type(exc).__name__
            ) from exc
