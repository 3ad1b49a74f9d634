from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from trip_ledger.app.domain.ledger.calculator import FinancialInputs
from trip_ledger.app.domain.ledger.filters import TransactionFilter
from trip_ledger.app.domain.ledger.identity import StoreTag
from trip_ledger.app.models.trip_enums import TripType
from trip_ledger.app.services.audit import Actor


class ITripStoreAdapter(ABC):
    store: StoreTag
    trip_types: FrozenSet[TripType]

    @abstractmethod
    def accepts(self, trip_filter: TransactionFilter) -> bool:
        """Whether any row in this store could match ``trip_filter``."""

    @abstractmethod
    async def list_page(
        self,
        db_session: AsyncSession,
        trip_filter: TransactionFilter,
        offset: int,
        limit: int,
    ) -> List[Any]: ...

    @abstractmethod
    async def count(self, db_session: AsyncSession, trip_filter: TransactionFilter) -> int: ...

    @abstractmethod
    async def get_by_local_id(self, db_session: AsyncSession, local_id: int) -> Optional[Any]: ...

    @abstractmethod
    async def insert(
        self, db_session: AsyncSession, draft: Dict[str, Any], actor: Optional[Actor] = None
    ) -> Any: ...

    @abstractmethod
    async def update_by_local_id(
        self,
        db_session: AsyncSession,
        local_id: int,
        patch: Dict[str, Any],
        actor: Optional[Actor] = None,
    ) -> Optional[Any]: ...

    @abstractmethod
    async def delete_by_local_id(
        self, db_session: AsyncSession, local_id: int, actor: Optional[Actor] = None
    ) -> bool: ...

    @abstractmethod
    def financial_inputs(self, row: Any) -> FinancialInputs: ...

    @abstractmethod
    def details(self, row: Any) -> Dict[str, Any]: ...
