"""
Ledger summary report.

Totals over the federated list, read page by page through the engine so the
report sees exactly what list callers see, warnings included.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from trip_ledger.app.core.config import settings
from trip_ledger.app.domain.ledger.calculator import ZERO, round_money, to_decimal
from trip_ledger.app.domain.ledger.filters import TransactionFilter


@dataclass
class LedgerSummary:
    transaction_count: int = 0
    by_trip_type: Dict[str, int] = field(default_factory=dict)
    closed_trips: int = 0
    total_km: int = 0
    total_freight: Decimal = ZERO
    total_advance_paid: Decimal = ZERO
    total_balance_to_be_paid: Decimal = ZERO
    total_revenue: Decimal = ZERO
    total_margin: Decimal = ZERO
    warnings: List[str] = field(default_factory=list)


async def summarize(
    engine,
    db: AsyncSession,
    trip_filter: Optional[TransactionFilter] = None,
    page_size: Optional[int] = None,
) -> LedgerSummary:
    """
    Aggregate every trip matching ``trip_filter``.

    Each page is an independent federated read, so a record moved across a
    page boundary by a concurrent write may show up twice; ids already
    counted are skipped.
    """
    page_size = page_size or settings.summary_page_size
    summary = LedgerSummary()
    seen: Set[str] = set()
    offset = 0

    while True:
        page = await engine.list(db, trip_filter, offset=offset, limit=page_size)
        for warning in page.warnings:
            if warning not in summary.warnings:
                summary.warnings.append(warning)

        for item in page.items:
            uid = str(item.unified_id)
            if uid in seen:
                continue
            seen.add(uid)

            trip_type = item.row.trip_type.value
            summary.transaction_count += 1
            summary.by_trip_type[trip_type] = summary.by_trip_type.get(trip_type, 0) + 1
            if item.row.trip_close:
                summary.closed_trips += 1

            financials = item.financials
            summary.total_km += financials.km_travelled
            summary.total_freight += financials.total_freight
            summary.total_advance_paid += to_decimal(item.inputs.advance_paid)
            summary.total_balance_to_be_paid += financials.balance_to_be_paid
            summary.total_revenue += financials.revenue
            summary.total_margin += financials.margin

        if len(page.items) < page_size:
            break
        offset += page_size

    summary.total_freight = round_money(summary.total_freight)
    summary.total_advance_paid = round_money(summary.total_advance_paid)
    summary.total_balance_to_be_paid = round_money(summary.total_balance_to_be_paid)
    summary.total_revenue = round_money(summary.total_revenue)
    summary.total_margin = round_money(summary.total_margin)
    return summary
