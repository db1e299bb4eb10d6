"""Dashboard aggregator - fixed analytical fan-out plus executive brief.

``DashboardAggregator.refresh()`` resolves one reference date, issues the
four panel queries concurrently through the bridge, derives KPIs and asks
the synthesizer for a short brief. Bridge failures degrade single panels;
a brief failure leaves the numbers intact.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from datetime import UTC, date, datetime

from entities.shared.protocols import BridgeExecutor, InsightSynthesizer
from entities.shared.schema_context import get_schema_context
from entities.sql_normalizer import apply_session_preamble, normalize
from models import DashboardRefresh, DashboardStats, ResultRow, SchemaContext

from .kpis import (
    build_composition,
    build_kpis,
    build_sales_yoy,
    build_top_buyers,
    parse_reference_date,
)
from .queries import (
    REFERENCE_DATE_SQL,
    ReportingWindows,
    composition_sql,
    kpi_sql,
    sales_yoy_sql,
    top_buyers_sql,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_BRIEF = "Executive brief is unavailable right now; the figures above are current."


class DashboardAggregator:
    """Builds ``DashboardRefresh`` snapshots with debounce and supersede guards.

    Args:
        bridge: Fail-soft SQL executor.
        synthesizer: Insight synthesizer used for the executive brief.
        database: Database selected by the ``USE`` preamble.
        schema: Schema context for composition labels. Defaults to the
            packaged context.
        cooldown_seconds: Minimum gap between completed refreshes.
        window_days: Length of the trailing window.
        segment_keyword: Product description keyword for the top-buyer panel.
        top_buyer_limit: Number of customers kept in the top-buyer panel.
        low_stock_threshold: ``OnHand`` at or below this counts as low stock.
        brief_sample_size: Maximum rows sent to the synthesizer.
        clock: Monotonic clock used for debounce and supersede checks.
        today: Wall-clock date used when the reference date is unavailable.
    """

    def __init__(
        self,
        bridge: BridgeExecutor,
        synthesizer: InsightSynthesizer,
        *,
        database: str,
        schema: SchemaContext | None = None,
        cooldown_seconds: float = 2.0,
        window_days: int = 30,
        segment_keyword: str = "ENAMEL",
        top_buyer_limit: int = 5,
        low_stock_threshold: int = 5,
        brief_sample_size: int = 15,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._bridge = bridge
        self._synthesizer = synthesizer
        self._database = database
        self._schema = schema or get_schema_context()
        self._cooldown_seconds = cooldown_seconds
        self._window_days = window_days
        self._segment_keyword = segment_keyword
        self._top_buyer_limit = top_buyer_limit
        self._low_stock_threshold = low_stock_threshold
        self._brief_sample_size = brief_sample_size
        self._clock = clock
        self._today = today

        self._lock = threading.Lock()
        self._latest: DashboardRefresh | None = None
        self._latest_started: float | None = None
        self._latest_completed: float | None = None

    @property
    def latest(self) -> DashboardRefresh | None:
        """The most recent stored refresh, if any."""
        with self._lock:
            return self._latest

    async def _query(self, sql: str) -> list[ResultRow]:
        statement = apply_session_preamble(normalize(sql), self._database)
        try:
            return await self._bridge.execute(statement)
        except Exception:
            logger.exception("Dashboard query raised; panel will be empty")
            return []

    async def _reference_date(self) -> date:
        rows = await self._query(REFERENCE_DATE_SQL)
        return parse_reference_date(rows, self._today)

    def _skip_if_cooling_down(self) -> DashboardRefresh | None:
        with self._lock:
            if self._latest is None or self._latest_completed is None:
                return None
            elapsed = self._clock() - self._latest_completed
            if elapsed < self._cooldown_seconds:
                logger.info("Dashboard refresh skipped (%.2fs since last refresh)", elapsed)
                return self._latest.model_copy(update={"skipped": True})
            return None

    async def refresh(self) -> DashboardRefresh:
        """Rebuild every dashboard panel and the executive brief.

        Returns:
            A fresh ``DashboardRefresh``, or the previous one marked
            ``skipped`` when called inside the cool-down window.
        """
        skipped = self._skip_if_cooling_down()
        if skipped is not None:
            return skipped

        started = self._clock()
        reference = await self._reference_date()
        windows = ReportingWindows.from_reference(reference, self._window_days)
        logger.info(
            "Refreshing dashboard for %s (window %s..%s)",
            reference.isoformat(),
            windows.current_start.isoformat(),
            windows.current_end.isoformat(),
        )

        yoy_rows, composition_rows, buyer_rows, kpi_rows = await asyncio.gather(
            self._query(sales_yoy_sql(windows)),
            self._query(composition_sql(windows)),
            self._query(top_buyers_sql(windows, self._segment_keyword)),
            self._query(kpi_sql(windows, self._low_stock_threshold)),
        )

        stats = DashboardStats(
            sales_yoy=build_sales_yoy(yoy_rows, windows),
            enamel_trend=build_top_buyers(buyer_rows, self._top_buyer_limit),
            composition=build_composition(composition_rows, self._schema),
            active_date=reference.isoformat(),
            kpis=build_kpis(kpi_rows),
        )

        brief = PLACEHOLDER_BRIEF
        brief_insight = None
        try:
            brief_insight = await self._synthesizer.synthesize(
                brief_rows(stats), self._brief_sample_size
            )
            brief = brief_insight.summary
        except Exception:
            logger.exception("Executive brief generation failed; using placeholder")

        result = DashboardRefresh(
            stats=stats,
            brief=brief,
            brief_insight=brief_insight,
            refreshed_at=datetime.now(UTC),
        )
        return self._store(result, started)

    def _store(self, result: DashboardRefresh, started: float) -> DashboardRefresh:
        with self._lock:
            if self._latest_started is not None and started < self._latest_started:
                logger.info("Discarding superseded dashboard refresh")
                return result
            self._latest = result
            self._latest_started = started
            self._latest_completed = self._clock()
        return result


def brief_rows(stats: DashboardStats, limit: int = 5) -> list[ResultRow]:
    """Flatten KPIs, top composition slices and top buyers for the synthesizer."""
    kpis = stats.kpis
    rows: list[ResultRow] = [
        {
            "section": "kpis",
            "reference_date": stats.active_date,
            "total_revenue": kpis.total_revenue,
            "active_customers": kpis.active_customers,
            "low_stock_count": kpis.low_stock_count,
            "avg_ticket": kpis.avg_ticket,
            "growth_rate_percent": kpis.growth_rate_percent,
        }
    ]
    rows.extend(
        {"section": "composition", "label": item.label, "value": item.value}
        for item in stats.composition[:limit]
    )
    rows.extend(
        {
            "section": "top_buyers",
            "customer": item.customer,
            "year": item.year,
            "revenue": item.revenue,
        }
        for item in stats.enamel_trend[: limit * 2]
    )
    return rows
