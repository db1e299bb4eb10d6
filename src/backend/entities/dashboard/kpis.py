"""Pure derivations from raw dashboard rows.

Nothing here touches the network; every function takes bridge rows and
returns model objects, so each panel can be tested in isolation.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import date, timedelta

from models import (
    CompositionSlice,
    DashboardKpis,
    ResultRow,
    SalesYoYPoint,
    SchemaContext,
    TopBuyerRevenue,
)

from .queries import ReportingWindows, shift_years

logger = logging.getLogger(__name__)


def to_number(value: object) -> float:
    """Best-effort numeric coercion; anything unusable counts as zero.

    NaN and infinities count as unusable.
    """
    if isinstance(value, bool | int | float):
        number = value
    elif isinstance(value, str):
        number = value.strip()
    else:
        return 0.0
    try:
        result = float(number)
    except (ValueError, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def compute_growth_rate(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``.

    A zero ``previous`` is treated as 1, so 150 against 0 reports 15000%.
    """
    return (current - previous) / (previous or 1) * 100


def average_ticket(total_revenue: float, ticket_count: int) -> float:
    """Revenue per distinct transaction number, 0 with no tickets."""
    if ticket_count <= 0:
        return 0.0
    return total_revenue / ticket_count


def parse_reference_date(
    rows: list[ResultRow],
    today: Callable[[], date] = date.today,
) -> date:
    """Read ``max_date`` from the first row, falling back to ``today()``.

    Accepts ISO dates and datetimes (``2026-03-15`` or ``2026-03-15T10:22:00``);
    only the first ten characters are parsed.
    """
    if rows:
        raw = rows[0].get("max_date")
        if raw is None and rows[0]:
            raw = next(iter(rows[0].values()))
        if isinstance(raw, str) and len(raw) >= 10:
            try:
                return date.fromisoformat(raw[:10])
            except ValueError:
                logger.warning("Unparseable reference date %r; using today", raw)
    fallback = today()
    logger.info("Reference date falls back to %s", fallback.isoformat())
    return fallback


def _row_day(row: ResultRow) -> date | None:
    raw = row.get("day")
    if not isinstance(raw, str) or len(raw) < 10:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def build_sales_yoy(rows: list[ResultRow], windows: ReportingWindows) -> list[SalesYoYPoint]:
    """Pair each day of the current window with the same calendar day one year earlier.

    Every day of the window gets a point, zero-filled where no sales were
    recorded. 29 February is compared with 28 February of the prior year.
    """
    current: dict[date, float] = {}
    previous: dict[date, float] = {}
    for row in rows:
        day = _row_day(row)
        if day is None:
            continue
        revenue = to_number(row.get("revenue"))
        if windows.current_start <= day <= windows.current_end:
            current[day] = current.get(day, 0.0) + revenue
        elif windows.previous_start <= day <= windows.previous_end:
            previous[day] = previous.get(day, 0.0) + revenue

    points = []
    for offset in range(windows.days):
        day = windows.current_start + timedelta(days=offset)
        points.append(
            SalesYoYPoint(
                day=day.isoformat(),
                current_year=current.get(day, 0.0),
                last_year=previous.get(shift_years(day, -1), 0.0),
            )
        )
    return points


def build_composition(rows: list[ResultRow], schema: SchemaContext) -> list[CompositionSlice]:
    """Label transaction-type totals, largest first."""
    slices = []
    for row in rows:
        code = row.get("code")
        if code is None:
            continue
        label = schema.label_for("AUDIT", "TRANSACTIONTYPE", code)
        code_text = str(int(code)) if isinstance(code, float) and code.is_integer() else str(code)
        slices.append(
            CompositionSlice(label=label or f"TYPE {code_text}", value=to_number(row.get("value")))
        )
    return sorted(slices, key=lambda item: item.value, reverse=True)


def build_top_buyers(rows: list[ResultRow], limit: int = 5) -> list[TopBuyerRevenue]:
    """Keep the ``limit`` customers with the highest combined revenue.

    Each returned entry carries the customer's two-year total so the chart
    can order bars without re-aggregating.
    """
    totals: dict[str, float] = {}
    entries: list[tuple[str, int, float]] = []
    for row in rows:
        customer = str(row.get("customer") or "").strip()
        if not customer:
            continue
        year = int(to_number(row.get("year")))
        revenue = to_number(row.get("revenue"))
        entries.append((customer, year, revenue))
        totals[customer] = totals.get(customer, 0.0) + revenue

    ranked = sorted(totals, key=lambda name: totals[name], reverse=True)[: max(limit, 0)]
    keep = set(ranked)
    order = {name: index for index, name in enumerate(ranked)}
    selected = [entry for entry in entries if entry[0] in keep]
    selected.sort(key=lambda entry: (order[entry[0]], entry[1]))
    return [
        TopBuyerRevenue(
            customer=customer,
            year=year,
            revenue=revenue,
            total_revenue_for_customer=totals[customer],
        )
        for customer, year, revenue in selected
    ]


def build_kpis(rows: list[ResultRow]) -> DashboardKpis:
    """Derive headline KPIs from the single aggregate row."""
    if not rows:
        return DashboardKpis()
    row = rows[0]
    current = to_number(row.get("current_revenue"))
    previous = to_number(row.get("previous_revenue"))
    tickets = int(to_number(row.get("ticket_count")))
    return DashboardKpis(
        total_revenue=current,
        active_customers=int(to_number(row.get("active_customers"))),
        low_stock_count=int(to_number(row.get("low_stock_count"))),
        avg_ticket=average_ticket(current, tickets),
        growth_rate_percent=compute_growth_rate(current, previous),
    )
