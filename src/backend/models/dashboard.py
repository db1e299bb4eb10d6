"""
Dashboard models.

``DashboardStats`` is rebuilt wholesale on every refresh and never
mutated in place; ``DashboardRefresh`` wraps it with the narrative brief.
"""

from datetime import datetime

from pydantic import Field

from .insight import AnalystInsight
from .query import CamelModel


class SalesYoYPoint(CamelModel):
    """Revenue for one day of the trailing window and the same day last year."""

    day: str = Field(description="ISO date within the current window")
    current_year: float = 0.0
    last_year: float = 0.0


class TopBuyerRevenue(CamelModel):
    """Segment revenue for one customer in one year."""

    customer: str
    year: int
    revenue: float = 0.0
    total_revenue_for_customer: float = 0.0


class CompositionSlice(CamelModel):
    """Revenue share of one transaction type."""

    label: str
    value: float = 0.0


class DashboardKpis(CamelModel):
    """Headline numbers for the trailing window."""

    total_revenue: float = 0.0
    active_customers: int = 0
    low_stock_count: int = 0
    avg_ticket: float = 0.0
    growth_rate_percent: float = 0.0


class DashboardStats(CamelModel):
    """Everything the dashboard renders for one refresh."""

    sales_yoy: list[SalesYoYPoint] = Field(default_factory=list, alias="salesYoY")
    enamel_trend: list[TopBuyerRevenue] = Field(default_factory=list)
    composition: list[CompositionSlice] = Field(default_factory=list)
    active_date: str = Field(description="ISO reference date all windows derive from")
    kpis: DashboardKpis = Field(default_factory=DashboardKpis)


class DashboardRefresh(CamelModel):
    """Result of ``DashboardAggregator.refresh()``.

    ``skipped`` is True when the call fell inside the cool-down window and
    the previous refresh was returned unchanged.
    """

    stats: DashboardStats
    brief: str
    brief_insight: AnalystInsight | None = None
    skipped: bool = False
    refreshed_at: datetime
