"""Dashboard aggregation: fixed queries, KPI derivation and the executive brief."""

from .aggregator import PLACEHOLDER_BRIEF, DashboardAggregator, brief_rows
from .kpis import compute_growth_rate, parse_reference_date
from .queries import ReportingWindows

__all__ = [
    "PLACEHOLDER_BRIEF",
    "DashboardAggregator",
    "ReportingWindows",
    "brief_rows",
    "compute_growth_rate",
    "parse_reference_date",
]
