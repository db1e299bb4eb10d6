"""
Shared models for entities.

These models are used across the planner, synthesizer, bridge client,
orchestrator, dashboard aggregator and API. All models are re-exported here.
"""

from .bridge import BridgeHealth, BridgeResponse, BridgeStatus
from .dashboard import (
    CompositionSlice,
    DashboardKpis,
    DashboardRefresh,
    DashboardStats,
    SalesYoYPoint,
    TopBuyerRevenue,
)
from .insight import FALLBACK_SUMMARY, MAX_BULLETS, AnalystInsight
from .query import (
    SUPPORTED_VISUALIZATIONS,
    AnalysisRun,
    CamelModel,
    QueryPlan,
    QueryResult,
    RecoverySuggestion,
    ResultRow,
)
from .requests import AnalystQueryRequest, BridgeUpdateRequest, ErrorPayload
from .schema import SchemaContext, TableSchema

__all__ = [
    # Schema (static database description)
    "SchemaContext",
    "TableSchema",
    # Query (planning and execution)
    "CamelModel",
    "QueryPlan",
    "QueryResult",
    "ResultRow",
    "AnalysisRun",
    "RecoverySuggestion",
    "SUPPORTED_VISUALIZATIONS",
    # Insight (narrative synthesis)
    "AnalystInsight",
    "FALLBACK_SUMMARY",
    "MAX_BULLETS",
    # Dashboard
    "CompositionSlice",
    "DashboardKpis",
    "DashboardRefresh",
    "DashboardStats",
    "SalesYoYPoint",
    "TopBuyerRevenue",
    # API payloads
    "AnalystQueryRequest",
    "BridgeUpdateRequest",
    "ErrorPayload",
    # Bridge
    "BridgeHealth",
    "BridgeResponse",
    "BridgeStatus",
]
