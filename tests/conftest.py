"""Shared test fixtures for the OgradyCore analyst."""

import sys
from datetime import date
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure src/backend/ is on the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "backend"))

from config.settings import Settings
from entities.shared.protocols import NoOpReporter
from entities.shared.schema_context import get_schema_context
from entities.workflow import PipelineClients
from models import AnalystInsight, BridgeHealth, BridgeStatus, QueryPlan, SchemaContext

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeBridge:
    """In-memory fake satisfying the ``BridgeExecutor`` protocol.

    Returns rows from ``responder`` (a callable taking the SQL) or the
    canned ``rows``, and records every call.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        responder: Any = None,  # noqa: ANN401
        health: BridgeHealth | None = None,
    ) -> None:
        self.rows: list[dict[str, Any]] = rows or []
        self.responder = responder
        self.health = health or BridgeHealth(status=BridgeStatus.HEALTHY, url="http://bridge")
        self.calls: list[str] = []

    async def execute(self, sql: str) -> list[dict[str, Any]]:
        """Return the responder's rows for ``sql`` or the canned rows."""
        self.calls.append(sql)
        if self.responder is not None:
            return self.responder(sql)
        return list(self.rows)

    async def check_health(self, url: str | None = None) -> BridgeHealth:
        """Return the canned health result."""
        return self.health


class FakePlanner:
    """In-memory fake satisfying the ``QueryPlanner`` protocol."""

    def __init__(self, plan: QueryPlan | None = None, error: Exception | None = None) -> None:
        self.plan_result = plan or make_plan()
        self.error = error
        self.calls: list[str] = []

    async def plan(self, question: str, schema: SchemaContext) -> QueryPlan:
        """Return the canned plan or raise the configured error."""
        self.calls.append(question)
        if self.error is not None:
            raise self.error
        return self.plan_result


class FakeSynthesizer:
    """In-memory fake satisfying the ``InsightSynthesizer`` protocol.

    Records the rows and sample size of every call.
    """

    def __init__(
        self,
        insight: AnalystInsight | None = None,
        error: Exception | None = None,
    ) -> None:
        self.insight = insight or make_insight()
        self.error = error
        self.calls: list[tuple[list[dict[str, Any]], int]] = []

    async def synthesize(self, rows: list[dict[str, Any]], sample_size: int = 15) -> AnalystInsight:
        """Return the canned insight or raise the configured error."""
        self.calls.append((list(rows), sample_size))
        if self.error is not None:
            raise self.error
        return self.insight


class SpyReporter:
    """Spy satisfying the ``ProgressReporter`` protocol.

    Captures every ``step_start`` / ``step_end`` call for assertions.
    """

    def __init__(self) -> None:
        self.events: list[dict[str, str]] = []

    def step_start(self, step: str) -> None:
        """Record a step-start event."""
        self.events.append({"step": step, "status": "started"})

    def step_end(self, step: str) -> None:
        """Record a step-end event."""
        self.events.append({"step": step, "status": "completed"})


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_plan(
    sql: str = "SELECT TOP 5 Surname, SUM(Qty) AS total FROM dbo.DEBTOR GROUP BY Surname",
    **overrides: Any,  # noqa: ANN401
) -> QueryPlan:
    """Build a ``QueryPlan`` with sensible defaults."""
    fields = {
        "sql": sql,
        "explanation": "Top customers by quantity",
        "visualization_type": "bar",
        "x_axis": "Surname",
        "y_axis": "total",
    }
    fields.update(overrides)
    return QueryPlan(**fields)


def make_insight(summary: str = "Revenue is concentrated in five accounts.") -> AnalystInsight:
    """Build an ``AnalystInsight`` with one bullet per list."""
    return AnalystInsight(
        summary=summary,
        trends=["Spend rises toward month end"],
        anomalies=["One account doubled its order size"],
        suggestions=["Review credit terms for the top account"],
    )


def mock_agent(response_text: str) -> MagicMock:
    """Create a mock ChatAgent that returns the given text.

    Args:
        response_text: The text the mock LLM should return.

    Returns:
        A MagicMock with an async ``run`` method.
    """
    mock_content = MagicMock()
    mock_content.text = response_text
    mock_msg = MagicMock()
    mock_msg.contents = [mock_content]
    mock_response = MagicMock()
    mock_response.messages = [mock_msg]

    agent = MagicMock()
    agent.run = AsyncMock(return_value=mock_response)
    return agent


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        azure_ai_project_endpoint="https://test.services.ai.azure.com/api/projects/test",
        azure_ai_model_deployment_name="test-model",
        bridge_default_url="http://bridge.test:8000",
        bridge_config_path="unused/bridge.json",
        target_database="UltiSales",
    )


@pytest.fixture
def schema() -> SchemaContext:
    """Return the packaged schema context."""
    return get_schema_context()


@pytest.fixture
def fake_bridge() -> FakeBridge:
    """Return an empty ``FakeBridge`` instance."""
    return FakeBridge()


@pytest.fixture
def fake_planner() -> FakePlanner:
    """Return a ``FakePlanner`` with the default plan."""
    return FakePlanner()


@pytest.fixture
def fake_synthesizer() -> FakeSynthesizer:
    """Return a ``FakeSynthesizer`` with the default insight."""
    return FakeSynthesizer()


@pytest.fixture
def spy_reporter() -> SpyReporter:
    """Return a fresh ``SpyReporter`` instance."""
    return SpyReporter()


@pytest.fixture
def noop_reporter() -> NoOpReporter:
    """Return a ``NoOpReporter`` from the protocols module."""
    return NoOpReporter()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Return a ``FakeClock`` starting at t=100."""
    return FakeClock()


@pytest.fixture
def reference_day() -> date:
    """A fixed reference date used by dashboard tests."""
    return date(2026, 3, 15)


@pytest.fixture
def clients(
    fake_planner: FakePlanner,
    fake_synthesizer: FakeSynthesizer,
    fake_bridge: FakeBridge,
    schema: SchemaContext,
    spy_reporter: SpyReporter,
) -> PipelineClients:
    """Return ``PipelineClients`` wired entirely to in-memory fakes."""
    return PipelineClients(
        planner=fake_planner,
        synthesizer=fake_synthesizer,
        bridge=fake_bridge,
        schema=schema,
        database="UltiSales",
        sample_size=15,
        reporter=spy_reporter,
    )
