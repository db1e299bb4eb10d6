"""Unit tests for the plan_query() async function.

Tests cover the success path, response parsing, error handling and
reporter integration for LLM call #1.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from entities.query_planner import AgentQueryPlanner, plan_query
from entities.query_planner.planner import _build_planning_prompt
from entities.shared.errors import PlanningError
from models import QueryResult, SchemaContext

from tests.conftest import SpyReporter, mock_agent

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _plan_json(
    sql: str = "SELECT TOP 100 Surname FROM dbo.DEBTOR",
    *,
    visualization_type: str = "bar",
    **extra: str,
) -> str:
    """Build a JSON string representing a planner response."""
    payload = {
        "sql": sql,
        "explanation": "Lists customers",
        "visualizationType": visualization_type,
        "xAxis": "Surname",
        "yAxis": "total",
    }
    payload.update(extra)
    return json.dumps(payload)


# ── Success path ──────────────────────────────────────────────────────


class TestSuccessPath:
    """Tests where the LLM returns a usable plan."""

    async def test_basic_plan(self, schema: SchemaContext) -> None:
        """A well-formed response becomes a QueryPlan."""
        agent = mock_agent(_plan_json())

        plan = await plan_query("Who are our customers?", schema, agent)

        assert plan.sql == "SELECT TOP 100 Surname FROM dbo.DEBTOR"
        assert plan.visualization_type == "bar"
        assert plan.x_axis == "Surname"
        assert plan.y_axis == "total"

    async def test_fenced_response(self, schema: SchemaContext) -> None:
        """A plan wrapped in a markdown fence is still parsed."""
        agent = mock_agent(f"Here you go:\n```json\n{_plan_json()}\n```")

        plan = await plan_query("Who are our customers?", schema, agent)

        assert plan.explanation == "Lists customers"

    async def test_unknown_visualization_passed_through(self, schema: SchemaContext) -> None:
        """Unsupported chart types are kept, not rejected."""
        agent = mock_agent(_plan_json(visualization_type="Radar"))

        plan = await plan_query("Show a radar", schema, agent)

        assert plan.visualization_type == "Radar"
        assert plan.is_supported_visualization is False

    async def test_visualization_kept_verbatim_in_result(self, schema: SchemaContext) -> None:
        """Padding and casing survive into the result; support is checked case-insensitively."""
        agent = mock_agent(_plan_json(visualization_type=" Bar "))

        plan = await plan_query("Daily sales", schema, agent)
        result = QueryResult.from_plan(plan, plan.sql, [])

        assert result.visualization_type == " Bar "
        assert plan.is_supported_visualization is True

    async def test_prompt_contains_question_and_schema(self, schema: SchemaContext) -> None:
        """The prompt carries the question, the core tables and code lookups."""
        agent = mock_agent(_plan_json())

        await plan_query("Top 5 customers by revenue this year", schema, agent)

        prompt = agent.run.call_args.args[0]
        assert "Top 5 customers by revenue this year" in prompt
        assert "dbo.AUDIT" in prompt
        assert "AUDIT.TRANSACTIONTYPE" in prompt

    async def test_fresh_thread_per_call(self, schema: SchemaContext) -> None:
        """Each planning call runs on a new thread."""
        agent = mock_agent(_plan_json())

        await plan_query("q1", schema, agent)
        await plan_query("q2", schema, agent)

        assert agent.get_new_thread.call_count == 2

    async def test_protocol_wrapper_delegates(self, schema: SchemaContext) -> None:
        """AgentQueryPlanner.plan delegates to plan_query."""
        planner = AgentQueryPlanner(mock_agent(_plan_json()))

        plan = await planner.plan("Who are our customers?", schema)

        assert plan.sql.startswith("SELECT TOP 100")


# ── Failure path ──────────────────────────────────────────────────────


class TestFailures:
    """Provider failures and unusable responses raise PlanningError."""

    async def test_agent_exception(self, schema: SchemaContext) -> None:
        """A transport failure in the agent raises PlanningError."""
        agent = MagicMock()
        agent.run = AsyncMock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(PlanningError) as exc_info:
            await plan_query("q", schema, agent)

        assert exc_info.value.user_message.startswith("Could not reach the analyst")

    async def test_non_json_response(self, schema: SchemaContext) -> None:
        """Prose without JSON raises PlanningError."""
        with pytest.raises(PlanningError):
            await plan_query("q", schema, mock_agent("I cannot help with that."))

    async def test_empty_response(self, schema: SchemaContext) -> None:
        """An empty response raises PlanningError."""
        with pytest.raises(PlanningError):
            await plan_query("q", schema, mock_agent(""))

    async def test_missing_field(self, schema: SchemaContext) -> None:
        """A response missing a required field raises PlanningError."""
        payload = json.dumps({"sql": "SELECT 1", "explanation": "x"})
        with pytest.raises(PlanningError):
            await plan_query("q", schema, mock_agent(payload))

    async def test_blank_sql(self, schema: SchemaContext) -> None:
        """A plan with blank SQL raises PlanningError."""
        with pytest.raises(PlanningError):
            await plan_query("q", schema, mock_agent(_plan_json(sql="   ")))


# ── Reporter ──────────────────────────────────────────────────────────


class TestReporter:
    """Step events bracket the LLM call on success and failure."""

    async def test_events_on_success(self, schema: SchemaContext) -> None:
        """Start and end events are emitted around the call."""
        reporter = SpyReporter()

        await plan_query("q", schema, mock_agent(_plan_json()), reporter)

        assert reporter.events == [
            {"step": "Generating SQL", "status": "started"},
            {"step": "Generating SQL", "status": "completed"},
        ]

    async def test_end_event_on_failure(self, schema: SchemaContext) -> None:
        """The end event is still emitted when planning fails."""
        reporter = SpyReporter()

        with pytest.raises(PlanningError):
            await plan_query("q", schema, mock_agent("nope"), reporter)

        assert reporter.events[-1] == {"step": "Generating SQL", "status": "completed"}


def test_prompt_builder_lists_lookups(schema: SchemaContext) -> None:
    """The prompt builder embeds code lookups as JSON."""
    prompt = _build_planning_prompt("q", schema)

    assert "## Code Lookups" in prompt
    assert "STOCK.STOCKTYPE" in prompt
