"""Query planner logic.

Asks the planner agent for a SQL statement and chart configuration and
validates the answer into a ``QueryPlan``. There is no retry here; a
single failure raises ``PlanningError`` and the caller decides.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from entities.shared.errors import PlanningError
from entities.shared.llm_response import extract_response_text, parse_json_object
from entities.shared.protocols import NoOpReporter, ProgressReporter
from models import QueryPlan, SchemaContext
from pydantic import ValidationError

if TYPE_CHECKING:
    from agent_framework import ChatAgent

logger = logging.getLogger(__name__)

# Lookups that help the model translate business words into codes.
_PROMPT_LOOKUPS: tuple[tuple[str, str], ...] = (
    ("AUDIT", "TRANSACTIONTYPE"),
    ("AUDIT", "PAYMENTMETHOD"),
    ("STOCK", "STOCKTYPE"),
    ("TRANSACTIONS", "PAIDUP"),
)


def _build_planning_prompt(question: str, schema: SchemaContext) -> str:
    """Build the user message for the planner agent.

    Args:
        question: The user's business question.
        schema: Static schema context.

    Returns:
        A formatted prompt string for the LLM.
    """
    lookups: dict[str, Any] = {}
    for table, column in _PROMPT_LOOKUPS:
        mapping = schema.domain_mappings.get(table, {}).get(column)
        if mapping:
            lookups[f"{table}.{column}"] = mapping

    return (
        "Plan a SQL query for the following business question.\n"
        "\n"
        "## Business Question\n"
        f"{question}\n"
        "\n"
        "## Available Tables\n"
        f"{schema.to_prompt()}\n"
        "\n"
        "## Code Lookups\n"
        f"{json.dumps(lookups, indent=2)}\n"
        "\n"
        "Respond with a JSON object containing sql, explanation, "
        "visualizationType, xAxis and yAxis.\n"
    )


async def plan_query(
    question: str,
    schema: SchemaContext,
    agent: ChatAgent,
    reporter: ProgressReporter = NoOpReporter(),
) -> QueryPlan:
    """Generate a query plan via the planner agent.

    Args:
        question: The user's business question.
        schema: Static schema context.
        agent: Chat agent configured with planner instructions.
        reporter: Progress reporter for streaming UI updates.

    Returns:
        The validated ``QueryPlan``.

    Raises:
        PlanningError: If the agent call fails or its response cannot be
            parsed into a ``QueryPlan``.
    """
    step_name = "Generating SQL"
    reporter.step_start(step_name)

    try:
        logger.info("Planning query for: %s", question[:100])
        prompt = _build_planning_prompt(question, schema)

        try:
            response = await agent.run(prompt, thread=agent.get_new_thread())
        except Exception as exc:
            logger.exception("Planner agent call failed")
            raise PlanningError(f"Planner call failed: {exc}") from exc

        response_text = extract_response_text(response)
        try:
            parsed = parse_json_object(response_text)
            plan = QueryPlan.model_validate(parsed)
        except (ValueError, ValidationError) as exc:
            logger.warning("Unusable planner response: %s", exc)
            raise PlanningError(f"Unusable planner response: {exc}") from exc

        logger.info(
            "Planned %s chart (x=%s, y=%s): %s",
            plan.visualization_type,
            plan.x_axis,
            plan.y_axis,
            plan.sql[:200],
        )
        return plan
    finally:
        reporter.step_end(step_name)


class AgentQueryPlanner:
    """``QueryPlanner`` backed by a ``ChatAgent``.

    Args:
        agent: Chat agent configured with planner instructions.
        reporter: Progress reporter for streaming UI updates.
    """

    def __init__(self, agent: ChatAgent, reporter: ProgressReporter | None = None) -> None:
        self._agent = agent
        self._reporter = reporter or NoOpReporter()

    async def plan(self, question: str, schema: SchemaContext) -> QueryPlan:
        """Plan a query for ``question``; see ``plan_query``."""
        return await plan_query(question, schema, self._agent, self._reporter)
