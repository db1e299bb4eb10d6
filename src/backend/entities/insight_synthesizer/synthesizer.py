"""Insight synthesizer logic.

Sends a bounded sample of rows to the synthesizer agent and validates the
answer into an ``AnalystInsight``. The same call serves per-question
insight and the dashboard's executive brief.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from entities.shared.errors import SynthesisError
from entities.shared.llm_response import extract_response_text, parse_json_object
from models import AnalystInsight, ResultRow
from pydantic import ValidationError

if TYPE_CHECKING:
    from agent_framework import ChatAgent

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 15


def _build_synthesis_prompt(rows: list[ResultRow], total_rows: int) -> str:
    """Build the user message for the synthesizer agent.

    Args:
        rows: Already-truncated sample.
        total_rows: Row count before truncation.

    Returns:
        A formatted prompt string for the LLM.
    """
    return (
        f"Interpret these results ({len(rows)} of {total_rows} rows shown):\n"
        f"{json.dumps(rows, indent=2, default=str)}\n"
        "\n"
        "Return JSON with fields: summary, trends (array), anomalies (array), "
        "suggestions (array).\n"
    )


async def synthesize_insight(
    rows: list[ResultRow],
    agent: ChatAgent,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> AnalystInsight:
    """Summarize rows into structured narrative insight.

    Args:
        rows: Result rows in display order.
        agent: Chat agent configured with synthesizer instructions.
        sample_size: Maximum rows sent to the LLM; the first rows are kept.

    Returns:
        The validated ``AnalystInsight``.

    Raises:
        SynthesisError: If the agent call fails or its response cannot be
            parsed into an ``AnalystInsight``.
    """
    sample = list(rows[: max(sample_size, 0)])
    logger.info("Synthesizing insight from %d of %d rows", len(sample), len(rows))
    prompt = _build_synthesis_prompt(sample, len(rows))

    try:
        response = await agent.run(prompt, thread=agent.get_new_thread())
    except Exception as exc:
        logger.exception("Synthesizer agent call failed")
        raise SynthesisError(f"Synthesizer call failed: {exc}") from exc

    response_text = extract_response_text(response)
    try:
        parsed = parse_json_object(response_text)
        return AnalystInsight.model_validate(parsed)
    except (ValueError, ValidationError) as exc:
        logger.warning("Unusable synthesizer response: %s", exc)
        raise SynthesisError(f"Unusable synthesizer response: {exc}") from exc


class AgentInsightSynthesizer:
    """``InsightSynthesizer`` backed by a ``ChatAgent``.

    Args:
        agent: Chat agent configured with synthesizer instructions.
    """

    def __init__(self, agent: ChatAgent) -> None:
        self._agent = agent

    async def synthesize(
        self,
        rows: list[ResultRow],
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> AnalystInsight:
        """Summarize ``rows``; see ``synthesize_insight``."""
        return await synthesize_insight(rows, self._agent, sample_size)
