"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
Production implementations wrap the bridge HTTP client and the LLM
agents; test fakes return canned data with zero network access.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Protocol, runtime_checkable

from models import AnalystInsight, BridgeHealth, QueryPlan, ResultRow, SchemaContext


@runtime_checkable
class BridgeExecutor(Protocol):
    """Executes SQL through the database bridge.

    ``execute`` is fail-soft: any failure yields an empty list.
    """

    async def execute(self, sql: str) -> list[ResultRow]:
        """Execute a SQL statement.

        Args:
            sql: Normalized T-SQL statement.

        Returns:
            Rows as dicts, or ``[]`` on any failure.
        """
        ...

    async def check_health(self) -> BridgeHealth:
        """Probe the bridge's liveness path.

        Returns:
            Tri-state health result; never raises.
        """
        ...


@runtime_checkable
class QueryPlanner(Protocol):
    """Turns a natural-language question into a ``QueryPlan``.

    Raises ``PlanningError`` when the provider fails or the response
    cannot be parsed into the required structure.
    """

    async def plan(self, question: str, schema: SchemaContext) -> QueryPlan:
        """Plan a query.

        Args:
            question: Natural-language business question.
            schema: Static schema context.

        Returns:
            The structured plan.
        """
        ...


@runtime_checkable
class InsightSynthesizer(Protocol):
    """Summarizes rows into an ``AnalystInsight``.

    Raises ``SynthesisError`` when the provider fails or the response
    cannot be parsed into the required structure.
    """

    async def synthesize(self, rows: list[ResultRow], sample_size: int = 15) -> AnalystInsight:
        """Synthesize narrative insight.

        Args:
            rows: Result rows, in display order.
            sample_size: Maximum rows sent to the LLM.

        Returns:
            The structured insight.
        """
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports step-level progress for streaming UI updates."""

    def step_start(self, step: str) -> None:
        """Signal that a named step has started.

        Args:
            step: Human-readable step label.
        """
        ...

    def step_end(self, step: str) -> None:
        """Signal that a named step has completed.

        Args:
            step: Human-readable step label (must match a prior start).
        """
        ...


# ---------------------------------------------------------------------------
# Concrete implementations
# ---------------------------------------------------------------------------


class NoOpReporter:
    """ProgressReporter that silently discards all events.

    Useful in tests and non-streaming contexts where no UI listens.
    """

    def step_start(self, step: str) -> None:
        """No-op."""

    def step_end(self, step: str) -> None:
        """No-op."""


class QueueReporter:
    """ProgressReporter that pushes events onto an ``asyncio.Queue``.

    The SSE endpoint drains the queue while the analysis runs.

    Args:
        queue: The asyncio queue to push step dicts onto.
    """

    def __init__(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        self._queue = queue
        self._start_times: dict[str, float] = {}

    def step_start(self, step: str) -> None:
        """Record start time and enqueue a *started* event."""
        self._start_times[step] = time.time()
        self._queue.put_nowait({"step": step, "status": "started"})

    def step_end(self, step: str) -> None:
        """Enqueue a *completed* event with the step duration."""
        start_time = self._start_times.pop(step, None)
        duration_ms = int((time.time() - start_time) * 1000) if start_time else None
        self._queue.put_nowait({"step": step, "status": "completed", "duration_ms": duration_ms})
