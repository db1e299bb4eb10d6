"""Analysis pipeline - single-function entry point for a user question.

``run_analysis()`` sequences plan -> normalize -> execute -> synthesize.
Routing is plain if/else logic over injected collaborators; the function
holds no state of its own, so concurrent runs are independent.
"""

from __future__ import annotations

import logging

from entities.shared.errors import EmptyQuestionError, PipelineError, PlanningError, SynthesisError
from entities.sql_normalizer import apply_session_preamble, normalize
from entities.workflow.clients import PipelineClients
from models import AnalysisRun, QueryPlan, QueryResult

logger = logging.getLogger(__name__)


async def _plan(question: str, clients: PipelineClients) -> QueryPlan:
    clients.reporter.step_start("Planning query")
    try:
        return await clients.planner.plan(question, clients.schema)
    except PipelineError:
        raise
    except Exception as exc:
        logger.exception("Planner raised an unexpected error")
        raise PlanningError(str(exc)) from exc
    finally:
        clients.reporter.step_end("Planning query")


def _prepare_sql(plan: QueryPlan, database: str) -> str:
    try:
        return apply_session_preamble(normalize(plan.sql), database)
    except Exception as exc:
        logger.exception("SQL normalization failed")
        raise PlanningError(f"Normalization failed: {exc}") from exc


async def run_analysis(question: str, clients: PipelineClients) -> AnalysisRun:
    """Answer one business question end to end.

    Steps:
        1. Reject empty questions without contacting any collaborator.
        2. Plan SQL and chart via the planner.
        3. Normalize the SQL and add the session preamble.
        4. Execute through the bridge (empty rows are a valid answer).
        5. Assemble the ``QueryResult``.
        6. Summarize the rows via the synthesizer.

    Args:
        question: Free-text business question.
        clients: Pipeline I/O dependencies.

    Returns:
        ``AnalysisRun`` with the question, result and insight.

    Raises:
        EmptyQuestionError: If the question is blank.
        PlanningError: If planning or normalization fails.
        SynthesisError: If insight synthesis fails.
    """
    cleaned = (question or "").strip()
    if not cleaned:
        raise EmptyQuestionError("Question is empty")

    logger.info("Running analysis for: %s", cleaned[:100])

    plan = await _plan(cleaned, clients)
    sql = _prepare_sql(plan, clients.database)
    if sql != plan.sql:
        logger.info("Normalized SQL: %s", sql[:200])

    clients.reporter.step_start("Executing query")
    try:
        rows = await clients.bridge.execute(sql)
    except Exception:
        logger.exception("Bridge executor raised; treating as an empty result")
        rows = []
    finally:
        clients.reporter.step_end("Executing query")

    result = QueryResult.from_plan(plan, sql, rows)
    if not result.data:
        logger.info("Query returned no rows; continuing with an empty result")

    clients.reporter.step_start("Summarizing results")
    try:
        insight = await clients.synthesizer.synthesize(result.data, clients.sample_size)
    except PipelineError:
        raise
    except Exception as exc:
        logger.exception("Synthesizer raised an unexpected error")
        raise SynthesisError(str(exc)) from exc
    finally:
        clients.reporter.step_end("Summarizing results")

    logger.info(
        "Analysis complete: %d rows, %s chart",
        len(result.data),
        result.visualization_type,
    )
    return AnalysisRun(question=cleaned, result=result, insight=insight)
