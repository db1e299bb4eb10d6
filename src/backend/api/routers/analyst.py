"""
Analyst API routes.

``POST /query`` answers one question and returns the full ``AnalysisRun``.
``GET /stream`` runs the same pipeline but streams step progress as SSE
events before the final result. Failures are reported as one actionable
message plus follow-up suggestions; internal details stay in the logs.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncGenerator

from entities.query_orchestrator import run_analysis
from entities.shared.error_recovery import build_error_recovery, classify_failure
from entities.shared.errors import EmptyQuestionError, PipelineError
from entities.shared.protocols import QueueReporter
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse
from models import AnalysisRun, AnalystQueryRequest, ErrorPayload

from api.dependencies import ClientsFactory, get_clients_factory, get_transcripts
from api.session_manager import TranscriptStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analyst", tags=["analyst"])


def _error_payload(error: Exception, question: str) -> ErrorPayload:
    """Build a sanitized error payload with a correlation ID.

    Logs the full exception server-side; the client only sees the
    user-facing message.
    """
    correlation_id = uuid.uuid4().hex[:12]
    logger.error("Analysis failed [%s]: %s", correlation_id, error, exc_info=error)
    message, suggestions = build_error_recovery(error, question)
    return ErrorPayload(
        detail=message,
        correlation_id=correlation_id,
        source=classify_failure(error),
        suggestions=suggestions,
    )


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


def _format_step_event(step_event: dict) -> dict:
    """Format a step event dict for SSE emission."""
    result: dict = {"step": step_event.get("step"), "done": False}
    if "status" in step_event:
        result["status"] = step_event["status"]
    if step_event.get("duration_ms") is not None:
        result["duration_ms"] = step_event["duration_ms"]
    return result


@router.post("/query", response_model=AnalysisRun)
async def query(
    body: AnalystQueryRequest,
    factory: ClientsFactory = Depends(get_clients_factory),
    transcripts: TranscriptStore = Depends(get_transcripts),
) -> AnalysisRun | JSONResponse:
    """Answer one business question."""
    try:
        run = await run_analysis(body.question, factory(None))
    except EmptyQuestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message
        ) from exc
    except PipelineError as exc:
        payload = _error_payload(exc, body.question)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=payload.model_dump())
    except Exception as exc:
        payload = _error_payload(exc, body.question)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload.model_dump()
        )

    transcripts.append(body.session_id, run)
    return run


async def generate_analysis_stream(
    question: str,
    session_id: str | None,
    factory: ClientsFactory,
    transcripts: TranscriptStore,
) -> AsyncGenerator[str, None]:
    """Stream step events while the pipeline runs, then the result."""
    step_queue: asyncio.Queue[dict] = asyncio.Queue()
    task = asyncio.create_task(run_analysis(question, factory(QueueReporter(step_queue))))

    try:
        while True:
            getter = asyncio.ensure_future(step_queue.get())
            done, _ = await asyncio.wait({task, getter}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                yield _sse(_format_step_event(getter.result()))
                continue
            getter.cancel()
            break

        while not step_queue.empty():
            yield _sse(_format_step_event(step_queue.get_nowait()))

        run = task.result()
        transcripts.append(session_id, run)
        yield _sse({"steps_complete": True, "done": False})
        yield _sse({"result": run.model_dump(mode="json", by_alias=True), "done": False})
        yield _sse({"done": True, "session_id": session_id})

    except Exception as exc:
        payload = _error_payload(exc, question)
        yield _sse({**payload.model_dump(), "done": True})

    finally:
        if not task.done():
            task.cancel()


@router.get("/stream")
async def analyst_stream(
    question: str = Query(..., description="Business question"),
    session_id: str | None = Query(None, description="Transcript key"),
    factory: ClientsFactory = Depends(get_clients_factory),
    transcripts: TranscriptStore = Depends(get_transcripts),
) -> StreamingResponse:
    """SSE streaming variant of ``POST /query``."""
    return StreamingResponse(
        generate_analysis_stream(question, session_id, factory, transcripts),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.get("/sessions/{session_id}", response_model=list[AnalysisRun])
async def get_session(
    session_id: str,
    transcripts: TranscriptStore = Depends(get_transcripts),
) -> list[AnalysisRun]:
    """Return the transcript for a session in submission order."""
    runs = transcripts.get(session_id)
    if runs is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return runs
