"""
FastAPI dependencies for shared resources.

Everything long-lived is built once in the lifespan handler and stored on
``app.state``; these accessors hand it to route handlers and return 503
when startup has not populated it.
"""

import logging
from collections.abc import Callable
from typing import Any

from entities.bridge import BridgeClient, BridgeEndpoint
from entities.dashboard import DashboardAggregator
from entities.shared.protocols import ProgressReporter
from entities.workflow import PipelineClients
from fastapi import HTTPException, Request

from api.session_manager import TranscriptStore

logger = logging.getLogger(__name__)

ClientsFactory = Callable[[ProgressReporter | None], PipelineClients]


def _state(request: Request, name: str, label: str) -> Any:  # noqa: ANN401
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.warning("%s requested before initialization", label)
        raise HTTPException(status_code=503, detail=f"{label} not initialized")
    return value


def get_clients_factory(request: Request) -> ClientsFactory:
    """
    Get the factory that builds ``PipelineClients`` for one request.

    Raises HTTPException 503 if not initialized.
    """
    return _state(request, "clients_factory", "Analyst pipeline")


def get_transcripts(request: Request) -> TranscriptStore:
    """Get the session transcript store from app state."""
    return _state(request, "transcripts", "Transcript store")


def get_aggregator(request: Request) -> DashboardAggregator:
    """Get the dashboard aggregator from app state."""
    return _state(request, "aggregator", "Dashboard aggregator")


def get_bridge_endpoint(request: Request) -> BridgeEndpoint:
    """Get the bridge endpoint store from app state."""
    return _state(request, "bridge_endpoint", "Bridge endpoint")


def get_bridge_client(request: Request) -> BridgeClient:
    """Get the bridge client from app state."""
    return _state(request, "bridge_client", "Bridge client")
