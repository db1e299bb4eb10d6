"""
FastAPI server for the analyst pipeline and the executive dashboard.

This module handles application setup, lifespan management, and middleware configuration.
Route handlers are organized in the routers/ package.

Long-lived collaborators are built once at startup and kept on ``app.state``:
- Planner and synthesizer agents (shared across requests)
- Bridge endpoint store and bridge client
- Dashboard aggregator (holds the debounce state)
- Session transcript store
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path

import uvicorn
from api.routers import analyst_router, bridge_router, dashboard_router
from api.session_manager import TranscriptStore
from config.settings import get_settings
from dotenv import load_dotenv
from entities.bridge import BridgeEndpoint
from entities.dashboard import DashboardAggregator
from entities.insight_synthesizer import AgentInsightSynthesizer
from entities.shared.schema_context import get_schema_context
from entities.workflow import create_agents, create_bridge_client, create_pipeline_clients
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, force=True)

# Reduce noise from Azure SDK and other libraries
logging.getLogger("azure").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
# Reduce agent_framework verbosity (it logs all message content at INFO level)
logging.getLogger("agent_framework").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Initializes application state on startup and cleans up on shutdown.
    """
    logger.info("OgradyCore Analyst API starting")
    settings = get_settings()

    endpoint = BridgeEndpoint.load(Path(settings.bridge_config_path), settings.bridge_default_url)
    bridge_client = create_bridge_client(settings, endpoint)
    agents = create_agents(settings)
    schema = get_schema_context()

    application.state.bridge_endpoint = endpoint
    application.state.bridge_client = bridge_client
    application.state.clients_factory = partial(create_pipeline_clients, settings, agents, endpoint)
    application.state.aggregator = DashboardAggregator(
        bridge_client,
        AgentInsightSynthesizer(agents.synthesizer_agent),
        database=settings.target_database,
        schema=schema,
        cooldown_seconds=settings.dashboard_cooldown_seconds,
        window_days=settings.dashboard_window_days,
        segment_keyword=settings.dashboard_segment_keyword,
        top_buyer_limit=settings.dashboard_top_buyers,
        low_stock_threshold=settings.low_stock_threshold,
        brief_sample_size=settings.insight_sample_size,
    )
    application.state.transcripts = TranscriptStore(
        max_sessions=settings.max_session_cache_size,
        ttl_seconds=settings.session_ttl_seconds,
    )
    logger.info("Bridge endpoint: %s (database %s)", endpoint.url, settings.target_database)

    yield

    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="OgradyCore Analyst", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analyst_router)
app.include_router(dashboard_router)
app.include_router(bridge_router)


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint."""
    pipeline_ready = getattr(app.state, "clients_factory", None) is not None
    return {"status": "healthy", "pipeline_ready": pipeline_ready}


if __name__ == "__main__":
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)  # noqa: S104
