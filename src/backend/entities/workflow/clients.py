"""Pipeline client container and factory for dependency injection.

``PipelineClients`` bundles every I/O dependency the analysis pipeline
needs. Production code constructs it via ``create_pipeline_clients()``
from real agents and the bridge client; tests construct it from in-memory
fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from config.settings import Settings
from entities.bridge import BridgeClient, BridgeEndpoint
from entities.insight_synthesizer import AgentInsightSynthesizer
from entities.query_planner import AgentQueryPlanner
from entities.shared.protocols import (
    BridgeExecutor,
    InsightSynthesizer,
    NoOpReporter,
    ProgressReporter,
    QueryPlanner,
)
from entities.shared.schema_context import get_schema_context
from models import SchemaContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PipelineClients dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineClients:
    """Immutable bundle of all I/O dependencies for the analysis pipeline.

    All collaborator fields use Protocol types, enabling full dependency
    injection. Production code passes agent-backed implementations; tests
    pass fakes.

    Args:
        planner: LLM call #1 (question -> plan).
        synthesizer: LLM call #2 (rows -> insight).
        bridge: Fail-soft SQL executor.
        schema: Read-only schema context handed to the planner.
        database: Database selected by the ``USE`` preamble.
        sample_size: Maximum rows sent to the synthesizer.
        reporter: Progress reporter for streaming UI updates.
    """

    planner: QueryPlanner
    synthesizer: InsightSynthesizer
    bridge: BridgeExecutor
    schema: SchemaContext
    database: str = "UltiSales"
    sample_size: int = 15
    reporter: ProgressReporter = NoOpReporter()


@dataclass(frozen=True)
class AgentPair:
    """The two chat agents, built once per process and shared across requests."""

    planner_agent: Any
    synthesizer_agent: Any


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _create_chat_client(settings: Settings, model: str) -> Any:  # noqa: ANN401
    """Create an Agent Framework chat client for ``model``.

    Uses OpenAI directly when ``openai_api_key`` is configured and Azure AI
    Foundry otherwise.
    """
    if settings.openai_api_key:
        from agent_framework.openai import OpenAIChatClient  # noqa: PLC0415

        return OpenAIChatClient(model_id=settings.openai_model, api_key=settings.openai_api_key)

    if not settings.azure_ai_project_endpoint:
        raise ValueError(
            "AZURE_AI_PROJECT_ENDPOINT (or OPENAI_API_KEY) is required. "
            "Set it to your Azure AI Foundry project endpoint."
        )

    from agent_framework_azure_ai import AzureAIClient  # noqa: PLC0415
    from azure.identity.aio import DefaultAzureCredential  # noqa: PLC0415

    credential = (
        DefaultAzureCredential(managed_identity_client_id=settings.azure_client_id)
        if settings.azure_client_id
        else DefaultAzureCredential()
    )
    return AzureAIClient(
        project_endpoint=settings.azure_ai_project_endpoint,
        credential=credential,
        model_deployment_name=model,
        use_latest_version=True,
    )


def create_agents(settings: Settings) -> AgentPair:
    """Build the planner and synthesizer agents from ``Settings``.

    Loads both prompts from disk. No module-level singletons are created.

    Args:
        settings: Centralised application configuration.

    Returns:
        An ``AgentPair`` ready to be shared across requests.
    """
    from entities.insight_synthesizer.agent import (  # noqa: PLC0415
        create_insight_synthesizer_agent,
    )
    from entities.insight_synthesizer.agent import (  # noqa: PLC0415
        load_prompt as load_synthesizer_prompt,
    )
    from entities.query_planner.agent import (  # noqa: PLC0415
        create_query_planner_agent,
    )
    from entities.query_planner.agent import (  # noqa: PLC0415
        load_prompt as load_planner_prompt,
    )

    planner_model = settings.azure_ai_planner_model or settings.azure_ai_model_deployment_name
    synthesizer_model = (
        settings.azure_ai_synthesizer_model or settings.azure_ai_model_deployment_name
    )

    planner_agent = create_query_planner_agent(
        _create_chat_client(settings, planner_model),
        load_planner_prompt(),
    )
    synthesizer_agent = create_insight_synthesizer_agent(
        _create_chat_client(settings, synthesizer_model),
        load_synthesizer_prompt(),
    )
    logger.info(
        "Created agents (planner=%s, synthesizer=%s, provider=%s)",
        planner_model,
        synthesizer_model,
        "openai" if settings.openai_api_key else "azure",
    )
    return AgentPair(planner_agent=planner_agent, synthesizer_agent=synthesizer_agent)


def create_bridge_client(settings: Settings, endpoint: BridgeEndpoint) -> BridgeClient:
    """Build a ``BridgeClient`` with the configured timeouts."""
    return BridgeClient(
        endpoint,
        timeout_seconds=settings.bridge_timeout_seconds,
        health_timeout_seconds=settings.bridge_health_timeout_seconds,
    )


def create_pipeline_clients(
    settings: Settings,
    agents: AgentPair,
    endpoint: BridgeEndpoint,
    reporter: ProgressReporter | None = None,
) -> PipelineClients:
    """Build a ``PipelineClients`` from settings, shared agents and the endpoint store.

    Args:
        settings: Centralised application configuration.
        agents: Planner and synthesizer agents.
        endpoint: Store holding the current bridge URL.
        reporter: Optional progress reporter. Defaults to ``NoOpReporter``.

    Returns:
        Fully-initialised ``PipelineClients`` ready for ``run_analysis()``.
    """
    return PipelineClients(
        planner=AgentQueryPlanner(agents.planner_agent, reporter),
        synthesizer=AgentInsightSynthesizer(agents.synthesizer_agent),
        bridge=create_bridge_client(settings, endpoint),
        schema=get_schema_context(),
        database=settings.target_database,
        sample_size=settings.insight_sample_size,
        reporter=reporter or NoOpReporter(),
    )
