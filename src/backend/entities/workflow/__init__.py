"""
Workflow - dependency bundle and factories for the analysis pipeline.

``PipelineClients`` / ``create_pipeline_clients`` provide dependency
injection for ``run_analysis``; ``create_agents`` builds the two chat
agents once per process.
"""

from .clients import (
    AgentPair,
    PipelineClients,
    create_agents,
    create_bridge_client,
    create_pipeline_clients,
)

__all__ = [
    "AgentPair",
    "PipelineClients",
    "create_agents",
    "create_bridge_client",
    "create_pipeline_clients",
]
