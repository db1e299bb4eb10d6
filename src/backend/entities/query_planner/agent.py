"""
Query Planner Agent - ChatAgent factory for SQL planning.

The agent turns a business question plus the schema context into a
T-SQL statement and a chart configuration.
"""

from pathlib import Path
from typing import Any

from agent_framework import ChatAgent


def load_prompt() -> str:
    """Load the prompt from prompt.md in this folder."""
    return (Path(__file__).parent / "prompt.md").read_text(encoding="utf-8")


def create_query_planner_agent(
    client: Any,  # noqa: ANN401
    instructions: str,
) -> ChatAgent:
    """Create a query planner ChatAgent.

    Args:
        client: Agent Framework chat client (Azure AI or OpenAI).
        instructions: Agent system prompt text.

    Returns:
        Configured ChatAgent for query planning.
    """
    return ChatAgent(
        name="query-planner-agent",
        instructions=instructions,
        chat_client=client,
    )
