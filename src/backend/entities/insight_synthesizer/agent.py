"""
Insight Synthesizer Agent - ChatAgent factory for narrative insight.
"""

from pathlib import Path
from typing import Any

from agent_framework import ChatAgent


def load_prompt() -> str:
    """Load the prompt from prompt.md in this folder."""
    return (Path(__file__).parent / "prompt.md").read_text(encoding="utf-8")


def create_insight_synthesizer_agent(
    client: Any,  # noqa: ANN401
    instructions: str,
) -> ChatAgent:
    """Create an insight synthesizer ChatAgent.

    Args:
        client: Agent Framework chat client (Azure AI or OpenAI).
        instructions: Agent system prompt text.

    Returns:
        Configured ChatAgent for insight synthesis.
    """
    return ChatAgent(
        name="insight-synthesizer-agent",
        instructions=instructions,
        chat_client=client,
    )
