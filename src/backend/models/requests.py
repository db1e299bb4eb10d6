"""
API request and error payload models.
"""

from pydantic import BaseModel, Field

from .query import CamelModel, RecoverySuggestion


class AnalystQueryRequest(CamelModel):
    """Body of ``POST /api/analyst/query``."""

    question: str = Field(description="Free-text business question")
    session_id: str | None = Field(
        default=None, description="Optional transcript key chosen by the client"
    )


class BridgeUpdateRequest(CamelModel):
    """Body of ``PUT /api/bridge``."""

    url: str = Field(description="Candidate bridge base URL")


class ErrorPayload(BaseModel):
    """User-facing failure description; never carries a stack trace.

    Keys stay snake_case to match the SSE error events.
    """

    detail: str
    correlation_id: str
    source: str
    suggestions: list[RecoverySuggestion] = Field(default_factory=list)
