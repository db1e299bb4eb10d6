"""Pipeline error taxonomy.

Every error that may reach the user carries a ``source`` telling the API
which side failed (the analyst LLM, the database bridge, or the user's
input) and a ``user_message`` safe to display verbatim.
"""

from __future__ import annotations

ANALYST = "analyst"
DATABASE = "database"
INPUT = "input"


class PipelineError(Exception):
    """Base class for user-facing pipeline failures."""

    source = ANALYST
    default_message = "Something went wrong while answering your question."

    def __init__(self, message: str = "", *, user_message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class PlanningError(PipelineError):
    """The query planner call failed or returned an unparseable plan."""

    default_message = (
        "Could not reach the analyst: no query plan came back for your question. "
        "Please try again or rephrase it."
    )


class SynthesisError(PipelineError):
    """The insight synthesizer call failed or returned an unparseable insight."""

    default_message = (
        "Could not reach the analyst: the results could not be summarized. Please try again."
    )


class EmptyQuestionError(PipelineError):
    """The question was empty or whitespace only."""

    source = INPUT
    default_message = "Please type a question before submitting."


class BridgeConfigurationError(PipelineError):
    """The bridge endpoint is missing or unusable."""

    source = DATABASE
    default_message = (
        "Could not reach the database: the bridge address is not a valid http(s) URL."
    )


class MixedContentError(BridgeConfigurationError):
    """A secure (https) caller targets an insecure (http) bridge.

    Browsers block such requests outright, so this is explanatory, not a
    retry condition.
    """

    default_message = (
        "Could not reach the database: this page is served over HTTPS but the bridge "
        "address uses plain HTTP, which the browser blocks as mixed content. "
        "Use the HTTPS tunnel URL of the bridge instead."
    )
