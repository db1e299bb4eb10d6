"""Unit tests for error recovery classification and suggestion generation.

Tests classify_failure, detect_topic and build_error_recovery for:
- Analyst vs database vs input classification
- One actionable message per failure
- Topic-based suggestions (2-3 per recovery)
"""

import pytest
from entities.shared.error_recovery import build_error_recovery, classify_failure, detect_topic
from entities.shared.errors import (
    BridgeConfigurationError,
    EmptyQuestionError,
    MixedContentError,
    PlanningError,
    SynthesisError,
)
from models import RecoverySuggestion

# ── classify_failure ────────────────────────────────────────────────────


class TestClassifyFailure:
    """Test failure classification by side."""

    def test_planning_is_analyst(self) -> None:
        assert classify_failure(PlanningError("x")) == "analyst"

    def test_synthesis_is_analyst(self) -> None:
        assert classify_failure(SynthesisError("x")) == "analyst"

    def test_bridge_configuration_is_database(self) -> None:
        assert classify_failure(BridgeConfigurationError("x")) == "database"

    def test_mixed_content_is_database(self) -> None:
        assert classify_failure(MixedContentError("x")) == "database"

    def test_empty_question_is_input(self) -> None:
        assert classify_failure(EmptyQuestionError("x")) == "input"

    def test_unknown_exception_is_analyst(self) -> None:
        assert classify_failure(RuntimeError("x")) == "analyst"


# ── detect_topic ────────────────────────────────────────────────────────


class TestDetectTopic:
    """Test topic detection from question keywords."""

    @pytest.mark.parametrize(
        ("question", "topic"),
        [
            ("Top 5 customers by revenue this year", "customers"),
            ("Which items are low on stock?", "stock"),
            ("Daily sales for March", "sales"),
            ("What happened yesterday?", None),
            ("", None),
        ],
    )
    def test_detection(self, question: str, topic: str | None) -> None:
        assert detect_topic(question) == topic


# ── build_error_recovery ────────────────────────────────────────────────


class TestBuildErrorRecovery:
    """Test message and suggestion generation."""

    def test_analyst_message_distinguished(self) -> None:
        message, _ = build_error_recovery(PlanningError("timeout"), "Daily sales")
        assert message.startswith("Could not reach the analyst")

    def test_database_message_distinguished(self) -> None:
        message, suggestions = build_error_recovery(MixedContentError("mixed"))
        assert message.startswith("Could not reach the database")
        assert [s.title for s in suggestions] == ["Check bridge", "Check bridge health"]

    def test_internal_detail_not_leaked(self) -> None:
        """The raw exception text never reaches the user message."""
        message, _ = build_error_recovery(SynthesisError("KeyError: 'trends' at line 3"))
        assert "KeyError" not in message

    def test_topic_suggestions(self) -> None:
        _, suggestions = build_error_recovery(PlanningError("x"), "Which products sold most?")
        assert len(suggestions) == 3
        assert all(isinstance(s, RecoverySuggestion) for s in suggestions)
        assert suggestions[0].title == "Low stock"

    def test_generic_suggestions_without_topic(self) -> None:
        _, suggestions = build_error_recovery(SynthesisError("x"), "Tell me something")
        assert 2 <= len(suggestions) <= 3

    def test_custom_user_message_kept(self) -> None:
        error = PlanningError("x", user_message="Could not reach the analyst: quota exceeded.")
        message, _ = build_error_recovery(error)
        assert message == "Could not reach the analyst: quota exceeded."

    def test_unknown_exception_uses_default(self) -> None:
        message, suggestions = build_error_recovery(ValueError("boom"), "")
        assert message == "Something went wrong while answering your question."
        assert len(suggestions) == 3
