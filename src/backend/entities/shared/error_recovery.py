"""Error recovery helpers for failed analysis runs.

Pure functions that classify a pipeline failure, build a single
user-facing message, and select contextual follow-up questions.
"""

from __future__ import annotations

from models import RecoverySuggestion

from .errors import ANALYST, DATABASE, INPUT, PipelineError

# ── Topic detection ─────────────────────────────────────────────────────

_TOPIC_KEYWORDS: dict[str, set[str]] = {
    "customers": {"customer", "customers", "client", "clients", "debtor", "buyer", "buyers"},
    "stock": {"stock", "inventory", "product", "products", "item", "items", "plu"},
    "sales": {"sales", "revenue", "sold", "invoice", "invoices", "turnover", "margin"},
}

# Topic -> example recovery prompts
_RECOVERY_SUGGESTIONS: dict[str, list[RecoverySuggestion]] = {
    "customers": [
        RecoverySuggestion(title="Top customers", prompt="Top 5 customers by revenue this year"),
        RecoverySuggestion(title="New debtors", prompt="How many new debtors were added last month?"),
        RecoverySuggestion(title="Dormant accounts", prompt="Customers with no purchases in 90 days"),
    ],
    "stock": [
        RecoverySuggestion(title="Low stock", prompt="Which stocked items have fewer than 5 on hand?"),
        RecoverySuggestion(title="Best sellers", prompt="Top 10 products by quantity sold this month"),
        RecoverySuggestion(title="Stock value", prompt="Total stock value at cost by stock type"),
    ],
    "sales": [
        RecoverySuggestion(title="Daily sales", prompt="Daily revenue for the last 30 days"),
        RecoverySuggestion(title="Sales mix", prompt="Revenue split by transaction type this month"),
        RecoverySuggestion(title="Year on year", prompt="Monthly revenue this year versus last year"),
    ],
}

_GENERIC_SUGGESTIONS: list[RecoverySuggestion] = [
    RecoverySuggestion(title="Daily sales", prompt="Daily revenue for the last 30 days"),
    RecoverySuggestion(title="Top customers", prompt="Top 5 customers by revenue this year"),
    RecoverySuggestion(title="Low stock", prompt="Which stocked items have fewer than 5 on hand?"),
]

_DATABASE_SUGGESTIONS: list[RecoverySuggestion] = [
    RecoverySuggestion(title="Check bridge", prompt="Open the bridge configuration and validate the link"),
    RecoverySuggestion(title="Check bridge health", prompt="Run the bridge health check and retry"),
]


def classify_failure(error: BaseException) -> str:
    """Classify a failure by the side that caused it.

    Args:
        error: Exception raised by a pipeline run.

    Returns:
        One of ``'analyst'``, ``'database'`` or ``'input'``. Unknown
        exceptions count as analyst failures.
    """
    if isinstance(error, PipelineError):
        return error.source
    return ANALYST


def detect_topic(question: str) -> str | None:
    """Detect the business topic of a question from its keywords.

    Args:
        question: The user's question.

    Returns:
        Topic key or None.
    """
    words = {word.strip("?.,!:;\"'").lower() for word in question.split()}
    for topic, keywords in _TOPIC_KEYWORDS.items():
        if words & keywords:
            return topic
    return None


def build_error_recovery(
    error: BaseException,
    question: str = "",
) -> tuple[str, list[RecoverySuggestion]]:
    """Build a user-friendly error message and recovery suggestions.

    Args:
        error: Exception raised by a pipeline run.
        question: The question that failed, used to pick suggestions.

    Returns:
        Tuple of (error_message, recovery_suggestions).
    """
    category = classify_failure(error)

    if isinstance(error, PipelineError):
        message = error.user_message
    else:
        message = PipelineError.default_message

    if category == DATABASE:
        return message, _DATABASE_SUGGESTIONS[:3]
    if category == INPUT:
        return message, _GENERIC_SUGGESTIONS[:3]

    topic = detect_topic(question)
    if topic and topic in _RECOVERY_SUGGESTIONS:
        suggestions = _RECOVERY_SUGGESTIONS[topic][:3]
    else:
        suggestions = _GENERIC_SUGGESTIONS[:3]
    return message, suggestions
