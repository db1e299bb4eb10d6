"""Helpers for reading structured JSON out of agent responses."""

from __future__ import annotations

import json
import re
from typing import Any


def extract_response_text(response: Any) -> str:  # noqa: ANN401
    """Return the first non-empty text content from an agent response.

    Args:
        response: Result of ``ChatAgent.run()``.

    Returns:
        The text, or ``""`` when the response carries none.
    """
    for msg in getattr(response, "messages", None) or []:
        for content in getattr(msg, "contents", None) or []:
            text_value = getattr(content, "text", None)
            if text_value:
                return text_value
    text_value = getattr(response, "text", None)
    return text_value if isinstance(text_value, str) else ""


def parse_json_object(response_text: str) -> dict[str, Any]:
    """Parse a JSON object out of LLM response text.

    Attempts direct JSON parsing, then markdown code-fence extraction,
    and finally a regex search for an embedded JSON object.

    Args:
        response_text: The raw text response from the LLM.

    Returns:
        Parsed dictionary.

    Raises:
        ValueError: If no JSON object can be recovered.
    """
    text = response_text.strip()
    if not text:
        raise ValueError("LLM response was empty")

    # Direct JSON parse
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # Extract from markdown code fence
    fence = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL | re.IGNORECASE)
    if fence:
        try:
            parsed = json.loads(fence.group(1).strip())
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

    # Outermost braces
    start = text.find("{")
    end = text.rfind("}")
    if 0 <= start < end:
        try:
            parsed = json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

    raise ValueError(f"Failed to parse LLM response: {text[:200]}")
