"""
Narrative insight model produced by the synthesizer LLM.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_BULLETS = 5
"""Upper bound on each bullet list; the LLM is asked for three."""

FALLBACK_SUMMARY = "The analyst returned no summary for this result."


class AnalystInsight(BaseModel):
    """
    One-sentence summary plus three categorized bullet lists.

    All four keys are required in the LLM response. Lists are trimmed to
    ``MAX_BULLETS`` non-blank entries; a blank summary is replaced with
    ``FALLBACK_SUMMARY`` so the presentation layer never sees a hole.
    """

    model_config = ConfigDict(frozen=True)

    summary: str = Field(description="One-sentence executive summary")
    trends: list[str] = Field(description="Observed trends")
    anomalies: list[str] = Field(description="Risk factors and outliers")
    suggestions: list[str] = Field(description="Recommended actions")

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_fallback(cls, value: Any) -> Any:
        if value is None:
            return FALLBACK_SUMMARY
        if isinstance(value, str) and not value.strip():
            return FALLBACK_SUMMARY
        return value.strip() if isinstance(value, str) else value

    @field_validator("trends", "anomalies", "suggestions", mode="before")
    @classmethod
    def _cap_bullets(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return value
        bullets = [str(item).strip() for item in value if item is not None and str(item).strip()]
        return bullets[:MAX_BULLETS]
