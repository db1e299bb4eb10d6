"""
Query planning and execution models.

A ``QueryPlan`` is what the planner LLM proposes; a ``QueryResult`` is the
plan enriched with the rows the bridge returned for its normalized SQL.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .insight import AnalystInsight

ResultRow = dict[str, str | int | float | bool | None]
"""One record returned by the bridge; shape depends on the query."""

SUPPORTED_VISUALIZATIONS: frozenset[str] = frozenset({"bar", "line", "pie", "area", "scatter"})


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the front-end."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class QueryPlan(CamelModel):
    """
    Structured output of the query planner.

    ``sql`` is untrusted LLM text and must be normalized before it is sent
    to the bridge. ``visualization_type`` is carried through unchanged even
    when the renderer does not know it.
    """

    sql: str = Field(min_length=1, description="T-SQL statement answering the question")
    explanation: str = Field(description="Brief summary of the query logic")
    visualization_type: str = Field(description="One of bar, line, pie, area, scatter")
    x_axis: str = Field(description="Column alias plotted on the x axis")
    y_axis: str = Field(description="Column alias plotted on the y axis")

    @field_validator("sql")
    @classmethod
    def _strip_sql(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("sql must not be blank")
        return stripped

    @property
    def is_supported_visualization(self) -> bool:
        """True when the renderer knows how to draw this chart type (case-insensitive)."""
        return self.visualization_type.strip().lower() in SUPPORTED_VISUALIZATIONS


class QueryResult(CamelModel):
    """A query plan plus the rows returned for it (possibly none)."""

    data: list[ResultRow] = Field(default_factory=list)
    sql: str = Field(description="SQL actually sent to the bridge")
    explanation: str
    visualization_type: str
    x_axis: str
    y_axis: str

    @field_validator("data", mode="before")
    @classmethod
    def _never_null(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_plan(cls, plan: QueryPlan, sql: str, rows: list[ResultRow]) -> "QueryResult":
        """Build a result from a plan, the executed SQL and its rows."""
        return cls(
            data=rows,
            sql=sql,
            explanation=plan.explanation,
            visualization_type=plan.visualization_type,
            x_axis=plan.x_axis,
            y_axis=plan.y_axis,
        )


class AnalysisRun(CamelModel):
    """Composite output of one end-to-end question."""

    question: str
    result: QueryResult
    insight: AnalystInsight


class RecoverySuggestion(CamelModel):
    """A follow-up question offered after a failed run."""

    title: str = Field(description="Short label shown on the suggestion chip")
    prompt: str = Field(description="Question submitted when the chip is clicked")
