"""
Schema context models.

These models describe the target database's tables, join paths and
categorical code lookups. They are loaded once from ``config/`` and
shared read-only by the query planner.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TableSchema(BaseModel):
    """A table definition from the schema context file."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(default="", description="What the table holds")
    fields: tuple[str, ...] = Field(description="Column names in declaration order")
    primary_key: str = Field(description="Primary key column")
    joins: dict[str, str] = Field(
        default_factory=dict, description="Related table name -> join predicate"
    )


class SchemaContext(BaseModel):
    """
    Static description of the database the planner writes SQL against.

    ``domain_mappings`` holds code-to-label dictionaries keyed by table
    then column (e.g. ``AUDIT -> TRANSACTIONTYPE -> {"70": "CREDIT SALE"}``).
    """

    model_config = ConfigDict(frozen=True)

    tables: dict[str, TableSchema] = Field(description="Fully qualified table name -> schema")
    core_tables: tuple[str, ...] = Field(
        default=(), description="Tables exposed to the planner, in prompt order"
    )
    domain_mappings: dict[str, dict[str, dict[str, str]]] = Field(default_factory=dict)

    def prompt_tables(self) -> list[dict[str, Any]]:
        """Return the core tables as plain dicts for prompt serialization."""
        names = self.core_tables or tuple(self.tables)
        result: list[dict[str, Any]] = []
        for name in names:
            table = self.tables.get(name)
            if table is None:
                continue
            entry: dict[str, Any] = {
                "table": name,
                "description": table.description,
                "columns": list(table.fields),
                "primary_key": table.primary_key,
            }
            if table.joins:
                entry["joins"] = dict(table.joins)
            result.append(entry)
        return result

    def to_prompt(self) -> str:
        """Serialize the planner-facing part of the schema as JSON."""
        return json.dumps(self.prompt_tables(), indent=2)

    def label_for(self, table: str, column: str, code: Any) -> str | None:
        """Look up the human-readable label for a categorical code.

        Args:
            table: Table key without schema prefix (e.g. ``"AUDIT"``).
            column: Column key (e.g. ``"TRANSACTIONTYPE"``).
            code: Raw code value as returned by the database.

        Returns:
            The label, or ``None`` when the code is unknown.
        """
        if code is None:
            return None
        key = str(code).strip()
        if isinstance(code, float) and code.is_integer():
            key = str(int(code))
        return self.domain_mappings.get(table.upper(), {}).get(column.upper(), {}).get(key)
