"""Schema context loader.

Reads the static table description and code-to-label dictionaries from
``config/`` once per process.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from models import SchemaContext, TableSchema

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"
_SCHEMA_PATH = _CONFIG_DIR / "schema_context.json"
_MAPPINGS_PATH = _CONFIG_DIR / "domain_mappings.json"


def _read_json_object(path: Path) -> dict[str, Any]:
    """Read a JSON file that must contain a non-empty object.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is malformed or empty.
        TypeError: If the content is not a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"{path.name} must contain a JSON object")
    if not data:
        raise ValueError(f"{path.name} must not be empty")
    return data


def load_schema_context(
    schema_path: Path = _SCHEMA_PATH,
    mappings_path: Path = _MAPPINGS_PATH,
) -> SchemaContext:
    """Load the schema context from its JSON config files.

    Args:
        schema_path: File with ``tables`` and ``core_tables``.
        mappings_path: File with code-to-label dictionaries.

    Returns:
        An immutable ``SchemaContext``.

    Raises:
        FileNotFoundError: If either file does not exist.
        ValueError: If a file is malformed or lists an unknown core table.
        TypeError: If a file has the wrong top-level shape.
    """
    schema_data = _read_json_object(schema_path)
    mappings = _read_json_object(mappings_path)

    raw_tables = schema_data.get("tables")
    if not isinstance(raw_tables, dict) or not raw_tables:
        raise TypeError("schema_context.json must contain a non-empty 'tables' object")

    tables = {name: TableSchema.model_validate(table) for name, table in raw_tables.items()}
    core_tables = tuple(schema_data.get("core_tables") or tables)
    unknown = [name for name in core_tables if name not in tables]
    if unknown:
        raise ValueError(f"core_tables references unknown tables: {', '.join(unknown)}")

    logger.info(
        "Loaded schema context: %d tables (%d core), %d mapped tables",
        len(tables),
        len(core_tables),
        len(mappings),
    )
    return SchemaContext(tables=tables, core_tables=core_tables, domain_mappings=mappings)


@lru_cache(maxsize=1)
def get_schema_context() -> SchemaContext:
    """Return the process-wide schema context, loading it on first use."""
    return load_schema_context()
