"""
Query Orchestrator - runs one business question through the full pipeline.

The pipeline:
1. Plans SQL and a chart with the query planner
2. Normalizes the SQL to the live schema
3. Executes it through the database bridge
4. Summarizes the rows with the insight synthesizer
"""

from .pipeline import run_analysis

__all__ = ["run_analysis"]
