"""
Entities package.

Each subdirectory is one stage of the query-to-insight pipeline:
- bridge/: HTTP client and endpoint store for the remote database bridge
- sql_normalizer/: Rewrites generated SQL to the live schema's naming
- query_planner/: LLM call #1, question -> SQL and chart configuration
- insight_synthesizer/: LLM call #2, rows -> narrative insight
- query_orchestrator/: Runs one question through the full pipeline
- dashboard/: Parallel KPI queries and the executive brief
- workflow/: Dependency bundle and factories shared by the above
- shared/: Protocols, errors, schema context and LLM response helpers
"""
