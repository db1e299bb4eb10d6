"""
Query Planner - LLM call #1: business question -> SQL + chart configuration.
"""

from .planner import AgentQueryPlanner, plan_query

__all__ = ["AgentQueryPlanner", "plan_query"]
