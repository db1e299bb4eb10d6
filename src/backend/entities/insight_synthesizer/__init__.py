"""
Insight Synthesizer - LLM call #2: result rows -> structured narrative insight.
"""

from .synthesizer import DEFAULT_SAMPLE_SIZE, AgentInsightSynthesizer, synthesize_insight

__all__ = ["DEFAULT_SAMPLE_SIZE", "AgentInsightSynthesizer", "synthesize_insight"]
