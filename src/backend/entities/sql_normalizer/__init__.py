"""
SQL Normalizer - rewrites generated SQL to the live schema's naming.
"""

from .normalizer import apply_session_preamble, normalize

__all__ = ["apply_session_preamble", "normalize"]
