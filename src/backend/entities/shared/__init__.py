"""Shared utilities for pipeline stages."""
