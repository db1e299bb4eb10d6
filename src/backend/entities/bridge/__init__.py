"""
Database Bridge - HTTP client and endpoint store for the remote SQL bridge.
"""

from .client import BRIDGE_HEADERS, BridgeClient
from .endpoint import BridgeEndpoint, clean_bridge_url, ensure_reachable_scheme

__all__ = [
    "BRIDGE_HEADERS",
    "BridgeClient",
    "BridgeEndpoint",
    "clean_bridge_url",
    "ensure_reachable_scheme",
]
