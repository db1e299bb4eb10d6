"""Bridge endpoint store.

Holds the user-configurable base URL of the database bridge and persists
the last-known-good value to a small JSON file. The store is passed
explicitly to the bridge client and the API; nothing reads it globally.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from urllib.parse import urlparse

from entities.shared.errors import BridgeConfigurationError, MixedContentError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def clean_bridge_url(url: str) -> str:
    """Validate and canonicalize a bridge base URL.

    Args:
        url: User-supplied URL, e.g. ``https://xxxx.ngrok-free.app/``.

    Returns:
        The URL stripped of whitespace and trailing slashes.

    Raises:
        BridgeConfigurationError: If the URL is empty or not http(s).
    """
    candidate = (url or "").strip().rstrip("/")
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.netloc:
        raise BridgeConfigurationError(f"Invalid bridge URL: {url!r}")
    return candidate


def ensure_reachable_scheme(bridge_url: str, caller_origin: str | None) -> None:
    """Reject an insecure bridge when the caller runs on a secure origin.

    Args:
        bridge_url: Target bridge base URL.
        caller_origin: Origin of the page making the request (may be None).

    Raises:
        MixedContentError: If the origin is https and the bridge is http.
    """
    if not caller_origin:
        return
    origin_scheme = urlparse(caller_origin).scheme.lower()
    bridge_scheme = urlparse(bridge_url).scheme.lower()
    if origin_scheme == "https" and bridge_scheme == "http":
        raise MixedContentError(
            f"Mixed content: origin {caller_origin} cannot call {bridge_url}",
        )


class BridgeEndpoint:
    """Thread-safe holder for the current bridge base URL.

    Args:
        default_url: URL used when nothing has been saved.
        path: JSON file for the last-known-good URL; None keeps it in memory.
    """

    def __init__(self, default_url: str, path: Path | None = None) -> None:
        self._url = default_url.strip().rstrip("/")
        self._path = path
        self._lock = Lock()

    @classmethod
    def load(cls, path: Path, default_url: str) -> BridgeEndpoint:
        """Create a store from a saved file, falling back to ``default_url``.

        A missing, unreadable or malformed file is logged and ignored.
        """
        endpoint = cls(default_url, path)
        if not path.exists():
            return endpoint
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            saved = clean_bridge_url(data["bridge_url"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, BridgeConfigurationError) as exc:
            logger.warning("Ignoring unreadable bridge config %s: %s", path, exc)
            return endpoint
        endpoint._url = saved
        logger.info("Loaded saved bridge endpoint: %s", saved)
        return endpoint

    @property
    def url(self) -> str:
        """The current base URL, without a trailing slash."""
        with self._lock:
            return self._url

    def update(self, url: str) -> str:
        """Replace the current URL in memory.

        Raises:
            BridgeConfigurationError: If the URL is not http(s).
        """
        cleaned = clean_bridge_url(url)
        with self._lock:
            self._url = cleaned
        logger.info("Bridge endpoint set to %s", cleaned)
        return cleaned

    def save(self) -> None:
        """Persist the current URL as the last-known-good endpoint."""
        if self._path is None:
            return
        with self._lock:
            payload = {"bridge_url": self._url}
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Saved bridge endpoint to %s", self._path)
