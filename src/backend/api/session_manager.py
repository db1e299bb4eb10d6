"""
Session transcripts for the analyst endpoint.

Each session (identified by session_id) keeps an append-only list of
``AnalysisRun`` entries. Entries expire after a TTL of inactivity and the
cache is bounded with LRU eviction.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from threading import Lock

from models import AnalysisRun

logger = logging.getLogger(__name__)

# Session TTL: 30 minutes
SESSION_TTL_SECONDS = 30 * 60

MAX_SESSIONS = 1000


class TranscriptStore:
    """In-memory, thread-safe transcript cache.

    In production, consider Redis or similar for multi-instance deployments.

    Args:
        max_sessions: Maximum number of sessions kept (LRU eviction).
        ttl_seconds: Seconds of inactivity after which a session expires.
        clock: Time source, injectable for tests.
    """

    def __init__(
        self,
        max_sessions: int = MAX_SESSIONS,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions: OrderedDict[str, tuple[list[AnalysisRun], float]] = OrderedDict()
        self._lock = Lock()
        self._max_sessions = max_sessions
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str | None) -> list[AnalysisRun] | None:
        """
        Get a copy of the transcript for a session.

        Args:
            session_id: Client-chosen session identifier

        Returns:
            The runs in submission order, or None if unknown/expired
        """
        if not session_id:
            return None

        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None

            runs, touched_at = entry
            if self._clock() - touched_at > self._ttl_seconds:
                del self._sessions[session_id]
                logger.info("Session expired for session_id=%s", session_id)
                return None

            self._sessions.move_to_end(session_id)
            return list(runs)

    def append(self, session_id: str | None, run: AnalysisRun) -> None:
        """
        Append a completed run to a session transcript.

        Args:
            session_id: Client-chosen session identifier
            run: The completed analysis
        """
        if not session_id:
            return

        with self._lock:
            self._cleanup_expired()
            runs, _ = self._sessions.get(session_id, ([], 0.0))
            runs.append(run)
            self._sessions[session_id] = (runs, self._clock())
            self._sessions.move_to_end(session_id)
            logger.info(
                "Appended run to session_id=%s (%d runs, cache size: %d)",
                session_id,
                len(runs),
                len(self._sessions),
            )

            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted LRU session: session_id=%s", evicted)

    def clear(self, session_id: str) -> None:
        """Remove a session transcript."""
        if not session_id:
            return

        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.info("Cleared session_id=%s", session_id)

    def _cleanup_expired(self) -> None:
        """Remove expired sessions (must hold lock)."""
        now = self._clock()
        expired = [
            sid
            for sid, (_, touched_at) in self._sessions.items()
            if now - touched_at > self._ttl_seconds
        ]
        for sid in expired:
            del self._sessions[sid]

        if expired:
            logger.info("Cleaned up %d expired sessions", len(expired))
