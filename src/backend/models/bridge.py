"""
Database bridge models.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import Field, computed_field

from .query import CamelModel, ResultRow


class BridgeStatus(str, Enum):
    """Tri-state liveness of the bridge endpoint."""

    UNREACHABLE = "unreachable"
    DEGRADED = "degraded"
    HEALTHY = "healthy"


class BridgeHealth(CamelModel):
    """Outcome of a ``/health`` probe."""

    status: BridgeStatus
    url: str = ""
    detail: str | None = Field(default=None, description="Diagnostic for non-healthy states")

    @computed_field
    @property
    def reachable(self) -> bool:
        """True when the bridge process answered at all."""
        return self.status is not BridgeStatus.UNREACHABLE


@dataclass(frozen=True)
class BridgeResponse:
    """
    Internal result of one ``/query`` round trip.

    Every failure branch collapses to ``ok=False`` with no rows; the client
    only ever hands ``rows`` to its callers.
    """

    ok: bool
    rows: list[ResultRow] = field(default_factory=list)
    error: str | None = None
