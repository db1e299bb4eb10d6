"""
Database bridge client.

The bridge is a small HTTP service in front of the UltiSales SQL Server,
usually exposed through an ngrok tunnel. This client is deliberately
fail-soft: a broken query yields no rows instead of an exception, so one
bad statement cannot take down a run or the dashboard fan-out.
"""

import logging
from typing import Any

import httpx
from models import BridgeHealth, BridgeResponse, BridgeStatus, ResultRow

from .endpoint import BridgeEndpoint

logger = logging.getLogger(__name__)

BRIDGE_HEADERS = {
    "ngrok-skip-browser-warning": "69420",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def _coerce_row(raw: dict[str, Any]) -> ResultRow:
    """Convert a JSON object into a row of scalar values."""
    row: ResultRow = {}
    for key, value in raw.items():
        if value is None or isinstance(value, (str, int, float, bool)):
            row[str(key)] = value
        else:
            row[str(key)] = str(value)
    return row


class BridgeClient:
    """
    Async client for the bridge's ``/query`` and ``/health`` paths.

    Each call opens and closes its own ``httpx.AsyncClient``; the base URL
    is read from the endpoint store at call time so a re-validated link
    takes effect immediately.

    Usage:
        client = BridgeClient(BridgeEndpoint("http://192.168.8.28:8000"))
        rows = await client.execute("SELECT TOP 5 * FROM dbo.STOCK")
    """

    def __init__(
        self,
        endpoint: BridgeEndpoint,
        timeout_seconds: float = 20.0,
        health_timeout_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the bridge client.

        Args:
            endpoint: Store holding the bridge base URL.
            timeout_seconds: Fixed bound on a ``/query`` round trip.
            health_timeout_seconds: Fixed bound on a ``/health`` probe.
            transport: Optional httpx transport (tests use ``MockTransport``).
        """
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.health_timeout_seconds = health_timeout_seconds
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=BRIDGE_HEADERS,
            timeout=timeout,
            transport=self._transport,
        )

    async def query(self, sql: str) -> BridgeResponse:
        """
        Send one statement to the bridge.

        Every failure branch collapses into ``BridgeResponse(ok=False)``.

        Args:
            sql: The SQL statement to execute.

        Returns:
            A ``BridgeResponse`` with the rows on success.
        """
        base_url = self.endpoint.url
        logger.info("Bridge query to %s: %s", base_url, sql[:200])

        try:
            async with self._client(self.timeout_seconds) as client:
                response = await client.post(f"{base_url}/query", json={"sql": sql})
        except httpx.TimeoutException:
            return BridgeResponse(ok=False, error=f"Timed out after {self.timeout_seconds:.0f}s")
        except httpx.HTTPError as exc:
            return BridgeResponse(ok=False, error=f"Transport error: {exc}")

        if not response.is_success:
            return BridgeResponse(
                ok=False,
                error=f"HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            return BridgeResponse(ok=False, error=f"Malformed JSON body: {exc}")

        if not isinstance(payload, list):
            return BridgeResponse(
                ok=False,
                error=f"Expected a JSON array, got {type(payload).__name__}",
            )

        rows = [_coerce_row(item) for item in payload if isinstance(item, dict)]
        return BridgeResponse(ok=True, rows=rows)

    async def execute(self, sql: str) -> list[ResultRow]:
        """
        Execute a statement and return its rows, or ``[]`` on any failure.

        Args:
            sql: The SQL statement to execute.

        Returns:
            List of row dicts; never raises for network or payload errors.
        """
        result = await self.query(sql)
        if not result.ok:
            logger.warning("Bridge query failed (returning no rows): %s", result.error)
            return []
        logger.info("Bridge query returned %d rows", len(result.rows))
        return result.rows

    async def check_health(self, url: str | None = None) -> BridgeHealth:
        """
        Probe ``/health`` and classify the bridge.

        Args:
            url: Candidate base URL; defaults to the stored endpoint.

        Returns:
            ``healthy`` on 200, ``degraded`` on any other status, and
            ``unreachable`` when no response arrives.
        """
        base_url = (url or self.endpoint.url).rstrip("/")
        try:
            async with self._client(self.health_timeout_seconds) as client:
                response = await client.get(f"{base_url}/health")
        except httpx.TimeoutException:
            return BridgeHealth(
                status=BridgeStatus.UNREACHABLE,
                url=base_url,
                detail="TIMEOUT: The bridge didn't respond in time. Is the ngrok tunnel active?",
            )
        except httpx.HTTPError as exc:
            logger.warning("Bridge health probe failed for %s: %s", base_url, exc)
            return BridgeHealth(
                status=BridgeStatus.UNREACHABLE,
                url=base_url,
                detail=(
                    f"UNREACHABLE: Failed to connect to {base_url}. "
                    "Check your internet and ngrok status."
                ),
            )

        if response.status_code == httpx.codes.OK:
            return BridgeHealth(status=BridgeStatus.HEALTHY, url=base_url)

        detail = "Bridge responded but reported an internal error."
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = str(body.get("message") or body.get("detail") or detail)
        return BridgeHealth(status=BridgeStatus.DEGRADED, url=base_url, detail=detail)
