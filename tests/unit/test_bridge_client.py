"""Unit tests for the bridge client.

Every failure branch of ``execute`` must collapse into an empty result,
and ``check_health`` must classify the bridge into exactly one of three
states. The HTTP layer is replaced by ``httpx.MockTransport``.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
from entities.bridge import BRIDGE_HEADERS, BridgeClient, BridgeEndpoint
from models import BridgeStatus

BASE_URL = "http://bridge.test:8000"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> BridgeClient:
    """Build a BridgeClient whose transport is served by ``handler``."""
    return BridgeClient(BridgeEndpoint(BASE_URL), transport=httpx.MockTransport(handler))


def _raise(exc_type: type[httpx.TransportError]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("boom", request=request)

    return handler


# ── execute ───────────────────────────────────────────────────────────


class TestExecute:
    """Tests for the fail-soft ``execute`` contract."""

    async def test_success_returns_rows(self) -> None:
        """A 200 with a JSON array yields the rows."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"Surname": "SMITH", "total": 12.5}])

        rows = await _client(handler).execute("SELECT 1")

        assert rows == [{"Surname": "SMITH", "total": 12.5}]
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{BASE_URL}/query"
        assert json.loads(seen[0].content) == {"sql": "SELECT 1"}

    async def test_sends_bridge_headers(self) -> None:
        """Every request carries the tunnel and no-cache headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        await _client(handler).execute("SELECT 1")

        for name, value in BRIDGE_HEADERS.items():
            assert seen[0].headers[name] == value

    async def test_connect_error_returns_empty(self) -> None:
        """A refused connection yields an empty list, not an exception."""
        assert await _client(_raise(httpx.ConnectError)).execute("SELECT 1") == []

    async def test_timeout_returns_empty(self) -> None:
        """A read timeout yields an empty list."""
        assert await _client(_raise(httpx.ReadTimeout)).execute("SELECT 1") == []

    async def test_server_error_returns_empty(self) -> None:
        """A 500 yields an empty list."""
        client = _client(lambda request: httpx.Response(500, text="kaboom"))
        assert await client.execute("SELECT 1") == []

    async def test_malformed_json_returns_empty(self) -> None:
        """A 200 whose body is not JSON yields an empty list."""
        client = _client(lambda request: httpx.Response(200, text="<html>ngrok</html>"))
        assert await client.execute("SELECT 1") == []

    async def test_non_array_payload_returns_empty(self) -> None:
        """A JSON object instead of an array yields an empty list."""
        client = _client(lambda request: httpx.Response(200, json={"error": "bad sql"}))
        assert await client.execute("SELECT 1") == []

    async def test_query_reports_error_detail(self) -> None:
        """``query`` keeps the failure reason for logging."""
        client = _client(lambda request: httpx.Response(503, text="down"))
        result = await client.query("SELECT 1")

        assert result.ok is False
        assert result.rows == []
        assert result.error is not None
        assert "503" in result.error

    async def test_nested_values_stringified(self) -> None:
        """Non-scalar cell values are converted to strings."""
        client = _client(lambda request: httpx.Response(200, json=[{"meta": {"a": 1}, "n": None}]))
        rows = await client.execute("SELECT 1")

        assert rows == [{"meta": "{'a': 1}", "n": None}]

    async def test_url_read_at_call_time(self) -> None:
        """Updating the endpoint store redirects the next query."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=[])

        endpoint = BridgeEndpoint(BASE_URL)
        client = BridgeClient(endpoint, transport=httpx.MockTransport(handler))
        await client.execute("SELECT 1")
        endpoint.update("https://abcd.ngrok-free.app/")
        await client.execute("SELECT 1")

        assert seen == [f"{BASE_URL}/query", "https://abcd.ngrok-free.app/query"]


# ── check_health ──────────────────────────────────────────────────────


class TestCheckHealth:
    """Tests for the tri-state health probe."""

    async def test_healthy_on_200(self) -> None:
        """A 200 on /health is healthy."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"status": "ok"})

        health = await _client(handler).check_health()

        assert health.status is BridgeStatus.HEALTHY
        assert health.reachable is True
        assert seen == [f"{BASE_URL}/health"]

    async def test_degraded_on_error_status(self) -> None:
        """A non-200 answer is degraded and carries the bridge's message."""
        client = _client(
            lambda request: httpx.Response(500, json={"message": "SQL Server login failed"})
        )
        health = await client.check_health()

        assert health.status is BridgeStatus.DEGRADED
        assert health.reachable is True
        assert health.detail == "SQL Server login failed"

    async def test_degraded_without_json_body(self) -> None:
        """A non-JSON error body still yields a generic diagnostic."""
        client = _client(lambda request: httpx.Response(502, text="Bad Gateway"))
        health = await client.check_health()

        assert health.status is BridgeStatus.DEGRADED
        assert health.detail == "Bridge responded but reported an internal error."

    async def test_unreachable_on_connect_error(self) -> None:
        """No response at all is unreachable."""
        health = await _client(_raise(httpx.ConnectError)).check_health()

        assert health.status is BridgeStatus.UNREACHABLE
        assert health.reachable is False
        assert health.detail is not None
        assert health.detail.startswith("UNREACHABLE")

    async def test_unreachable_on_timeout(self) -> None:
        """A timeout is unreachable with a timeout diagnostic."""
        health = await _client(_raise(httpx.ConnectTimeout)).check_health()

        assert health.status is BridgeStatus.UNREACHABLE
        assert health.detail is not None
        assert health.detail.startswith("TIMEOUT")

    async def test_candidate_url_overrides_store(self) -> None:
        """An explicit URL is probed instead of the stored one."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200)

        health = await _client(handler).check_health("https://new.ngrok-free.app/")

        assert seen == ["https://new.ngrok-free.app/health"]
        assert health.url == "https://new.ngrok-free.app"
