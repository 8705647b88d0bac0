"""
Test suite for HttpEventTransport.

Uses httpx.MockTransport in place of the persistence endpoint.

System role: Verification of the capture network boundary
"""

import json

import httpx
import pytest

from prelude.core.capture import HttpEventTransport
from prelude.core.exceptions import FlushError

EVENTS_URL = "http://test/api/v1/events"


def make_transport(handler) -> HttpEventTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpEventTransport(EVENTS_URL, client=client)


class TestHttpEventTransport:
    """Test suite for HttpEventTransport.send()."""

    @pytest.mark.asyncio
    async def test_send_should_post_session_and_events(self) -> None:
        """Test request body and saved count parsing."""
        # Arrange
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "savedCount": 2})

        transport = make_transport(handler)
        events = [
            {"type": "paste_external", "timestamp": 1, "sequenceNumber": 0, "data": {"content": "x"}},
            {"type": "snapshot", "timestamp": 2, "sequenceNumber": 1, "data": []},
        ]

        # Act
        saved = await transport.send("session-1", events)

        # Assert
        assert saved == 2
        assert seen == [{"sessionId": "session-1", "events": events}]

    @pytest.mark.asyncio
    async def test_send_should_raise_flush_error_on_error_status(self) -> None:
        transport = make_transport(lambda request: httpx.Response(500, json={"detail": "down"}))

        with pytest.raises(FlushError) as exc_info:
            await transport.send("session-1", [])

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_send_should_raise_flush_error_on_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = make_transport(handler)

        with pytest.raises(FlushError) as exc_info:
            await transport.send("session-1", [])

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_send_should_raise_flush_error_on_unreadable_body(self) -> None:
        transport = make_transport(lambda request: httpx.Response(200, text="ok"))

        with pytest.raises(FlushError):
            await transport.send("session-1", [])

    @pytest.mark.asyncio
    async def test_aclose_should_leave_injected_client_open(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        transport = HttpEventTransport(EVENTS_URL, client=client)

        await transport.aclose()

        assert client.is_closed is False
        await client.aclose()
