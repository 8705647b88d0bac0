"""
Event batch transports.

A transport delivers one batch of wire events for a session and reports how
many were saved. Any failure is raised as FlushError so the tracker can put
the batch back on its queue.

Dependencies: httpx, prelude.core.exceptions
System role: Network boundary of the capture side
"""

from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from prelude.core.exceptions import FlushError


class EventTransport(Protocol):
    """Delivers event batches to durable storage."""

    async def send(self, session_id: str, events: Sequence[dict[str, Any]]) -> int:
        """
        Persist a batch of wire events.

        Returns:
            int: Number of events the server reports as saved

        Raises:
            FlushError: On any network or server failure
        """
        ...


class HttpEventTransport:
    """
    POSTs event batches to the persistence endpoint with httpx.

    Usage:
        transport = HttpEventTransport("http://localhost:8000/api/v1/events")
        saved = await transport.send(session_id, [event.to_wire()])
        await transport.aclose()
    """

    def __init__(
        self,
        events_url: str,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            events_url: Absolute URL of POST /events
            timeout_s: Request timeout in seconds
            client: Optional pre-built client (tests inject a MockTransport client)
        """
        self.events_url = events_url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    async def send(self, session_id: str, events: Sequence[dict[str, Any]]) -> int:
        try:
            response = await self._client.post(
                self.events_url,
                json={"sessionId": session_id, "events": list(events)},
            )
        except httpx.HTTPError as e:
            raise FlushError(f"Event save request failed: {e}") from e

        if response.is_error:
            raise FlushError(
                "Event save rejected by server",
                status_code=response.status_code,
            )

        try:
            return int(response.json().get("savedCount", 0))
        except (ValueError, AttributeError) as e:
            raise FlushError("Event save returned an unreadable body") from e

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
