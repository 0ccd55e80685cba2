"""SSE (Server-Sent Events) streaming channel."""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncGenerator

from sse_starlette.sse import EventSourceResponse, ServerSentEvent
from starlette.background import BackgroundTask

logger = logging.getLogger(__name__)

DEFAULT_KEEPALIVE_SECONDS = 30.0

CONNECTED_PAYLOAD = json.dumps(
    {"type": "connection", "status": "connected"}, separators=(",", ":")
)
KEEPALIVE_COMMENT = "keepalive"
EVENT_SEPARATOR = "\n"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
}


class StreamState(str, Enum):
    OPENING = "opening"
    OPEN = "open"
    CLOSED = "closed"


def keepalive_event() -> ServerSentEvent:
    """Comment-only event that keeps idle intermediaries from closing the stream."""
    return ServerSentEvent(comment=KEEPALIVE_COMMENT, sep=EVENT_SEPARATOR)


class StreamConnection:
    """One client's event stream."""

    def __init__(self, keepalive_interval: float = DEFAULT_KEEPALIVE_SECONDS):
        self.connection_id = str(uuid.uuid4())
        self.keepalive_interval = keepalive_interval
        self.opened_at = datetime.now(timezone.utc)
        self.state = StreamState.OPENING
        self._closed = asyncio.Event()

    @property
    def is_closed(self) -> bool:
        return self.state is StreamState.CLOSED

    async def events(self) -> AsyncGenerator[dict[str, Any], None]:
        """Yield the connection event, then hold the stream open until closed."""
        self.state = StreamState.OPEN
        yield {"data": CONNECTED_PAYLOAD}
        await self._closed.wait()

    def close(self) -> None:
        """Mark the stream closed and release anything waiting on it."""
        if self.is_closed:
            return
        self.state = StreamState.CLOSED
        self._closed.set()


class StreamManager:
    """Tracks the open streams of one application."""

    def __init__(self, keepalive_interval: float = DEFAULT_KEEPALIVE_SECONDS):
        self.keepalive_interval = keepalive_interval
        self._connections: dict[str, StreamConnection] = {}

    def open(self) -> StreamConnection:
        """Create and track a new connection."""
        connection = StreamConnection(self.keepalive_interval)
        self._connections[connection.connection_id] = connection
        logger.info(f"Opened stream: {connection.connection_id}")
        return connection

    async def release(self, connection: StreamConnection) -> None:
        """Close a connection and stop tracking it."""
        connection.close()
        if self._connections.pop(connection.connection_id, None) is not None:
            logger.info(f"Closed stream: {connection.connection_id}")

    async def close_all(self) -> None:
        """Close every open stream (application shutdown)."""
        for connection in list(self._connections.values()):
            await self.release(connection)

    def create_response(self, connection: StreamConnection) -> EventSourceResponse:
        """
        Build the streaming response for a connection.

        The response's ping task is the connection's keep-alive timer. It
        lives in the response's task group, so it stops as soon as the
        client disconnects or the connection is closed.
        """
        return EventSourceResponse(
            connection.events(),
            headers=STREAM_HEADERS,
            ping=connection.keepalive_interval,
            ping_message_factory=keepalive_event,
            sep=EVENT_SEPARATOR,
            background=BackgroundTask(self.release, connection),
        )

    @property
    def connection_count(self) -> int:
        """Return the number of open streams."""
        return len(self._connections)
