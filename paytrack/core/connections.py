"""Live push-channel connections and the broadcast primitive.

The registry is owned by the application instance (``app.state``) and handed
to publishers explicitly; there is no module-level connection set.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol
from uuid import UUID

from fastapi import Request
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    PING = "PING"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_OVERDUE = "PAYMENT_OVERDUE"
    PAYMENT_UPDATE = "PAYMENT_UPDATE"
    CUSTOMER_ADDED = "CUSTOMER_ADDED"


class Connection(Protocol):
    """The slice of a Starlette WebSocket the registry relies on."""

    client_state: WebSocketState
    application_state: WebSocketState

    async def accept(self) -> None: ...

    async def send_text(self, data: str) -> None: ...


class EventEncoder(json.JSONEncoder):
    """JSON encoder for event payloads (datetimes, UUIDs, Decimals, enums)."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                obj = obj.replace(tzinfo=UTC)
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _is_open(connection: Connection) -> bool:
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


class ConnectionRegistry:
    """Set of open push connections with fire-and-forget broadcast.

    No acknowledgement, replay or retry: a connection that is closed or fails
    mid-send is skipped and stays registered until its own close handler
    removes it.
    """

    def __init__(self) -> None:
        self._connections: set[Connection] = set()

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(self, connection: Connection) -> None:
        """Accept, register and greet a new connection with a PING."""
        await connection.accept()
        self._connections.add(connection)
        logger.info("Client connected (Total connections: %d)", len(self._connections))
        await connection.send_text(json.dumps({"type": EventType.PING.value}))

    def disconnect(self, connection: Connection) -> None:
        self._connections.discard(connection)
        logger.info(
            "Client disconnected (Remaining connections: %d)", len(self._connections)
        )

    async def broadcast(self, event_type: EventType | str, data: dict[str, Any]) -> int:
        """Send ``{type, data, timestamp}`` to every open connection.

        Returns the number of connections the message was written to.
        """
        message = json.dumps(
            {
                "type": EventType(event_type).value,
                "data": data,
                "timestamp": datetime.now(UTC).isoformat(),
            },
            cls=EventEncoder,
        )

        sent = 0
        for connection in list(self._connections):
            if not _is_open(connection):
                continue
            try:
                await connection.send_text(message)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Skipping connection after send failure: %s", exc)
                continue
            sent += 1

        logger.info("Notification sent to %d clients: %s", sent, EventType(event_type).value)
        return sent


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """FastAPI dependency returning the app-owned registry."""
    return request.app.state.connection_registry  # type: ignore[no-any-return]
