"""Push channel: server-to-client event stream."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from paytrack.core.connections import ConnectionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def event_stream(websocket: WebSocket) -> None:
    registry: ConnectionRegistry = websocket.app.state.connection_registry
    try:
        await registry.connect(websocket)
        while True:
            # Clients do not send commands; inbound frames are only logged
            message = await websocket.receive_text()
            logger.debug("Received message: %s", message)
    except WebSocketDisconnect:
        logger.debug("Client closed the push channel")
    finally:
        registry.disconnect(websocket)
