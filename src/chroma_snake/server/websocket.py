"""WebSocket handler for real-time play."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketState

from chroma_snake.server.session import SessionManager

logger = logging.getLogger(__name__)

ws_router = APIRouter()

# Close code sent when the server is at its session limit.
CLOSE_TOO_MANY_SESSIONS = 4029


def _get_manager(ws: WebSocket) -> SessionManager:
    return ws.app.state.session_manager


@ws_router.websocket("/play")
async def play(websocket: WebSocket) -> None:
    """Player WebSocket: send keys, receive game state each tick.

    Inbound messages are JSON objects: ``{"key": "ArrowUp"}`` steers the
    snake and ``{"action": "reset"}`` starts over. Anything else is ignored.
    """
    manager = _get_manager(websocket)
    try:
        session = manager.open_session(websocket)
    except ValueError as exc:
        await websocket.close(code=CLOSE_TOO_MANY_SESSIONS, reason=str(exc))
        return

    await websocket.accept()
    logger.info("Player connected to session %s.", session.session_id)
    try:
        await session.run()
    finally:
        manager.remove_session(session.session_id)
        # The session may end server-side while the client is still attached.
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close(code=1000, reason="Session ended.")
            except Exception:
                logger.warning(
                    "Failed closing socket for session %s.", session.session_id,
                )
