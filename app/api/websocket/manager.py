"""WebSocket connection manager.

Holds active connections per user and pushes notification envelopes to them.
Use via app.state.ws_manager (set in lifespan). Implements IConnectionRegistry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks live WebSocket connections keyed by user id.

    A user may hold several connections (tabs, devices). Connections that
    fail on send are dropped.
    """

    def __init__(self) -> None:
        self._connections_by_user: dict[int, set[WebSocket]] = {}
        self._websocket_to_user: dict[WebSocket, int] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: int) -> None:
        """Accept and register a connection for the user."""
        await websocket.accept()
        async with self._lock:
            self._connections_by_user.setdefault(user_id, set()).add(websocket)
            self._websocket_to_user[websocket] = user_id

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        """Remove a connection; caller holds the lock."""
        user_id = self._websocket_to_user.pop(websocket, None)
        if user_id is None:
            return
        conns = self._connections_by_user.get(user_id)
        if conns is None:
            return
        conns.discard(websocket)
        if not conns:
            del self._connections_by_user[user_id]

    def is_connected(self, user_id: int) -> bool:
        return bool(self._connections_by_user.get(user_id))

    async def push(self, user_id: int, message: dict[str, Any]) -> int:
        """Send a JSON message to every connection of the user.

        Returns:
            Number of connections the message was delivered to.
        """
        async with self._lock:
            snapshot = list(self._connections_by_user.get(user_id, set()))
        delivered = 0
        dead: list[WebSocket] = []
        for ws in snapshot:
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping dead connection for user %s", user_id)
                dead.append(ws)
                continue
            delivered += 1
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)
        return delivered
