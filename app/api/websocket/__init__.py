"""WebSocket connection manager and dependencies.

Used by the WebSocket endpoint and the notification emitter (live push).
"""

from app.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
