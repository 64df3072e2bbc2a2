"""WebSocket endpoint: /ws registers the connection under the token's user id.

Uses the ConnectionManager on app.state.ws_manager (set in lifespan). The
server only pushes; text received from the client is answered with a pong so
clients can keep the socket alive.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.infrastructure.security.jwt import user_id_from_token

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Validate ?token=<jwt>, register with the manager, and hold until disconnect."""
    manager = websocket.app.state.ws_manager
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        user_id = user_id_from_token(token)
    except ValueError:
        await _reject_websocket(websocket, "Invalid token")
        return
    await manager.connect(websocket, user_id)
    try:
        while True:
            data = await websocket.receive_text()
            if data.strip().lower() == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
