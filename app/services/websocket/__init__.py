from app.services.websocket.connection import (
    ConnectionClosed,
    PlayerConnection,
    WebSocketConnection,
)

__all__ = [
    "ConnectionClosed",
    "PlayerConnection",
    "WebSocketConnection",
]
