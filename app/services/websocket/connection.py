import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from fastapi import WebSocket

from app.schemas.ws import ServerMessage, WSCloseCode

logger = logging.getLogger(__name__)

MAX_MESSAGE_SIZE = 64 * 1024  # 64 KB


class ConnectionClosed(Exception):
    """The remote player is gone: a send or receive failed, or the peer closed."""

    def __init__(self, connection_id: str, reason: str = "closed"):
        super().__init__(f"Connection {connection_id} {reason}")
        self.connection_id = connection_id
        self.reason = reason


class PlayerConnection(Protocol):
    """Duplex text channel to one remote player."""

    connection_id: str

    async def send_message(self, message: ServerMessage) -> None: ...

    async def receive_text(self) -> str | None: ...

    async def close(self, code: int = WSCloseCode.NORMAL) -> None: ...

    async def wait_closed(self) -> None: ...


@dataclass
class WebSocketConnection:
    """A player connection backed by an accepted Starlette WebSocket."""

    websocket: WebSocket
    connection_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    max_message_size: int = MAX_MESSAGE_SIZE
    _closed: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    async def send_message(self, message: ServerMessage) -> None:
        """Send one protocol message as a text frame.

        Raises:
            ConnectionClosed: If the frame could not be delivered.
        """
        if self._closed.is_set():
            raise ConnectionClosed(self.connection_id, "already closed")
        try:
            await self.websocket.send_text(message.encode())
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", self.connection_id, e)
            self._closed.set()
            raise ConnectionClosed(self.connection_id, "send failed") from e
        logger.debug("Sent %s to connection %s", message.tag, self.connection_id)

    async def receive_text(self) -> str | None:
        """Wait for the next frame from the player.

        Returns:
            The text of the frame, or None for a frame that cannot carry a
            protocol message (binary, or larger than ``max_message_size``).

        Raises:
            ConnectionClosed: If the peer disconnected or the receive failed.
        """
        if self._closed.is_set():
            raise ConnectionClosed(self.connection_id, "already closed")
        try:
            message_data = await self.websocket.receive()
        except Exception as e:
            logger.debug("Error receiving message on %s: %s", self.connection_id, e)
            self._closed.set()
            raise ConnectionClosed(self.connection_id, "receive failed") from e

        if message_data.get("type") == "websocket.disconnect":
            self._closed.set()
            raise ConnectionClosed(self.connection_id, "disconnected")

        raw_text = message_data.get("text")
        if raw_text is None:
            logger.warning("Non-text frame from connection %s", self.connection_id)
            return None

        message_size = len(raw_text.encode("utf-8"))
        if message_size > self.max_message_size:
            logger.warning(
                "Message too large from connection %s: %d bytes (max %d)",
                self.connection_id,
                message_size,
                self.max_message_size,
            )
            return None
        return raw_text

    async def close(self, code: int = WSCloseCode.NORMAL) -> None:
        """Close the websocket; safe to call more than once."""
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            await self.websocket.close(code=code)
        except Exception as e:
            logger.debug("Error closing websocket %s: %s", self.connection_id, e)
        logger.info("Connection %s closed", self.connection_id)

    async def wait_closed(self) -> None:
        """Block until this connection is closed by its owner or by a failure."""
        await self._closed.wait()
