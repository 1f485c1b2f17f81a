"""Lobby service pairing anonymous connections by match code."""

import asyncio
import logging
import random
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.config import get_settings
from app.schemas.ws import GameCreated, JoinedGame, NoSuchGame
from app.services.websocket.connection import ConnectionClosed, PlayerConnection

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits


@dataclass
class PendingEntry:
    """A reserved code waiting for a second connection."""

    code: str
    connection: PlayerConnection
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expiry_task: asyncio.Task | None = None


@dataclass
class JoinResult:
    """Result of join operation."""

    success: bool
    connections: tuple[PlayerConnection, PlayerConnection] | None = None
    error_code: str | None = None

    @classmethod
    def matched(
        cls, connections: tuple[PlayerConnection, PlayerConnection]
    ) -> "JoinResult":
        return cls(success=True, connections=connections)

    @classmethod
    def no_such_game(cls) -> "JoinResult":
        return cls(success=False, error_code="NO_SUCH_GAME")


class Lobby:
    """Holds unmatched connections keyed by a generated code.

    The pending table is only touched under ``_lock``, and the lock is never
    held across a send to a player. A connection handed out by ``join`` is no
    longer referenced by the lobby.
    """

    def __init__(
        self,
        timeout_seconds: float = 300,
        code_length: int = 20,
        rng: random.Random | None = None,
    ):
        self._timeout_seconds = timeout_seconds
        self._code_length = code_length
        self._rng = rng or random.Random()
        self._pending: dict[str, PendingEntry] = {}
        self._lock = asyncio.Lock()

        logger.info(
            "Lobby initialized: timeout=%ss, code_length=%d",
            timeout_seconds,
            code_length,
        )

    def _generate_code(self) -> str:
        # Caller holds the lock
        while True:
            code = "".join(self._rng.choices(CODE_ALPHABET, k=self._code_length))
            if code not in self._pending:
                return code
            logger.debug("Generated code collides with a pending entry, retrying")

    async def create(self, connection: PlayerConnection) -> str:
        """Reserve a new code for ``connection`` and send it to the creator.

        Args:
            connection: The creating player's connection.

        Returns:
            The reserved code.

        Raises:
            ConnectionClosed: If the code could not be delivered. The entry is
                dropped in that case.
        """
        async with self._lock:
            code = self._generate_code()
            entry = PendingEntry(code=code, connection=connection)
            self._pending[code] = entry
            entry.expiry_task = asyncio.create_task(self._expire(entry))

        logger.info("Game %s reserved for connection %s", code, connection.connection_id)

        try:
            await connection.send_message(GameCreated(code=code))
        except ConnectionClosed:
            logger.warning("Creator of game %s left before receiving the code", code)
            await self._discard(entry)
            raise

        return code

    async def join(self, code: str, connection: PlayerConnection) -> JoinResult:
        """Pair ``connection`` with the connection waiting on ``code``.

        Args:
            code: The code the joiner was given.
            connection: The joining player's connection.

        Returns:
            JoinResult with both connections (creator first) on success, or
            NO_SUCH_GAME if the code is unknown, expired or already taken.

        Raises:
            ConnectionClosed: If the joiner could not be told it joined. The
                waiting creator is closed as well, since its match cannot start.
        """
        async with self._lock:
            entry = self._pending.pop(code, None)
            if entry is not None and entry.expiry_task is not None:
                entry.expiry_task.cancel()

        if entry is None:
            logger.info(
                "Connection %s tried to join unknown game %s",
                connection.connection_id,
                code,
            )
            try:
                await connection.send_message(NoSuchGame())
            except ConnectionClosed:
                logger.debug("Joiner %s left before NoSuchGame", connection.connection_id)
            return JoinResult.no_such_game()

        try:
            await connection.send_message(JoinedGame())
        except ConnectionClosed:
            logger.warning("Joiner of game %s left before the match started", code)
            await entry.connection.close()
            raise

        logger.info(
            "Game %s matched: creator=%s, joiner=%s",
            code,
            entry.connection.connection_id,
            connection.connection_id,
        )
        return JoinResult.matched((entry.connection, connection))

    async def _expire(self, entry: PendingEntry) -> None:
        await asyncio.sleep(self._timeout_seconds)
        # A code may have been reissued after this entry left; only drop our own.
        async with self._lock:
            if self._pending.get(entry.code) is not entry:
                return
            del self._pending[entry.code]
        waited = (datetime.now(timezone.utc) - entry.created_at).total_seconds()
        logger.info("Game %s expired without a second player after %.0fs", entry.code, waited)
        await entry.connection.close()

    async def _discard(self, entry: PendingEntry) -> None:
        async with self._lock:
            if self._pending.get(entry.code) is entry:
                del self._pending[entry.code]
        if entry.expiry_task is not None:
            entry.expiry_task.cancel()

    async def is_pending(self, code: str) -> bool:
        async with self._lock:
            return code in self._pending

    async def pending_count(self) -> int:
        async with self._lock:
            return len(self._pending)

    async def shutdown(self) -> None:
        """Cancel every expiry timer and close every waiting connection."""
        async with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()

        logger.info("Closing %d pending games", len(entries))
        for entry in entries:
            if entry.expiry_task is not None:
                entry.expiry_task.cancel()
                try:
                    await entry.expiry_task
                except asyncio.CancelledError:
                    pass
            await entry.connection.close()


_lobby: Lobby | None = None


def get_lobby() -> Lobby:
    """Get the singleton lobby.

    Returns the existing lobby if initialized, otherwise creates one from settings.
    """
    global _lobby
    if _lobby is None:
        settings = get_settings()
        _lobby = Lobby(
            timeout_seconds=settings.LOBBY_TIMEOUT_SECONDS,
            code_length=settings.GAME_CODE_LENGTH,
        )
    return _lobby


def reset_lobby() -> None:
    """Forget the singleton lobby (used on shutdown)."""
    global _lobby
    _lobby = None
