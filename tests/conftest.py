"""Shared fixtures for engine, lobby and session tests."""

import asyncio
import random

import pytest

from app.schemas.game_engine import (
    Agent,
    Direction,
    MatchPhase,
    MatchRules,
    MatchSettings,
    MatchState,
    Side,
    Square,
)
from app.schemas.ws import ServerMessage, WSCloseCode
from app.services.game.engine import MoveTo, Nothing
from app.services.game.start_game import initialize_match
from app.services.websocket.connection import ConnectionClosed

ROSTER_SIZE = 10

# Scripted frame that never arrives
STALL = object()


class FakeConnection:
    """In-memory player connection.

    ``incoming`` holds scripted frames (text, or None for a non-text frame).
    Once it runs dry the peer is treated as disconnected.
    """

    def __init__(self, connection_id: str, incoming=None, fail_on_send: bool = False):
        self.connection_id = connection_id
        self.incoming = list(incoming or [])
        self.fail_on_send = fail_on_send
        self.fail_after: int | None = None
        self.sent: list[ServerMessage] = []
        self.close_codes: list[int] = []
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send_message(self, message: ServerMessage) -> None:
        exhausted = self.fail_after is not None and len(self.sent) >= self.fail_after
        if self.fail_on_send or exhausted or self.closed:
            self._closed.set()
            raise ConnectionClosed(self.connection_id, "send failed")
        self.sent.append(message)

    async def receive_text(self) -> str | None:
        if not self.incoming:
            self._closed.set()
            raise ConnectionClosed(self.connection_id, "disconnected")
        frame = self.incoming.pop(0)
        if frame is STALL:
            await asyncio.Event().wait()
        return frame

    async def close(self, code: int = WSCloseCode.NORMAL) -> None:
        self.close_codes.append(code)
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class ScriptedRandom(random.Random):
    """Random source whose code draws follow a fixed script."""

    def __init__(self, codes: list[str]):
        super().__init__(0)
        self._codes = list(codes)

    def choices(self, population, weights=None, *, cum_weights=None, k=1):
        return list(self._codes.pop(0))


def make_state(
    first: list[Agent],
    second: list[Agent],
    board: list[list[Square]] | None = None,
    current_side: Side = Side.FIRST,
    check_cross_side_collisions: bool = False,
) -> MatchState:
    """Build a 20x20 match state with the given rosters."""
    if board is None:
        board = [[Square.EMPTY] * 20 for _ in range(20)]
    return MatchState(
        phase=MatchPhase.AWAITING_MOVES,
        board=board,
        rosters=(first, second),
        current_side=current_side,
        rules=MatchRules(
            rows=20,
            cols=20,
            vision_depth=4,
            check_cross_side_collisions=check_cross_side_collisions,
        ),
    )


def agent(row: int, col: int, direction: Direction) -> Agent:
    return Agent(position=(row, col), direction=direction)


def batch(size: int = ROSTER_SIZE, **moves) -> list:
    """All-Nothing batch with selected slots replaced (``slot_3=MoveTo(...)``)."""
    result = [Nothing() for _ in range(size)]
    for key, move in moves.items():
        result[int(key.removeprefix("slot_"))] = move
    return result


def move_to(row: int, col: int) -> MoveTo:
    return MoveTo(target=(row, col))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def open_settings() -> MatchSettings:
    """Reference sizing with no blocks on the board."""
    return MatchSettings(block_probability=0.0)


@pytest.fixture
def fresh_match(open_settings: MatchSettings) -> MatchState:
    """Fresh match on an empty board, first side to move."""
    return initialize_match(open_settings, random.Random(7))
