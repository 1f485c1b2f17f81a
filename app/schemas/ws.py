"""Wire messages exchanged over the game websockets.

Messages are externally tagged JSON: a variant without data is sent as its bare
tag (``"InvalidMove"``), a variant with data as a single-key object
(``{"MovePlayed": {"visible_opponents": [[3, 7]]}}``).
"""

from __future__ import annotations

import json
from typing import Any, ClassVar

from pydantic import BaseModel

from app.schemas.game_engine import Position, Square


class WSCloseCode:
    """WebSocket close codes (RFC 6455)."""

    NORMAL = 1000
    INTERNAL_ERROR = 1011


class ServerMessage(BaseModel):
    """Base class for every message sent from server to client."""

    tag: ClassVar[str]

    def to_wire(self) -> Any:
        fields = self.model_dump(mode="json")
        if not fields:
            return self.tag
        return {self.tag: fields}

    def encode(self) -> str:
        return json.dumps(self.to_wire())


# --- Lobby messages ---


class GameCreated(ServerMessage):
    """Sent once to the creator after a code has been reserved."""

    tag: ClassVar[str] = "Game"
    code: str

    def to_wire(self) -> Any:
        return {self.tag: self.code}


class NoSuchGame(ServerMessage):
    tag: ClassVar[str] = "NoSuchGame"


class JoinedGame(ServerMessage):
    tag: ClassVar[str] = "JoinedGame"


# --- Match messages ---


class Start(ServerMessage):
    """Sent once to each side when the match begins."""

    tag: ClassVar[str] = "Start"
    board: list[list[Square]]
    is_first_player: bool


class InvalidMove(ServerMessage):
    tag: ClassVar[str] = "InvalidMove"


class MovePlayed(ServerMessage):
    """Full set of opponent positions currently visible to the recipient."""

    tag: ClassVar[str] = "MovePlayed"
    visible_opponents: list[Position]


class OpponentLeft(ServerMessage):
    tag: ClassVar[str] = "OpponentLeft"
