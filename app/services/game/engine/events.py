"""Match event types - emitted by the engine for the session to deliver.

Each accepted turn produces one MovePlayed per side. The session turns them
into wire messages; the sequence numbers make the turn history auditable in
logs.
"""

from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.game_engine import Position, Side


class GameEvent(BaseModel):
    """Base class for all match events."""

    event_type: str
    seq: int = 0  # Sequence number assigned during processing


class MovePlayed(GameEvent):
    """A turn was accepted; carries what ``recipient`` can now see."""

    event_type: Literal["move_played"] = "move_played"
    recipient: Side
    turn_number: int = Field(..., description="1-based number of the turn just played")
    visible_opponents: list[Position] = Field(
        ..., description="Opponent positions inside any of the recipient's cones"
    )
