"""Agent move types - one entry per roster slot in a submitted batch."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator

Coordinate = Annotated[StrictInt, Field(ge=0)]


class Nothing(BaseModel):
    """Agent stays as it is."""

    move_type: Literal["Nothing"] = "Nothing"


class TurnLeft(BaseModel):
    """Agent rotates 90 degrees to its left."""

    move_type: Literal["TurnLeft"] = "TurnLeft"


class TurnRight(BaseModel):
    """Agent rotates 90 degrees to its right."""

    move_type: Literal["TurnRight"] = "TurnRight"


class MoveTo(BaseModel):
    """Agent relocates to a cell inside its visibility cone."""

    move_type: Literal["Move"] = "Move"
    target: tuple[Coordinate, Coordinate]


# Union type for all agent moves
AgentMove = Annotated[
    Nothing | TurnLeft | TurnRight | MoveTo,
    Field(discriminator="move_type"),
]

_UNIT_MOVES: dict[str, type[BaseModel]] = {
    "Nothing": Nothing,
    "TurnLeft": TurnLeft,
    "TurnRight": TurnRight,
}


def build_move_from_wire(raw: Any) -> Nothing | TurnLeft | TurnRight | MoveTo:
    """Build a typed move from its wire form.

    Accepts ``"Nothing"``, ``"TurnLeft"``, ``"TurnRight"`` or
    ``{"Move": [row, col]}``.

    Raises:
        ValueError: If the value is not one of the forms above.
    """
    if isinstance(raw, BaseModel):
        return raw
    if isinstance(raw, str):
        move_cls = _UNIT_MOVES.get(raw)
        if move_cls is None:
            raise ValueError(f"Unknown move: {raw}")
        return move_cls()
    if isinstance(raw, dict) and len(raw) == 1 and "Move" in raw:
        return MoveTo(target=raw["Move"])
    raise ValueError(f"Unrecognized move: {raw!r}")


class Submission(BaseModel):
    """Batch of moves sent by a client for its turn."""

    moves: list[AgentMove]

    @field_validator("moves", mode="before")
    @classmethod
    def decode_wire_moves(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [build_move_from_wire(item) for item in v]


class InvalidSubmission(ValueError):
    """Raised when a client message cannot be decoded into a batch of moves."""


def decode_submission(text: str | None) -> list[Nothing | TurnLeft | TurnRight | MoveTo]:
    """Decode a raw client message into its list of moves.

    Raises:
        InvalidSubmission: If the text is missing, not JSON, or not a valid batch.
    """
    if text is None:
        raise InvalidSubmission("Submission must be a text message")
    try:
        return Submission.model_validate_json(text).moves
    except ValidationError as e:
        raise InvalidSubmission(str(e)) from e
