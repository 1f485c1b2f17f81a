from enum import Enum, IntEnum

from pydantic import BaseModel, Field

# (row, col)
Position = tuple[int, int]


class Square(str, Enum):
    EMPTY = "Empty"
    BLOCK = "Block"


class Direction(str, Enum):
    UP = "Up"
    DOWN = "Down"
    LEFT = "Left"
    RIGHT = "Right"

    def turned_left(self) -> "Direction":
        return _LEFT_OF[self]

    def turned_right(self) -> "Direction":
        return _RIGHT_OF[self]


# Board seen from above with row 0 at the top.
_LEFT_OF = {
    Direction.DOWN: Direction.RIGHT,
    Direction.RIGHT: Direction.UP,
    Direction.UP: Direction.LEFT,
    Direction.LEFT: Direction.DOWN,
}
_RIGHT_OF = {after: before for before, after in _LEFT_OF.items()}


class Side(IntEnum):
    """One of the two participants of a match."""

    FIRST = 0
    SECOND = 1

    @property
    def opponent(self) -> "Side":
        return Side.SECOND if self is Side.FIRST else Side.FIRST


# Match phases
class MatchPhase(str, Enum):
    AWAITING_MOVES = "awaiting_moves"
    TERMINATED = "terminated"


class Agent(BaseModel):
    position: Position
    direction: Direction


# Defined pre-initialization from server configuration
class MatchSettings(BaseModel):
    rows: int = 20
    cols: int = 20
    spawn_lane_depth: int = 2
    block_probability: float = 0.1
    roster_size: int = 10
    first_column: int = 6
    vision_depth: int = 4
    check_cross_side_collisions: bool = False


# Defined at match start
class MatchRules(BaseModel):
    rows: int
    cols: int
    vision_depth: int
    check_cross_side_collisions: bool = False

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.rows and 0 <= col < self.cols


class MatchState(BaseModel):
    """Core match state.

    The board is fixed for the whole match. Each roster is indexed by agent
    slot; slots are never added, removed or reordered.
    """

    phase: MatchPhase = MatchPhase.AWAITING_MOVES
    board: list[list[Square]]
    rosters: tuple[list[Agent], list[Agent]]
    current_side: Side = Side.FIRST
    turn_number: int = 0
    rules: MatchRules
    event_seq: int = Field(default=0, description="Next sequence number for events")

    def roster(self, side: Side) -> list[Agent]:
        return self.rosters[side]

    def square_at(self, position: Position) -> Square:
        row, col = position
        return self.board[row][col]
