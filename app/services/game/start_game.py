import random

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


def validate_match_settings(match_settings: MatchSettings) -> None:
    """Validate match settings before initializing a match."""
    if match_settings.rows < 2 * match_settings.spawn_lane_depth:
        raise ValueError("Board must have room for both spawn lanes.")
    if match_settings.spawn_lane_depth < 1:
        raise ValueError("Spawn lane depth must be at least 1.")
    if match_settings.cols < 1:
        raise ValueError("Board must have at least one column.")
    if not 0.0 <= match_settings.block_probability <= 1.0:
        raise ValueError("Block probability must be between 0 and 1.")
    if match_settings.roster_size < 1:
        raise ValueError("Each side needs at least one agent.")
    if match_settings.first_column < 0:
        raise ValueError("First roster column cannot be negative.")
    if match_settings.first_column + match_settings.roster_size > match_settings.cols:
        raise ValueError("Roster does not fit within the board columns.")
    if match_settings.vision_depth < 2:
        raise ValueError("Vision depth must be at least 2.")


def generate_board(
    match_settings: MatchSettings, rng: random.Random | None = None
) -> list[list[Square]]:
    """Create a board whose interior rows are sprinkled with blocks.

    The ``spawn_lane_depth`` rows at the top and bottom are always empty.
    """
    rng = rng or random.Random()
    lane = match_settings.spawn_lane_depth
    board = [[Square.EMPTY] * match_settings.cols for _ in range(match_settings.rows)]
    for row in range(lane, match_settings.rows - lane):
        for col in range(match_settings.cols):
            if rng.random() < match_settings.block_probability:
                board[row][col] = Square.BLOCK
    return board


def create_rosters(match_settings: MatchSettings) -> tuple[list[Agent], list[Agent]]:
    """Create both rosters at their fixed spawn rows, facing each other."""
    columns = range(
        match_settings.first_column,
        match_settings.first_column + match_settings.roster_size,
    )
    first_row = match_settings.spawn_lane_depth - 1
    second_row = match_settings.rows - match_settings.spawn_lane_depth
    return (
        [Agent(position=(first_row, col), direction=Direction.DOWN) for col in columns],
        [Agent(position=(second_row, col), direction=Direction.UP) for col in columns],
    )


def initialize_match(
    match_settings: MatchSettings, rng: random.Random | None = None
) -> MatchState:
    """
    Validate match settings and return an initialized MatchState.

    Args:
        match_settings: Board dimensions, roster layout and rule switches.
        rng: Random source for the board; a fresh one is used if omitted.

    Returns:
        A MatchState awaiting the first side's moves.

    Raises:
        ValueError: If match settings are invalid.
    """
    validate_match_settings(match_settings)

    rules = MatchRules(
        rows=match_settings.rows,
        cols=match_settings.cols,
        vision_depth=match_settings.vision_depth,
        check_cross_side_collisions=match_settings.check_cross_side_collisions,
    )

    return MatchState(
        phase=MatchPhase.AWAITING_MOVES,
        board=generate_board(match_settings, rng),
        rosters=create_rosters(match_settings),
        current_side=Side.FIRST,
        turn_number=0,
        rules=rules,
    )
