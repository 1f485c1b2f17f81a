"""Validation layer for submitted batches and ProcessResult pattern.

Separates validation from processing logic:
- validate_turn() checks a whole batch against the current state
- ProcessResult replaces exceptions for control flow
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.schemas.game_engine import MatchPhase, MatchState, Position, Side, Square

from .actions import MoveTo, Nothing, TurnLeft, TurnRight
from .events import MovePlayed
from .visibility import agent_sees

logger = logging.getLogger(__name__)

AnyMove = Nothing | TurnLeft | TurnRight | MoveTo


@dataclass
class ProcessResult:
    """Result of processing a submitted batch.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for logging.
    """

    state: MatchState | None = None
    events: list[MovePlayed] = field(default_factory=list)
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: MatchState,
        events: list[MovePlayed] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with new state and events."""
        return cls(
            state=state,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating a batch before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def occupied_by_opponent(state: MatchState, side: Side, target: Position) -> bool:
    """Cross-side collision predicate.

    Agents may share a cell with an opposing agent unless the match rules
    enable this check.
    """
    if not state.rules.check_cross_side_collisions:
        return False
    return any(agent.position == target for agent in state.roster(side.opponent))


def _occupied_by_staying_agent(
    state: MatchState, side: Side, moves: Sequence[AnyMove], target: Position
) -> bool:
    """True if an own agent that keeps its cell this turn stands on ``target``."""
    for agent, move in zip(state.roster(side), moves):
        if agent.position == target and not isinstance(move, MoveTo):
            return True
    return False


def validate_turn(
    state: MatchState,
    side: Side,
    moves: Sequence[AnyMove],
) -> ValidationResult:
    """Validate a batch before processing.

    Checks:
    - The match is still running and it is this side's turn
    - There is exactly one move per roster slot
    - Every MoveTo target is on the board, inside the agent's cone (as it
      stands before any move of the batch), on an Empty square, not claimed
      twice, and not left occupied by another agent of the same side

    The same-side occupancy check always applies. It is stricter than the
    opponent occupancy check, which only runs when
    ``rules.check_cross_side_collisions`` is on.

    Args:
        state: Current match state.
        side: The side submitting the batch.
        moves: One move per roster slot, in roster order.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    logger.debug(
        "Validating batch: side=%s, turn=%d, moves=%d",
        side.name,
        state.turn_number,
        len(moves),
    )

    if state.phase == MatchPhase.TERMINATED:
        logger.warning("Validation failed: MATCH_TERMINATED")
        return ValidationResult.error("MATCH_TERMINATED", "Match has already ended")

    if state.current_side != side:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
            state.current_side.name,
            side.name,
        )
        return ValidationResult.error("NOT_YOUR_TURN", "It is not your turn")

    roster = state.roster(side)
    if len(moves) != len(roster):
        logger.warning(
            "Validation failed: WRONG_BATCH_LENGTH, expected=%d, got=%d",
            len(roster),
            len(moves),
        )
        return ValidationResult.error(
            "WRONG_BATCH_LENGTH",
            f"Expected {len(roster)} moves, got {len(moves)}",
        )

    claimed: set[Position] = set()
    for slot, (agent, move) in enumerate(zip(roster, moves)):
        if not isinstance(move, MoveTo):
            continue

        target = move.target
        if not state.rules.in_bounds(target):
            return _target_error(slot, "TARGET_OUT_OF_BOUNDS", target, "is outside the board")

        if not agent_sees(agent, target, state.rules.vision_depth):
            return _target_error(slot, "TARGET_NOT_VISIBLE", target, "is outside the agent's view")

        if state.square_at(target) != Square.EMPTY:
            return _target_error(slot, "TARGET_BLOCKED", target, "is not an empty square")

        if target in claimed:
            return _target_error(slot, "DUPLICATE_TARGET", target, "is claimed by another agent")

        if _occupied_by_staying_agent(state, side, moves, target):
            return _target_error(slot, "TARGET_OCCUPIED", target, "is held by a friendly agent")

        if occupied_by_opponent(state, side, target):
            return _target_error(
                slot, "TARGET_OCCUPIED_BY_OPPONENT", target, "is held by an opposing agent"
            )

        claimed.add(target)

    logger.debug("Batch validated successfully")
    return ValidationResult.ok()


def _target_error(slot: int, code: str, target: Position, reason: str) -> ValidationResult:
    logger.warning("Validation failed: %s, slot=%d, target=%s", code, slot, target)
    return ValidationResult.error(code, f"Agent {slot}: target {target} {reason}")
