"""Main entry point for turn processing.

This module provides the primary interface for playing a turn:
- process_turn(): Validates and applies a batch of agent moves
- Recomputes what each side can see of the other
- Returns ProcessResult with new state and events
"""

import logging
from collections.abc import Sequence

from app.schemas.game_engine import Agent, MatchState, Side

from .actions import MoveTo, TurnLeft, TurnRight
from .events import MovePlayed
from .validation import AnyMove, ProcessResult, validate_turn
from .visibility import visible_opponents

logger = logging.getLogger(__name__)


def process_turn(
    state: MatchState,
    side: Side,
    moves: Sequence[AnyMove],
) -> ProcessResult:
    """Process a submitted batch and return the result.

    This is the main entry point for every turn. It:
    1. Validates the whole batch against the current state
    2. Applies every move of the batch
    3. Computes the visible opponents for both sides
    4. Assigns sequence numbers to events and passes the turn

    Args:
        state: Current match state.
        side: The side submitting the batch.
        moves: One move per roster slot, in roster order.

    Returns:
        ProcessResult containing:
        - success: Whether the batch was accepted
        - state: The new match state (if accepted)
        - events: One MovePlayed per side, submitter first
        - error_code/error_message: Error details (if rejected)

    Example:
        >>> result = process_turn(state, Side.FIRST, moves)
        >>> if result.success:
        ...     state = result.state
        ...     for event in result.events:
        ...         notify(event.recipient, event.visible_opponents)
        ... else:
        ...     send_invalid_move(side)
    """
    logger.info(
        "Processing turn: side=%s, turn=%d, moves=%d",
        side.name,
        state.turn_number + 1,
        len(moves),
    )

    validation = validate_turn(state, side, moves)
    if not validation.is_valid:
        logger.warning(
            "Turn rejected: code=%s, message=%s, side=%s",
            validation.error_code,
            validation.error_message,
            side.name,
        )
        return ProcessResult.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid move",
        )

    moved_roster = apply_moves(state.roster(side), moves)
    rosters = list(state.rosters)
    rosters[side] = moved_roster
    turn_number = state.turn_number + 1

    events = [
        MovePlayed(
            recipient=recipient,
            turn_number=turn_number,
            visible_opponents=visible_opponents(
                rosters[recipient],
                rosters[recipient.opponent],
                state.rules.vision_depth,
            ),
        )
        for recipient in (side, side.opponent)
    ]

    new_state = state.model_copy(
        update={
            "rosters": (rosters[0], rosters[1]),
            "current_side": side.opponent,
            "turn_number": turn_number,
        }
    )
    result = _assign_event_sequences(ProcessResult.ok(new_state, events))

    logger.info(
        "Turn accepted: side=%s, turn=%d, next=%s",
        side.name,
        turn_number,
        side.opponent.name,
    )
    logger.debug(
        "Visible opponents: %s",
        {event.recipient.name: event.visible_opponents for event in result.events},
    )
    return result


def apply_moves(roster: Sequence[Agent], moves: Sequence[AnyMove]) -> list[Agent]:
    """Apply one move to each agent, returning a new roster.

    Moves are independent of each other: every agent acts from the position
    and facing it had before the batch.
    """
    moved: list[Agent] = []
    for agent, move in zip(roster, moves, strict=True):
        if isinstance(move, TurnLeft):
            moved.append(agent.model_copy(update={"direction": agent.direction.turned_left()}))
        elif isinstance(move, TurnRight):
            moved.append(agent.model_copy(update={"direction": agent.direction.turned_right()}))
        elif isinstance(move, MoveTo):
            moved.append(agent.model_copy(update={"position": move.target}))
        else:
            moved.append(agent.model_copy())
    return moved


def _assign_event_sequences(result: ProcessResult) -> ProcessResult:
    """Assign monotonically increasing sequence numbers to events.

    Updates each event's seq field and increments the state's event_seq counter.
    """
    if result.state is None or not result.events:
        return result

    current_seq = result.state.event_seq
    for event in result.events:
        event.seq = current_seq
        current_seq += 1

    new_state = result.state.model_copy(update={"event_seq": current_seq})

    return ProcessResult.ok(new_state, result.events)
