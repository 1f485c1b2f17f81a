"""Turn engine module - pure functional match logic.

This module provides the core turn engine with:
- Move types for one batch of per-agent moves
- Visibility cone geometry
- Event types for the match session
- ProcessResult pattern for error handling

Usage:
    from app.services.game.engine import (
        process_turn,
        decode_submission,
        InvalidSubmission,
    )

    try:
        moves = decode_submission(raw_text)
    except InvalidSubmission:
        ...  # re-prompt the same side

    result = process_turn(state, side, moves)

    if result.success:
        new_state = result.state
        events = result.events  # One MovePlayed per side
    else:
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Moves - one per roster slot
from .actions import (
    AgentMove,
    InvalidSubmission,
    MoveTo,
    Nothing,
    Submission,
    TurnLeft,
    TurnRight,
    build_move_from_wire,
    decode_submission,
)

# Events - delivered to each side after a turn
from .events import GameEvent, MovePlayed

# Main processing
from .process import apply_moves, process_turn

# Result types
from .validation import (
    AnyMove,
    ProcessResult,
    ValidationResult,
    occupied_by_opponent,
    validate_turn,
)

# Geometry
from .visibility import DEFAULT_VISION_DEPTH, agent_sees, is_visible, visible_opponents

__all__ = [
    # Moves
    "AgentMove",
    "AnyMove",
    "Nothing",
    "TurnLeft",
    "TurnRight",
    "MoveTo",
    "Submission",
    "InvalidSubmission",
    "build_move_from_wire",
    "decode_submission",
    # Events
    "GameEvent",
    "MovePlayed",
    # Processing
    "process_turn",
    "apply_moves",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_turn",
    "occupied_by_opponent",
    # Geometry
    "DEFAULT_VISION_DEPTH",
    "is_visible",
    "agent_sees",
    "visible_opponents",
]
