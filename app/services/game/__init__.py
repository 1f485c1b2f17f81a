"""Game service module.

Provides:
- Match initialization (start_game.py)
- Match session loop (session.py)
- Turn engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    AgentMove,
    InvalidSubmission,
    MoveTo,
    Nothing,
    ProcessResult,
    TurnLeft,
    TurnRight,
    decode_submission,
    is_visible,
    process_turn,
)
from .session import MatchSession
from .start_game import create_rosters, generate_board, initialize_match, validate_match_settings

__all__ = [
    # Initialization
    "initialize_match",
    "validate_match_settings",
    "generate_board",
    "create_rosters",
    # Session
    "MatchSession",
    # Engine
    "AgentMove",
    "Nothing",
    "TurnLeft",
    "TurnRight",
    "MoveTo",
    "ProcessResult",
    "InvalidSubmission",
    "decode_submission",
    "is_visible",
    "process_turn",
]
