"""Lobby service module.

Provides:
- Code reservation for a waiting player (create)
- Pairing of a second player by code (join)
- Expiry of unmatched codes
"""

from .service import JoinResult, Lobby, PendingEntry, get_lobby, reset_lobby

__all__ = [
    "JoinResult",
    "Lobby",
    "PendingEntry",
    "get_lobby",
    "reset_lobby",
]
