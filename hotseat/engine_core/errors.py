"""
Game Errors - The error taxonomy raised by the core.

All errors are synchronous and non-fatal. They are raised before any
mutation and reported only to the player whose action caused them.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for every error the core raises on a player action."""
    error_code = "GAME_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Malformed or empty input."""
    error_code = "VALIDATION_ERROR"


class PermissionDeniedError(GameError):
    """A non-host attempted a host-only action."""
    error_code = "PERMISSION_DENIED"


class InvalidPhaseError(GameError):
    """Action attempted outside the phase it belongs to."""
    error_code = "INVALID_PHASE"


class ConflictError(GameError):
    """Duplicate name, duplicate vote, or room no longer joinable."""
    error_code = "CONFLICT"


class NotFoundError(GameError):
    """Unknown room, player or connection."""
    error_code = "NOT_FOUND"
