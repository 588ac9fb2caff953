"""
Engine Core - Authoritative room state and the rules that move it.

The core:
1. Models rooms, players, rounds, submissions and votes
2. Runs rounds (hot seat, question, answers, votes, scoring)
3. Drives the phase state machine on actions and deadlines
4. Raises typed errors before any mutation
"""

from .state import (
    Room,
    Player,
    Round,
    Submission,
    Vote,
    Settings,
    Phase,
    RoundStatus,
    Deadline,
    DeadlineKind,
)
from .errors import (
    GameError,
    ValidationError,
    PermissionDeniedError,
    InvalidPhaseError,
    ConflictError,
    NotFoundError,
)
from .round_engine import RoundEngine
from .scheduler import PhaseScheduler

__all__ = [
    "Room",
    "Player",
    "Round",
    "Submission",
    "Vote",
    "Settings",
    "Phase",
    "RoundStatus",
    "Deadline",
    "DeadlineKind",
    "GameError",
    "ValidationError",
    "PermissionDeniedError",
    "InvalidPhaseError",
    "ConflictError",
    "NotFoundError",
    "RoundEngine",
    "PhaseScheduler",
]
