"""
Session Module - Manages ephemeral game rooms.

A room represents one group of players:
- Created when a host opens it
- Holds every round played and every player's score
- Advanced by player actions and by the tick driver
- Disposed of when its lobby empties

Rooms are EPHEMERAL:
- No persistence to database
- Lost when the process exits
"""

from .registry import RoomRegistry, ROOM_CODE_CHARS, ROOM_CODE_LENGTH
from .presence import Presence, DepartureOutcome
from .driver import TickDriver, ManualClock

__all__ = [
    "RoomRegistry",
    "ROOM_CODE_CHARS",
    "ROOM_CODE_LENGTH",
    "Presence",
    "DepartureOutcome",
    "TickDriver",
    "ManualClock",
]
