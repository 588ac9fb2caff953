"""
API Module - Real-time interface for game clients.

Exposes the room registry over a WebSocket protocol:
1. A player creates or joins a room and receives their player id
2. Every action is acknowledged to its sender only
3. Every change is pushed to everyone in the room as a snapshot
4. A dropped socket is handled like leaving; reconnecting by player id
   restores the same player

All state is in-memory. No accounts.
"""

from .schemas import (
    # Requests
    ClientFrame,
    CreateRoomRequest,
    JoinRoomRequest,
    ReconnectRequest,
    SubmitAnswerRequest,
    SubmitVoteRequest,
    UpdateSettingsRequest,
    # Responses
    ActionResponse,
    RoomSnapshot,
    ErrorResponse,
    HealthResponse,
    # Shared
    PlayerInfo,
    RoundInfo,
    SettingsInfo,
    TimersInfo,
    # Enums
    ActionType,
    ErrorCode,
)
from .service import GameService
from .connections import ConnectionHub
from .app import create_app, build_service

__all__ = [
    # Requests
    "ClientFrame",
    "CreateRoomRequest",
    "JoinRoomRequest",
    "ReconnectRequest",
    "SubmitAnswerRequest",
    "SubmitVoteRequest",
    "UpdateSettingsRequest",
    # Responses
    "ActionResponse",
    "RoomSnapshot",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "PlayerInfo",
    "RoundInfo",
    "SettingsInfo",
    "TimersInfo",
    # Enums
    "ActionType",
    "ErrorCode",
    # Service
    "GameService",
    "ConnectionHub",
    "create_app",
    "build_service",
]
