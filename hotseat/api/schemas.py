"""
Pydantic Schemas for API - Wire models for the WebSocket protocol and HTTP routes.

These models define the exact contract between clients and the game core.
Every action gets an ActionResponse; every state change is pushed as a
RoomSnapshot.

Error Codes:
- VALIDATION_ERROR: Empty or malformed input (empty name, empty answer, bad vote)
- PERMISSION_DENIED: Host-only action attempted by another player
- INVALID_PHASE: Action attempted in the wrong phase
- CONFLICT: Name taken, game already started, vote already cast
- NOT_FOUND: Unknown room or player
- INVALID_REQUEST: Frame could not be parsed or has an unknown type
- INTERNAL_ERROR: Unexpected server failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class PhaseName(str, Enum):
    """Room phases as sent to clients."""
    LOBBY = "lobby"
    COLLECTING_ANSWERS = "collectingAnswers"
    VOTING = "voting"
    SHOWING_RESULTS = "showingResults"
    FINAL_SUMMARY = "finalSummary"


class RoundStatusName(str, Enum):
    PENDING = "pending"
    COLLECTING_ANSWERS = "collectingAnswers"
    VOTING = "voting"
    SHOWING_RESULTS = "showingResults"
    COMPLETE = "complete"


class ActionType(str, Enum):
    """Client frame types."""
    CREATE_ROOM = "createRoom"
    JOIN_ROOM = "joinRoom"
    RECONNECT_PLAYER = "reconnectPlayer"
    START_GAME = "startGame"
    SUBMIT_ANSWER = "submitAnswer"
    SUBMIT_VOTE = "submitVote"
    UPDATE_SETTINGS = "updateSettings"
    ADVANCE_ROUND = "advanceRound"
    END_GAME = "endGame"
    VETO_QUESTION = "vetoQuestion"
    REQUEST_ROOM_STATE = "requestRoomState"
    LEAVE_ROOM = "leaveRoom"


class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_PHASE = "INVALID_PHASE"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Snapshot Models
# =============================================================================

class PlayerInfo(BaseModel):
    """A player as seen by every client in the room."""
    player_id: str
    name: str
    score: int = 0
    num_correct_guesses: int = 0
    num_people_tricked: int = 0
    is_host: bool = False
    is_hot_seat: bool = False
    connected: bool = True

    model_config = {"from_attributes": True}


class SubmissionInfo(BaseModel):
    player_id: str
    text: str
    is_real_answer: bool = False

    model_config = {"from_attributes": True}


class VoteInfo(BaseModel):
    voter_id: str
    submission_player_id: str

    model_config = {"from_attributes": True}


class RoundInfo(BaseModel):
    """One round of the history."""
    round_id: str
    hot_seat_player_id: str
    question: str
    submissions: list[SubmissionInfo] = Field(default_factory=list)
    votes: list[VoteInfo] = Field(default_factory=list)
    status: RoundStatusName = RoundStatusName.PENDING

    model_config = {"from_attributes": True}


class SettingsInfo(BaseModel):
    max_rounds: int
    seconds_to_answer: int
    seconds_to_vote: int
    seconds_to_reveal: int

    model_config = {"from_attributes": True}


class TimersInfo(BaseModel):
    """Armed deadlines as absolute epoch milliseconds."""
    answer_deadline: Optional[int] = Field(None, description="Answers close at (ms)")
    vote_deadline: Optional[int] = Field(None, description="Voting closes at (ms)")
    reveal_deadline: Optional[int] = Field(None, description="Reveal ends at (ms)")


class RoomSnapshot(BaseModel):
    """
    Complete room state for display.

    Pushed to every connection bound to the room after each change.
    """
    code: str
    host_id: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    phase: PhaseName
    rounds: list[RoundInfo] = Field(default_factory=list)
    current_round_index: int = -1
    settings: SettingsInfo
    created_at: int = Field(0, description="Epoch milliseconds")
    timers: TimersInfo = Field(default_factory=TimersInfo)
    server_time: int = Field(0, description="Epoch milliseconds when the snapshot was taken")
    api_version: str = "v1"


# =============================================================================
# Request Models (client frame payloads)
# =============================================================================

class ClientFrame(BaseModel):
    """Envelope of every client message."""
    type: str
    request_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


class CreateRoomRequest(BaseModel):
    name: str = Field(..., description="Host display name")


class JoinRoomRequest(BaseModel):
    room_code: str = Field(..., description="4-character room code")
    name: str = Field(..., description="Display name, unique in the room")


class ReconnectRequest(BaseModel):
    player_id: str = Field(..., description="Player id returned by create/join")


class SubmitAnswerRequest(BaseModel):
    text: str = Field(..., description="Real answer (hot seat) or bluff")


class SubmitVoteRequest(BaseModel):
    submission_player_id: str = Field(..., description="Author of the answer voted for")


class UpdateSettingsRequest(BaseModel):
    """
    Partial settings. Values are clamped by the core; anything that
    is not a number leaves that setting unchanged.
    """
    max_rounds: Optional[Any] = None
    seconds_to_answer: Optional[Any] = None
    seconds_to_vote: Optional[Any] = None
    seconds_to_reveal: Optional[Any] = None


class RoomStateRequest(BaseModel):
    room_code: str


# =============================================================================
# Response Models
# =============================================================================

class ActionResponse(BaseModel):
    """Acknowledgement of one client action."""
    ok: bool
    request_id: Optional[str] = None
    room: Optional[RoomSnapshot] = None
    player_id: Optional[str] = Field(
        None, description="The caller's own id after create/join/reconnect"
    )
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    rooms: int = 0
