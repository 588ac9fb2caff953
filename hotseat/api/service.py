"""
API Service - Business logic layer between the transport and the game core.

The service:
1. Parses client frames into typed requests
2. Routes them to the room registry under the caller's connection id
3. Converts core errors into ActionResponse failures for the caller only
4. Builds room snapshots and pushes them to every bound connection

This layer is framework-agnostic (the FastAPI app only moves frames).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging

from pydantic import ValidationError as PydanticValidationError

from .schemas import (
    # Requests
    ClientFrame,
    CreateRoomRequest,
    JoinRoomRequest,
    ReconnectRequest,
    SubmitAnswerRequest,
    SubmitVoteRequest,
    UpdateSettingsRequest,
    RoomStateRequest,
    # Responses
    ActionResponse,
    RoomSnapshot,
    # Shared
    PlayerInfo,
    RoundInfo,
    SubmissionInfo,
    VoteInfo,
    SettingsInfo,
    TimersInfo,
    # Enums
    ActionType,
    ErrorCode,
)
from ..engine_core.state import Room, DeadlineKind
from ..engine_core.errors import GameError
from ..session import RoomRegistry


logger = logging.getLogger(__name__)


# Sends one message to a set of connection ids
Publisher = Callable[[list[str], dict[str, Any]], None]


def _ms(seconds: float | None) -> int | None:
    return None if seconds is None else int(seconds * 1000)


def _error_code(error: GameError) -> ErrorCode:
    try:
        return ErrorCode(error.error_code)
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


@dataclass
class GameService:
    """
    Main service for the game transport.

    Usage:
        service = GameService(registry=RoomRegistry())
        service.set_publisher(hub.publish)

        response = service.handle("conn-1", {"type": "createRoom", "payload": {"name": "Ann"}})
        service.disconnect("conn-1")
    """
    registry: RoomRegistry = field(default_factory=RoomRegistry)
    _publisher: Publisher | None = None

    def __post_init__(self):
        self.registry.add_listener(self._broadcast)
        self._handlers: dict[ActionType, Callable[[str, dict[str, Any]], ActionResponse]] = {
            ActionType.CREATE_ROOM: self.create_room,
            ActionType.JOIN_ROOM: self.join_room,
            ActionType.RECONNECT_PLAYER: self.reconnect_player,
            ActionType.START_GAME: self.start_game,
            ActionType.SUBMIT_ANSWER: self.submit_answer,
            ActionType.SUBMIT_VOTE: self.submit_vote,
            ActionType.UPDATE_SETTINGS: self.update_settings,
            ActionType.ADVANCE_ROUND: self.advance_round,
            ActionType.END_GAME: self.end_game,
            ActionType.VETO_QUESTION: self.veto_question,
            ActionType.REQUEST_ROOM_STATE: self.request_room_state,
            ActionType.LEAVE_ROOM: self.leave_room,
        }

    def set_publisher(self, publisher: Publisher | None):
        self._publisher = publisher

    # =========================================================================
    # Dispatch
    # =========================================================================

    def handle(self, connection_id: str, message: Any) -> ActionResponse:
        """
        Handle one client frame.

        Never raises: every failure becomes an ActionResponse with ok=False.
        """
        try:
            frame = ClientFrame.model_validate(message)
        except PydanticValidationError:
            return self._failure(ErrorCode.INVALID_REQUEST, "Malformed message")

        try:
            action = ActionType(frame.type)
        except ValueError:
            return self._failure(
                ErrorCode.INVALID_REQUEST,
                f"Unknown action: {frame.type}",
                frame.request_id,
            )

        handler = self._handlers[action]
        try:
            response = handler(connection_id, frame.payload)
        except PydanticValidationError as e:
            return self._failure(
                ErrorCode.INVALID_REQUEST,
                f"Invalid payload for {action.value}: {e.error_count()} error(s)",
                frame.request_id,
            )
        except GameError as e:
            return self._failure(_error_code(e), e.message, frame.request_id)
        except Exception:
            logger.exception("Unhandled error in %s", action.value)
            return self._failure(ErrorCode.INTERNAL_ERROR, "Internal error", frame.request_id)

        response.request_id = frame.request_id
        return response

    def disconnect(self, connection_id: str):
        """Transport lost the connection; same as leaving."""
        self.registry.leave_room(connection_id)

    # =========================================================================
    # Actions
    # =========================================================================

    def create_room(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = CreateRoomRequest.model_validate(payload)
        room = self.registry.create_room(request.name, connection_id)
        return self._with_room(room, connection_id)

    def join_room(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = JoinRoomRequest.model_validate(payload)
        room = self.registry.join_room(request.room_code, request.name, connection_id)
        return self._with_room(room, connection_id)

    def reconnect_player(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = ReconnectRequest.model_validate(payload)
        room = self.registry.reconnect(request.player_id, connection_id)
        return self._with_room(room, connection_id)

    def start_game(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        self.registry.start_game(connection_id)
        return ActionResponse(ok=True)

    def submit_answer(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = SubmitAnswerRequest.model_validate(payload)
        self.registry.submit_answer(connection_id, request.text)
        return ActionResponse(ok=True)

    def submit_vote(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = SubmitVoteRequest.model_validate(payload)
        self.registry.submit_vote(connection_id, request.submission_player_id)
        return ActionResponse(ok=True)

    def update_settings(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = UpdateSettingsRequest.model_validate(payload)
        self.registry.update_settings(connection_id, request.model_dump(exclude_none=True))
        return ActionResponse(ok=True)

    def advance_round(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        self.registry.advance_round(connection_id)
        return ActionResponse(ok=True)

    def end_game(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        self.registry.end_game(connection_id)
        return ActionResponse(ok=True)

    def veto_question(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        self.registry.veto_question(connection_id)
        return ActionResponse(ok=True)

    def request_room_state(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        request = RoomStateRequest.model_validate(payload)
        return ActionResponse(ok=True, room=self.get_room_snapshot(request.room_code))

    def leave_room(self, connection_id: str, payload: dict[str, Any]) -> ActionResponse:
        self.registry.leave_room(connection_id)
        return ActionResponse(ok=True)

    def get_room_snapshot(self, code: str) -> RoomSnapshot:
        """Best-effort lookup for late joiners. Raises NotFoundError."""
        return self.build_snapshot(self.registry.get_room(code))

    # =========================================================================
    # Snapshots
    # =========================================================================

    def build_snapshot(self, room: Room) -> RoomSnapshot:
        """Convert a Room into its wire snapshot."""
        host = room.host
        return RoomSnapshot(
            code=room.code,
            host_id=host.player_id if host else None,
            players=[
                PlayerInfo(
                    player_id=p.player_id,
                    name=p.name,
                    score=p.score,
                    num_correct_guesses=p.num_correct_guesses,
                    num_people_tricked=p.num_people_tricked,
                    is_host=p.is_host,
                    is_hot_seat=p.is_hot_seat,
                    connected=p.connected,
                )
                for p in room.players
            ],
            phase=room.phase.value,
            rounds=[
                RoundInfo(
                    round_id=r.round_id,
                    hot_seat_player_id=r.hot_seat_player_id,
                    question=r.question,
                    submissions=[
                        SubmissionInfo(
                            player_id=s.player_id,
                            text=s.text,
                            is_real_answer=s.is_real_answer,
                        )
                        for s in r.submissions
                    ],
                    votes=[
                        VoteInfo(
                            voter_id=v.voter_id,
                            submission_player_id=v.submission_player_id,
                        )
                        for v in r.votes
                    ],
                    status=r.status.value,
                )
                for r in room.rounds
            ],
            current_round_index=room.current_round_index,
            settings=SettingsInfo(
                max_rounds=room.settings.max_rounds,
                seconds_to_answer=room.settings.seconds_to_answer,
                seconds_to_vote=room.settings.seconds_to_vote,
                seconds_to_reveal=room.settings.seconds_to_reveal,
            ),
            created_at=_ms(room.created_at),
            timers=TimersInfo(
                answer_deadline=_ms(room.deadline_of(DeadlineKind.ANSWER)),
                vote_deadline=_ms(room.deadline_of(DeadlineKind.VOTE)),
                reveal_deadline=_ms(room.deadline_of(DeadlineKind.REVEAL)),
            ),
            server_time=_ms(self.registry.scheduler.clock()),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _broadcast(self, room: Room):
        if self._publisher is None:
            return
        recipients = [p.connection_id for p in room.players if p.connection_id]
        if not recipients:
            return
        message = {
            "type": "room_updated",
            "payload": self.build_snapshot(room).model_dump(mode="json"),
        }
        self._publisher(recipients, message)

    def _with_room(self, room: Room, connection_id: str) -> ActionResponse:
        player = room.player_for_connection(connection_id)
        return ActionResponse(
            ok=True,
            room=self.build_snapshot(room),
            player_id=player.player_id if player else None,
        )

    def _failure(
        self,
        code: ErrorCode,
        message: str,
        request_id: str | None = None,
    ) -> ActionResponse:
        return ActionResponse(
            ok=False,
            request_id=request_id,
            error=message,
            error_code=code,
        )
