"""
Room Registry - Creates, routes to and disposes of rooms.

LIFECYCLE:
1. A player creates a room -> 4-character code, lobby phase, host player
2. Others join by code while the room is in the lobby
3. Actions arrive tagged with a connection id; the registry resolves
   the (room, player) pair and hands the action to the scheduler
4. A room whose lobby empties is disposed of immediately
5. Rooms that have started a game live until the process exits

The registry is constructed explicitly and passed to the transport
layer. Rooms are in-memory only.

Every successful mutation calls on_change(room) exactly once; that
callback is how snapshots reach connected players.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator
import logging
import random
import threading
import uuid

from ..config import GameConfig
from ..engine_core.state import Room, Player, Phase, Settings
from ..engine_core.errors import ValidationError, ConflictError, NotFoundError
from ..engine_core.scheduler import PhaseScheduler
from .presence import Presence, DepartureOutcome


logger = logging.getLogger(__name__)


ROOM_CODE_LENGTH = 4
ROOM_CODE_CHARS = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"


RoomListener = Callable[[Room], None]


@dataclass
class RoomRegistry:
    """
    Owns every room in the process.

    Usage:
        registry = RoomRegistry(scheduler=PhaseScheduler())
        registry.add_listener(broadcast)

        room = registry.create_room("Ann", connection_id="c1")
        registry.join_room(room.code, "Bob", connection_id="c2")
        registry.start_game("c1")
    """
    scheduler: PhaseScheduler = field(default_factory=PhaseScheduler)
    rng: random.Random = field(default_factory=random.Random)

    _rooms: dict[str, Room] = field(default_factory=dict)
    _lock: Any = field(default_factory=threading.RLock)
    _listeners: list[RoomListener] = field(default_factory=list)

    def __post_init__(self):
        self.presence = Presence(scheduler=self.scheduler)

    @property
    def config(self) -> GameConfig:
        return self.scheduler.config

    def add_listener(self, listener: RoomListener):
        """Register a callback invoked with each room after it changes."""
        self._listeners.append(listener)

    # =========================================================================
    # Room lifecycle
    # =========================================================================

    def create_room(self, host_name: str, connection_id: str) -> Room:
        """Create a lobby with a single host player."""
        name = self._clean_name(host_name)
        self._require_unbound(connection_id)
        host = self._build_player(name, connection_id, is_host=True)

        with self._lock:
            code = self._generate_code()
            room = Room(
                code=code,
                created_at=self.scheduler.clock(),
                players=[host],
                settings=Settings.from_defaults(self.config.default_settings),
                question_deck=self.scheduler.engine.questions.new_deck(),
            )
            self._rooms[code] = room

        logger.info("Room %s created by %s", code, name)
        self._notify(room)
        return room

    def join_room(self, code: str, name: str, connection_id: str) -> Room:
        """Add a non-host player to a lobby."""
        room = self.get_room(code)
        cleaned = self._clean_name(name)
        self._require_unbound(connection_id)

        with room.lock:
            if room.phase != Phase.LOBBY:
                raise ConflictError("Game already started")
            if room.name_taken(cleaned):
                raise ConflictError("Name already taken")
            room.players.append(self._build_player(cleaned, connection_id, is_host=False))

        logger.info("Room %s: %s joined", room.code, cleaned)
        self._notify(room)
        return room

    def leave_room(self, connection_id: str):
        """Handle an explicit leave or a dropped connection. No-op if unbound."""
        found = self.find_by_connection(connection_id)
        if found is None:
            return
        room, player = found

        with room.lock:
            outcome = self.presence.disconnect(room, player)

        if outcome == DepartureOutcome.ROOM_EMPTY:
            self.dispose_room(room.code)
            return
        self._notify(room)

    def reconnect(self, player_id: str, connection_id: str) -> Room:
        """Rebind a known player to a new connection, in any phase."""
        for room in self.rooms():
            player = room.get_player(player_id)
            if player is None:
                continue
            self._require_unbound(connection_id, allowed=player)
            with room.lock:
                self.presence.reconnect(room, player, connection_id)
            self._notify(room)
            return room
        raise NotFoundError("Player not found")

    def get_room(self, code: str) -> Room:
        """Look up a room by code (case-insensitive)."""
        room = self._rooms.get((code or "").strip().upper())
        if room is None:
            raise NotFoundError("Room not found")
        return room

    def dispose_room(self, code: str):
        """Remove a room, disarming its deadline."""
        with self._lock:
            room = self._rooms.pop(code, None)
        if room is not None:
            room.deadline = None
            logger.info("Room %s disposed", code)

    def rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def list_rooms(self) -> list[str]:
        """Codes of all live rooms."""
        with self._lock:
            return list(self._rooms.keys())

    # =========================================================================
    # Routed actions
    # =========================================================================

    def start_game(self, connection_id: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.start_game(room, player)

    def submit_answer(self, connection_id: str, text: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.submit_answer(room, player, text)

    def submit_vote(self, connection_id: str, submission_player_id: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.submit_vote(room, player, submission_player_id)

    def update_settings(self, connection_id: str, partial: dict[str, Any]):
        with self._acting(connection_id) as (room, player):
            self.scheduler.update_settings(room, player, partial)

    def advance_round(self, connection_id: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.advance_round(room, player)

    def end_game(self, connection_id: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.end_game(room, player)

    def veto_question(self, connection_id: str):
        with self._acting(connection_id) as (room, player):
            self.scheduler.veto_question(room, player)

    def tick(self) -> list[Room]:
        """
        Re-evaluate every room against the clock.

        Returns:
            Rooms that changed phase (already broadcast)
        """
        changed = []
        for room in self.rooms():
            with room.lock:
                advanced = self.scheduler.evaluate(room)
            if advanced:
                changed.append(room)
                self._notify(room)
        return changed

    # =========================================================================
    # Helpers
    # =========================================================================

    def find_by_connection(self, connection_id: str) -> tuple[Room, Player] | None:
        for room in self.rooms():
            player = room.player_for_connection(connection_id)
            if player is not None:
                return room, player
        return None

    @contextmanager
    def _acting(self, connection_id: str) -> Iterator[tuple[Room, Player]]:
        """
        Resolve the acting player, hold the room lock for the action,
        and broadcast once if the action completed without error.
        """
        found = self.find_by_connection(connection_id)
        if found is None:
            raise NotFoundError("Player not found")
        room, player = found
        with room.lock:
            yield room, player
        self._notify(room)

    def _notify(self, room: Room):
        for listener in list(self._listeners):
            try:
                listener(room)
            except Exception:
                logger.exception("Room %s: listener failed", room.code)

    def _require_unbound(self, connection_id: str, allowed: Player | None = None):
        """A connection may be bound to at most one player across all rooms."""
        found = self.find_by_connection(connection_id)
        if found is not None and found[1] is not allowed:
            raise ConflictError("Connection already in a room")

    def _clean_name(self, name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name cannot be empty")
        return cleaned[: self.config.name_max_length].rstrip()

    def _build_player(self, name: str, connection_id: str, is_host: bool) -> Player:
        return Player(
            player_id=str(uuid.uuid4()),
            name=name,
            connection_id=connection_id,
            is_host=is_host,
        )

    def _generate_code(self) -> str:
        """Rejection-sample codes until one is unused. Caller holds _lock."""
        while True:
            code = "".join(
                self.rng.choice(ROOM_CODE_CHARS) for _ in range(ROOM_CODE_LENGTH)
            )
            if code not in self._rooms:
                return code
