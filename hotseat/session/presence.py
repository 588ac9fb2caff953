"""
Presence - Connection binding, host handover and quorum loss.

A player's identity (player_id) outlives their connection. Before a
game starts there is nothing worth keeping, so leaving the lobby
removes the player outright; once a game has started the player is
only marked disconnected and keeps their score for the summary.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging

from ..engine_core.state import Room, Player, Phase
from ..engine_core.scheduler import PhaseScheduler


logger = logging.getLogger(__name__)


class DepartureOutcome(Enum):
    """What a departure did to its room."""
    REMOVED = "removed"  # Lobby: player deleted
    DISCONNECTED = "disconnected"  # In game: identity kept
    ROOM_EMPTY = "room_empty"  # Lobby emptied; caller disposes the room


@dataclass
class Presence:
    """Applies connect/disconnect events to a room."""
    scheduler: PhaseScheduler

    def disconnect(self, room: Room, player: Player) -> DepartureOutcome:
        """
        Handle a player leaving or dropping.

        Returns:
            ROOM_EMPTY when the lobby has no players left; the caller
            must dispose of the room.
        """
        if room.phase == Phase.LOBBY:
            return self._leave_lobby(room, player)

        was_hot_seat = player.is_hot_seat
        player.connection_id = None
        if player.is_host:
            self.reassign_host(room, departing=player)

        logger.info("Room %s: %s disconnected", room.code, player.name)

        # Quorum loss, hot-seat loss, or the departure completing a phase
        self.scheduler.evaluate(room, force_complete=was_hot_seat)

        # The round keeps hot_seat_player_id; only the live flag is dropped
        if was_hot_seat:
            player.is_hot_seat = False
        return DepartureOutcome.DISCONNECTED

    def reconnect(self, room: Room, player: Player, connection_id: str):
        """
        Rebind a known player to a new connection.

        Never changes phase and never restores a host flag that was
        handed over while the player was away. If the host is itself
        disconnected, the returning player takes the flag.
        """
        player.connection_id = connection_id
        logger.info("Room %s: %s reconnected", room.code, player.name)

        host = room.host
        if host is not None and host is not player and not host.connected:
            host.is_host = False
            player.is_host = True
            logger.info("Room %s: host is now %s", room.code, player.name)

    def reassign_host(self, room: Room, departing: Player):
        """
        Hand host status to the first connected player.

        With nobody connected the flag stays where it is, so the room
        always has exactly one host.
        """
        replacement = next(
            (p for p in room.players if p.connected and p is not departing),
            None,
        )
        if replacement is None:
            return
        departing.is_host = False
        replacement.is_host = True
        logger.info("Room %s: host is now %s", room.code, replacement.name)

    def _leave_lobby(self, room: Room, player: Player) -> DepartureOutcome:
        room.players = [p for p in room.players if p.player_id != player.player_id]
        logger.info("Room %s: %s left the lobby", room.code, player.name)
        if not room.players:
            room.deadline = None
            return DepartureOutcome.ROOM_EMPTY
        if player.is_host:
            room.players[0].is_host = True
        return DepartureOutcome.REMOVED
