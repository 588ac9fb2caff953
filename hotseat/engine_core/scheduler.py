"""
Phase Scheduler - The room state machine.

    lobby -> collectingAnswers -> voting -> showingResults
                 ^                                 |
                 +---------------------------------+--> finalSummary

Every phase exits on whichever comes first: all required actions
recorded, or its deadline passing. Both paths go through evaluate(),
and each transition re-checks the current phase before acting, so a
deadline that fires after the players already finished is a no-op.

Deadlines are absolute timestamps stored on the Room. Nothing here
sleeps or owns a timer; a driver calls evaluate() periodically with
whatever clock it was given, which keeps the machine testable with a
manual clock.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import time

from .state import (
    Room, Player, Phase, RoundStatus, Deadline, DeadlineKind,
    ACTIVE_PHASES, SETUP_PHASES,
)
from .errors import (
    ValidationError, PermissionDeniedError, InvalidPhaseError, ConflictError,
)
from .round_engine import RoundEngine
from ..config import GameConfig


logger = logging.getLogger(__name__)


@dataclass
class PhaseScheduler:
    """
    Owns phase transitions and deadlines for every room.

    Usage:
        scheduler = PhaseScheduler(engine=RoundEngine(), clock=time.time)
        scheduler.start_game(room, host)
        scheduler.submit_answer(room, player, "pizza")
        scheduler.evaluate(room)   # from the tick driver
    """
    engine: RoundEngine = field(default_factory=RoundEngine)
    config: GameConfig = field(default_factory=GameConfig)
    clock: Callable[[], float] = time.time

    @property
    def min_players(self) -> int:
        return self.config.min_players

    # =========================================================================
    # Player/host actions
    # =========================================================================

    def start_game(self, room: Room, player: Player):
        """Start (or restart after finalSummary) a game."""
        self._require_host(player, "Only the host can start")
        if room.phase not in SETUP_PHASES:
            raise InvalidPhaseError("Game already started")
        # Lobby players are always connected; after a game some may not be
        if len(room.connected_players) < self.min_players:
            raise ValidationError(f"Need at least {self.min_players} players")

        if room.phase == Phase.FINAL_SUMMARY:
            for p in room.players:
                p.reset_scores()

        room.rounds = []
        room.current_round_index = -1
        room.question_deck = self.engine.questions.new_deck()
        logger.info("Room %s: game started with %d players", room.code, len(room.players))
        self.next_round(room)

    def submit_answer(self, room: Room, player: Player, text: str):
        if room.phase != Phase.COLLECTING_ANSWERS or room.current_round is None:
            raise InvalidPhaseError("Not accepting answers right now")
        self.engine.record_submission(room.current_round, player, text)
        self.evaluate(room)

    def submit_vote(self, room: Room, player: Player, submission_player_id: str):
        if room.phase != Phase.VOTING or room.current_round is None:
            raise InvalidPhaseError("Not accepting votes right now")
        self.engine.record_vote(room.current_round, player, submission_player_id)
        self.evaluate(room)

    def update_settings(self, room: Room, player: Player, partial: dict[str, Any]):
        self._require_host(player, "Only host can update settings")
        if room.phase not in SETUP_PHASES:
            raise InvalidPhaseError("Settings can only be updated before a game starts")
        room.settings = room.settings.updated(partial, self.config.settings_limits)

    def advance_round(self, room: Room, player: Player):
        """Host skips the rest of the reveal."""
        self._require_host(player, "Only the host can advance")
        if room.phase != Phase.SHOWING_RESULTS:
            raise InvalidPhaseError("Not ready to advance")
        self.finish_results(room)

    def end_game(self, room: Room, player: Player):
        """Host ends a game in progress early."""
        self._require_host(player, "Only the host can end the game")
        if room.phase not in ACTIVE_PHASES:
            raise InvalidPhaseError("No game in progress")
        self.enter_final_summary(room, reason="ended by host")

    def veto_question(self, room: Room, player: Player):
        """Host swaps the current question before anyone has answered."""
        self._require_host(player, "Only the host can veto a question")
        round_ = room.current_round
        if room.phase != Phase.COLLECTING_ANSWERS or round_ is None:
            raise InvalidPhaseError("Questions can only be vetoed while collecting answers")
        if round_.submissions:
            raise ConflictError("Answers have already been submitted")

        self.engine.redraw_question(room, round_)
        self._arm(room, DeadlineKind.ANSWER, room.settings.seconds_to_answer)

    # =========================================================================
    # Decision path (actions, ticks and presence all land here)
    # =========================================================================

    def evaluate(self, room: Room, force_complete: bool = False) -> bool:
        """
        Advance the room by at most one transition if it is due.

        Args:
            room: Room to evaluate
            force_complete: Treat the current phase's quorum as met
                (used when the hot seat leaves)

        Returns:
            True if the room changed phase
        """
        if room.phase in ACTIVE_PHASES and len(room.connected_players) < self.min_players:
            self.enter_final_summary(room, reason="not enough players")
            return True

        now = self.clock()
        if room.phase == Phase.COLLECTING_ANSWERS:
            if force_complete or self.answers_complete(room) or self._due(room, DeadlineKind.ANSWER, now):
                return self.start_voting(room)
        elif room.phase == Phase.VOTING:
            if force_complete or self.votes_complete(room) or self._due(room, DeadlineKind.VOTE, now):
                return self.reveal_results(room)
        elif room.phase == Phase.SHOWING_RESULTS:
            if self._due(room, DeadlineKind.REVEAL, now):
                self.finish_results(room)
                return True
        return False

    def answers_complete(self, room: Room) -> bool:
        """Every connected player answered and the real answer is in."""
        round_ = room.current_round
        if round_ is None:
            return False
        answered = {s.player_id for s in round_.submissions}
        return (
            round_.real_submission is not None
            and all(p.player_id in answered for p in room.connected_players)
        )

    def votes_complete(self, room: Room) -> bool:
        """Every connected player except the hot seat has voted."""
        round_ = room.current_round
        if round_ is None:
            return False
        voters = {v.voter_id for v in round_.votes}
        return all(
            p.player_id in voters
            for p in room.connected_players
            if p.player_id != round_.hot_seat_player_id
        )

    # =========================================================================
    # Transitions (each guarded by the phase it leaves)
    # =========================================================================

    def next_round(self, room: Room):
        """Start the next round, or finish the game if it is over."""
        self._disarm(room)
        if len(room.connected_players) < self.min_players:
            self.enter_final_summary(room, reason="not enough players")
            return
        if len(room.rounds) >= room.settings.max_rounds:
            self.enter_final_summary(room, reason="all rounds played")
            return

        round_ = self.engine.start_round(room)
        room.rounds.append(round_)
        room.current_round_index = len(room.rounds) - 1
        room.phase = Phase.COLLECTING_ANSWERS
        round_.status = RoundStatus.COLLECTING_ANSWERS
        self._arm(room, DeadlineKind.ANSWER, room.settings.seconds_to_answer)
        logger.info(
            "Room %s: round %d started, hot seat %s",
            room.code, len(room.rounds), round_.hot_seat_player_id,
        )

    def start_voting(self, room: Room) -> bool:
        round_ = room.current_round
        if room.phase != Phase.COLLECTING_ANSWERS or round_ is None:
            return False

        self._disarm(room)
        self.engine.fill_missing_submissions(room, round_)
        self.engine.shuffle_submissions(round_)
        room.phase = Phase.VOTING
        round_.status = RoundStatus.VOTING
        self._arm(room, DeadlineKind.VOTE, room.settings.seconds_to_vote)
        logger.debug("Room %s: voting on %d answers", room.code, len(round_.submissions))
        return True

    def reveal_results(self, room: Room) -> bool:
        round_ = room.current_round
        if room.phase != Phase.VOTING or round_ is None:
            return False

        self._disarm(room)
        self.engine.score_round(room, round_)
        room.phase = Phase.SHOWING_RESULTS
        round_.status = RoundStatus.SHOWING_RESULTS
        self._arm(room, DeadlineKind.REVEAL, room.settings.seconds_to_reveal)
        logger.debug("Room %s: revealing %d votes", room.code, len(round_.votes))
        return True

    def finish_results(self, room: Room):
        if room.phase != Phase.SHOWING_RESULTS:
            return
        round_ = room.current_round
        if round_ is not None:
            round_.status = RoundStatus.COMPLETE
        self.next_round(room)

    def enter_final_summary(self, room: Room, reason: str):
        """
        Terminal transition; always disarms the deadline first.

        The current round is closed whichever phase the game ends from,
        so the summary never shows a round still collecting or voting.
        """
        self._disarm(room)
        if room.phase in ACTIVE_PHASES and room.current_round is not None:
            room.current_round.status = RoundStatus.COMPLETE
        room.phase = Phase.FINAL_SUMMARY
        logger.info("Room %s: final summary (%s)", room.code, reason)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _arm(self, room: Room, kind: DeadlineKind, seconds: float):
        self._disarm(room)
        room.deadline = Deadline(kind=kind, at=self.clock() + seconds)

    def _disarm(self, room: Room):
        room.deadline = None

    def _due(self, room: Room, kind: DeadlineKind, now: float) -> bool:
        return (
            room.deadline is not None
            and room.deadline.kind == kind
            and room.deadline.elapsed(now)
        )

    def _require_host(self, player: Player, message: str):
        if not player.is_host:
            raise PermissionDeniedError(message)
