"""
Room State - The authoritative in-memory model of one game room.

Design principles:
- Mutable, owned by exactly one Room; all mutation goes through the
  round engine, the phase scheduler, or presence handling
- Durable identity (player_id) is separate from the live connection
- Deadlines are plain absolute timestamps, never timer callbacks
- Ephemeral: nothing here is persisted
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import math
import threading

from ..config import SETTINGS_LIMITS, DEFAULT_SETTINGS, SettingLimit


class Phase(str, Enum):
    """Room-level phases of the state machine."""
    LOBBY = "lobby"
    COLLECTING_ANSWERS = "collectingAnswers"
    VOTING = "voting"
    SHOWING_RESULTS = "showingResults"
    FINAL_SUMMARY = "finalSummary"


# Phases during which a game is in progress
ACTIVE_PHASES = frozenset({
    Phase.COLLECTING_ANSWERS,
    Phase.VOTING,
    Phase.SHOWING_RESULTS,
})

# Phases in which the host may change settings or (re)start
SETUP_PHASES = frozenset({Phase.LOBBY, Phase.FINAL_SUMMARY})


class RoundStatus(str, Enum):
    """Status of a single round; mirrors the room phase while it is current."""
    PENDING = "pending"
    COLLECTING_ANSWERS = "collectingAnswers"
    VOTING = "voting"
    SHOWING_RESULTS = "showingResults"
    COMPLETE = "complete"


class DeadlineKind(str, Enum):
    """Which phase a deadline belongs to."""
    ANSWER = "answer"
    VOTE = "vote"
    REVEAL = "reveal"


@dataclass(frozen=True)
class Deadline:
    """An armed deadline: the phase auto-advances once `at` has passed."""
    kind: DeadlineKind
    at: float  # Absolute, seconds since the epoch

    def elapsed(self, now: float) -> bool:
        return now >= self.at


@dataclass
class Settings:
    """Per-room game settings."""
    max_rounds: int = DEFAULT_SETTINGS["max_rounds"]
    seconds_to_answer: int = DEFAULT_SETTINGS["seconds_to_answer"]
    seconds_to_vote: int = DEFAULT_SETTINGS["seconds_to_vote"]
    seconds_to_reveal: int = DEFAULT_SETTINGS["seconds_to_reveal"]

    @classmethod
    def from_defaults(cls, defaults: dict[str, int]) -> Settings:
        return cls(**{k: v for k, v in defaults.items() if k in SETTINGS_LIMITS})

    def updated(
        self,
        partial: dict[str, Any],
        limits: dict[str, SettingLimit] | None = None,
    ) -> Settings:
        """
        Return new settings with `partial` applied.

        Each provided value is floored and clamped to its limit.
        Missing, boolean or non-numeric values keep the current value.
        """
        limits = limits or SETTINGS_LIMITS
        values = {}
        for name, limit in limits.items():
            current = getattr(self, name)
            raw = partial.get(name)
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                values[name] = current
            elif not math.isfinite(raw):
                values[name] = current
            else:
                values[name] = limit.clamp(math.floor(raw))
        return Settings(**values)


@dataclass
class Player:
    """
    A player in a room.

    player_id survives reconnects; connection_id is None while the
    player is disconnected.
    """
    player_id: str
    name: str
    connection_id: str | None = None
    score: int = 0
    num_correct_guesses: int = 0
    num_people_tricked: int = 0
    is_host: bool = False
    is_hot_seat: bool = False

    @property
    def connected(self) -> bool:
        return self.connection_id is not None

    def reset_scores(self):
        """Clear per-game counters for a fresh game."""
        self.score = 0
        self.num_correct_guesses = 0
        self.num_people_tricked = 0
        self.is_hot_seat = False


@dataclass
class Submission:
    """One answer in a round: the hot seat's real one or a bluff."""
    player_id: str
    text: str
    is_real_answer: bool = False


@dataclass
class Vote:
    """A voter's guess of which player wrote the real answer."""
    voter_id: str
    submission_player_id: str


@dataclass
class Round:
    """One question asked of one hot seat."""
    round_id: str
    hot_seat_player_id: str
    question: str
    submissions: list[Submission] = field(default_factory=list)
    votes: list[Vote] = field(default_factory=list)
    status: RoundStatus = RoundStatus.PENDING

    def submission_for(self, player_id: str) -> Submission | None:
        for submission in self.submissions:
            if submission.player_id == player_id:
                return submission
        return None

    @property
    def real_submission(self) -> Submission | None:
        for submission in self.submissions:
            if submission.is_real_answer:
                return submission
        return None

    def has_voted(self, voter_id: str) -> bool:
        return any(vote.voter_id == voter_id for vote in self.votes)


@dataclass
class Room:
    """
    Complete state of one game room.

    Invariants:
    - Exactly one player is host whenever players is non-empty
    - current_round_index is -1 only before the first round exists
    - At most one deadline is armed at a time
    """
    code: str
    created_at: float
    players: list[Player] = field(default_factory=list)
    phase: Phase = Phase.LOBBY
    rounds: list[Round] = field(default_factory=list)
    current_round_index: int = -1
    settings: Settings = field(default_factory=Settings)
    question_deck: list[str] = field(default_factory=list)
    deadline: Deadline | None = None

    # Serializes actions on this room
    lock: Any = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    @property
    def current_round(self) -> Round | None:
        if self.current_round_index < 0:
            return None
        return self.rounds[self.current_round_index]

    @property
    def connected_players(self) -> list[Player]:
        return [p for p in self.players if p.connected]

    @property
    def host(self) -> Player | None:
        for p in self.players:
            if p.is_host:
                return p
        return None

    @property
    def hot_seat(self) -> Player | None:
        for p in self.players:
            if p.is_hot_seat:
                return p
        return None

    @property
    def is_in_game(self) -> bool:
        return self.phase in ACTIVE_PHASES

    def get_player(self, player_id: str) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_for_connection(self, connection_id: str) -> Player | None:
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def name_taken(self, name: str) -> bool:
        lowered = name.casefold()
        return any(p.name.casefold() == lowered for p in self.players)

    def deadline_of(self, kind: DeadlineKind) -> float | None:
        """Absolute deadline for `kind`, if that deadline is armed."""
        if self.deadline and self.deadline.kind == kind:
            return self.deadline.at
        return None
