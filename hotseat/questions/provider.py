"""
Question Provider - Shuffled, non-repeating question draws.

Each room holds its own deck. Drawing pops the next template; an
empty deck is replaced by a freshly shuffled copy of the full bank, so
a question can only repeat after every other one has been asked.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import random

from .bank import QUESTION_BANK

if TYPE_CHECKING:
    from ..engine_core.state import Room


FALLBACK_QUESTION = "What is something nobody here knows about {hot_seat}?"
FALLBACK_OTHER_PLAYER = "someone"


def possessive(name: str) -> str:
    """Possessive form of a name: Ann -> Ann's, James -> James'."""
    return f"{name}'" if name.lower().endswith("s") else f"{name}'s"


def format_question(
    template: str,
    hot_seat_name: str | None,
    other_player_name: str | None = None,
) -> str:
    """
    Fill the placeholders of a question template.

    With no hot seat name the template is returned untouched.
    """
    name = (hot_seat_name or "").strip()
    if not name:
        return template
    other = (other_player_name or "").strip() or FALLBACK_OTHER_PLAYER
    return (
        template
        .replace("{hot_seat_possessive}", possessive(name))
        .replace("{hot_seat}", name)
        .replace("{other_player}", other)
    )


@dataclass
class QuestionProvider:
    """
    Draws questions for rooms.

    Usage:
        provider = QuestionProvider(rng=random.Random(7))
        room.question_deck = provider.new_deck()
        text = provider.draw_question(room, "Ann")
    """
    bank: tuple[str, ...] = QUESTION_BANK
    rng: random.Random = field(default_factory=random.Random)

    def new_deck(self) -> list[str]:
        """A full copy of the bank in uniformly random order."""
        deck = list(self.bank)
        self.rng.shuffle(deck)  # Fisher-Yates
        return deck

    def draw_question(self, room: Room, hot_seat_name: str | None) -> str:
        """Pop the next template off the room deck and format it."""
        if not room.question_deck:
            room.question_deck = self.new_deck()
        template = room.question_deck.pop() if room.question_deck else FALLBACK_QUESTION
        return format_question(
            template,
            hot_seat_name,
            self._pick_other_player(room, hot_seat_name),
        )

    def _pick_other_player(self, room: Room, hot_seat_name: str | None) -> str | None:
        others = [
            p.name for p in room.connected_players
            if p.name != hot_seat_name
        ]
        if not others:
            return None
        return self.rng.choice(others)
