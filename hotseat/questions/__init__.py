"""
Questions Module - Static question bank and per-room draw decks.
"""

from .bank import QUESTION_BANK
from .provider import QuestionProvider, format_question, possessive

__all__ = [
    "QUESTION_BANK",
    "QuestionProvider",
    "format_question",
    "possessive",
]
