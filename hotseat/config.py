"""
Configuration - Game limits and server settings.

Values come from environment variables so a deployment can tune
player minimums and text caps without code changes:

    HOTSEAT_MIN_PLAYERS        Minimum connected players (>= 2, default 3)
    HOTSEAT_TICK_SECONDS       Interval of the deadline driver (default 1.0)
    HOTSEAT_ANSWER_MAX_LENGTH  Max characters kept from an answer
    HOTSEAT_NAME_MAX_LENGTH    Max characters kept from a display name
    ALLOWED_ORIGINS            Comma-separated CORS origins
    HOTSEAT_LOG_LEVEL          Logging level for the CLI
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os


DEFAULT_MIN_PLAYERS = 3


@dataclass(frozen=True)
class SettingLimit:
    """Inclusive range a room setting is clamped to."""
    minimum: int
    maximum: int

    def clamp(self, value: int) -> int:
        return min(self.maximum, max(self.minimum, value))


# Defaults applied to every new room
DEFAULT_SETTINGS: dict[str, int] = {
    "max_rounds": 5,
    "seconds_to_answer": 45,
    "seconds_to_vote": 30,
    "seconds_to_reveal": 10,
}

SETTINGS_LIMITS: dict[str, SettingLimit] = {
    "max_rounds": SettingLimit(1, 10),
    "seconds_to_answer": SettingLimit(15, 120),
    "seconds_to_vote": SettingLimit(10, 90),
    "seconds_to_reveal": SettingLimit(5, 45),
}


@dataclass(frozen=True)
class GameConfig:
    """
    Process-wide game configuration.

    Passed explicitly to the registry and scheduler; nothing reads the
    environment after load_config() returns.
    """
    min_players: int = DEFAULT_MIN_PLAYERS
    tick_seconds: float = 1.0
    answer_max_length: int = 140
    name_max_length: int = 24
    default_settings: dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_SETTINGS)
    )
    settings_limits: dict[str, SettingLimit] = field(
        default_factory=lambda: dict(SETTINGS_LIMITS)
    )
    allowed_origins: tuple[str, ...] = ("*",)


def _parse_min_players(raw: str | None) -> int:
    """Accept integers >= 2; anything else falls back to the default."""
    if raw is None:
        return DEFAULT_MIN_PLAYERS
    try:
        value = int(float(raw))
    except ValueError:
        return DEFAULT_MIN_PLAYERS
    return value if value >= 2 else DEFAULT_MIN_PLAYERS


def _parse_positive(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_config(environ: dict[str, str] | None = None) -> GameConfig:
    """
    Build a GameConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Frozen GameConfig
    """
    env = os.environ if environ is None else environ

    origins = tuple(
        origin.strip()
        for origin in env.get("ALLOWED_ORIGINS", "*").split(",")
        if origin.strip()
    ) or ("*",)

    return GameConfig(
        min_players=_parse_min_players(env.get("HOTSEAT_MIN_PLAYERS")),
        tick_seconds=_parse_positive(env.get("HOTSEAT_TICK_SECONDS"), 1.0),
        answer_max_length=int(
            _parse_positive(env.get("HOTSEAT_ANSWER_MAX_LENGTH"), 140)
        ),
        name_max_length=int(
            _parse_positive(env.get("HOTSEAT_NAME_MAX_LENGTH"), 24)
        ),
        allowed_origins=origins,
    )
