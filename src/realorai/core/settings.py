"""Tunable constants for the sampler and the game loop.

Defaults match the shipped game. Hosts override them either by constructing
the dataclasses directly or through environment variables::

    REALORAI_HISTORY_LENGTH=30 REALORAI_PRIMARY_WEIGHT=2 realorai serve

Malformed values are ignored (with a warning) so a typo in a deployment
environment never prevents the game from starting.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Final

from .models import CATEGORIES

__all__ = [
    "GameSettings",
    "SamplerSettings",
    "game_settings_from_env",
    "settings_from_env",
]

logger = logging.getLogger(__name__)

_PREFIX: Final = "REALORAI_"


@dataclass(frozen=True)
class SamplerSettings:
    """Sampler constants: history window ``H``, weight ``W`` and coverage target ``U``."""

    history_length: int = 50
    primary_category: str = "people"
    primary_weight: int = 3
    unique_target: int = 50
    max_attempts: int = 20

    def __post_init__(self) -> None:
        if self.history_length < 1:
            raise ValueError("history_length must be positive")
        if self.primary_weight < 1:
            raise ValueError("primary_weight must be positive")
        if self.unique_target < 1:
            raise ValueError("unique_target must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        if self.primary_category not in CATEGORIES:
            raise ValueError(f"Unknown primary_category '{self.primary_category}'. Options: {', '.join(CATEGORIES)}")


@dataclass(frozen=True)
class GameSettings:
    rounds_per_game: int = 10
    # Client-side delay between showing feedback and requesting the next round.
    reveal_delay_ms: int = 750
    streak_milestone: int = 5

    def __post_init__(self) -> None:
        if self.rounds_per_game < 1:
            raise ValueError("rounds_per_game must be positive")
        if self.reveal_delay_ms < 0:
            raise ValueError("reveal_delay_ms must not be negative")
        if self.streak_milestone < 1:
            raise ValueError("streak_milestone must be positive")


def _env_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s%s=%r", _PREFIX, name, raw)
        return None


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    raw = env.get(_PREFIX + name)
    if raw is None:
        return None
    value = raw.strip().lower()
    return value or None


def settings_from_env(env: Mapping[str, str] | None = None) -> SamplerSettings:
    """Build :class:`SamplerSettings` from ``REALORAI_*`` variables."""

    source = os.environ if env is None else env
    defaults = SamplerSettings()
    primary = _env_str(source, "PRIMARY_CATEGORY")
    if primary is not None and primary not in CATEGORIES:
        logger.warning("Ignoring unknown %sPRIMARY_CATEGORY=%r", _PREFIX, primary)
        primary = None
    overrides = {
        "history_length": _env_int(source, "HISTORY_LENGTH"),
        "primary_category": primary,
        "primary_weight": _env_int(source, "PRIMARY_WEIGHT"),
        "unique_target": _env_int(source, "UNIQUE_TARGET"),
        "max_attempts": _env_int(source, "MAX_ATTEMPTS"),
    }
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return SamplerSettings(**{**asdict(defaults), **values})
    except ValueError as exc:
        logger.warning("Invalid sampler settings from environment (%s); using defaults", exc)
        return defaults


def game_settings_from_env(env: Mapping[str, str] | None = None) -> GameSettings:
    source = os.environ if env is None else env
    defaults = GameSettings()
    overrides = {
        "rounds_per_game": _env_int(source, "ROUNDS"),
        "reveal_delay_ms": _env_int(source, "REVEAL_DELAY_MS"),
    }
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return GameSettings(**{**asdict(defaults), **values})
    except ValueError as exc:
        logger.warning("Invalid game settings from environment (%s); using defaults", exc)
        return defaults
