"""Configuration management for the dungeon combat engine.

This module provides centralized configuration management using
pydantic-settings, supporting environment variables, .env files, and
runtime overrides. The defaults reproduce the stock combat rules, so a
host that never touches configuration gets the standard game.

Example:
    >>> from dungeon_combat.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.combat.flee_chance
    50

Environment Variables:
    DUNGEON_COMBAT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DUNGEON_COMBAT_JSON_LOGS: Emit JSON log lines instead of console output
    DUNGEON_COMBAT_COMBAT_FLEE_CHANCE: Percent chance a flee attempt succeeds
    DUNGEON_COMBAT_COMBAT_HOSTILE_CRIT_CHANCE: Percent crit chance for hostiles
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dungeon_combat.core.constants import DICE_NOTATION_PATTERN
from dungeon_combat.core.exceptions import ConfigurationError


class CombatSettings(BaseSettings):
    """Configuration for combat rule tuning.

    Attributes:
        hostile_crit_chance: Percent chance a hostile hit is critical.
        hostile_crit_multiplier: Damage multiplier for hostile critical hits.
        unarmed_damage_dice: Dice rolled when an attacker has no weapon.
        flee_chance: Percent chance a flee attempt succeeds.
        min_damage_received_modifier: Floor for the damage-received multiplier.
        stun_duration: Turns of stun applied by stunning abilities.
        attack_buff_fraction: Fraction of base attack granted by attack buffs.
        attack_buff_duration: Turns an attack buff lasts.
        invulnerability_defense_bonus: Defense granted by invulnerability.
        invulnerability_duration: Turns invulnerability lasts.
        aoe_basic_attack_fraction: Basic attack multiplier for AOE abilities
            that declare no damage of their own.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_COMBAT_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    hostile_crit_chance: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Hostile critical hit chance (percent)",
    )
    hostile_crit_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        description="Hostile critical hit damage multiplier",
    )
    unarmed_damage_dice: str = Field(
        default="1d4",
        description="Damage dice used when no weapon is equipped",
    )
    flee_chance: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Flee success chance (percent)",
    )
    min_damage_received_modifier: float = Field(
        default=0.25,
        gt=0,
        le=1.0,
        description="Lowest damage-received multiplier buffs can reach",
    )
    stun_duration: int = Field(
        default=1,
        ge=1,
        description="Stun duration applied by stunning abilities (turns)",
    )
    attack_buff_fraction: float = Field(
        default=0.25,
        gt=0,
        description="Fraction of base attack granted by attack buffs",
    )
    attack_buff_duration: int = Field(
        default=3,
        ge=1,
        description="Attack buff duration (turns)",
    )
    invulnerability_defense_bonus: int = Field(
        default=999,
        ge=1,
        description="Defense bonus granted by invulnerability",
    )
    invulnerability_duration: int = Field(
        default=1,
        ge=1,
        description="Invulnerability duration (turns)",
    )
    aoe_basic_attack_fraction: float = Field(
        default=0.8,
        gt=0,
        description="Basic attack multiplier for AOE abilities without damage",
    )

    @field_validator("unarmed_damage_dice", mode="after")
    @classmethod
    def validate_dice_notation(cls, value: str) -> str:
        """Ensure the unarmed dice use NdS[+/-M] notation.

        Args:
            value: The configured dice notation.

        Returns:
            The validated notation, stripped of surrounding whitespace.

        Raises:
            ConfigurationError: If the notation cannot be parsed.
        """
        if not re.match(DICE_NOTATION_PATTERN, value):
            raise ConfigurationError(
                f"Invalid dice notation for unarmed damage: {value!r}",
                config_key="unarmed_damage_dice",
            )
        return value.strip()


class Settings(BaseSettings):
    """Top-level settings read from ``DUNGEON_COMBAT_*`` variables or a ``.env`` file.

    Attributes:
        log_level: Diagnostic logging level.
        json_logs: Emit JSON formatted logs.
        combat: Combat rule settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DUNGEON_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON formatted logs",
    )

    combat: CombatSettings = Field(default_factory=CombatSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once and cache them for the process.

    Returns:
        The cached Settings.

    Raises:
        ConfigurationError: If configuration is missing or invalid.

    Example:
        >>> settings = get_settings()
        >>> settings.combat.hostile_crit_chance
        10
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Forget cached settings so the next get_settings() rereads the environment."""
    get_settings.cache_clear()


__all__ = [
    "CombatSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
