"""Shared infrastructure for the combat engine.

Settings come from ``DUNGEON_COMBAT_*`` environment variables via
pydantic-settings, diagnostics go through structlog, and every error the
engine raises derives from :class:`DungeonCombatError`.
"""

from __future__ import annotations

from dungeon_combat.core.config import (
    CombatSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from dungeon_combat.core.exceptions import (
    CombatError,
    ConfigurationError,
    DiceRollError,
    DungeonCombatError,
    GameEngineError,
    InvalidGameStateError,
    TurnManagementError,
    UnknownCombatantError,
    ValidationError,
)
from dungeon_combat.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)


__all__ = [
    # Base exception
    "DungeonCombatError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "UnknownCombatantError",
    "DiceRollError",
    "TurnManagementError",
    # Configuration
    "Settings",
    "CombatSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
