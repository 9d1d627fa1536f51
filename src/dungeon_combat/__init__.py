"""Dungeon Combat - turn-based combat core for a dungeon crawler.

Resolves encounters between one protagonist and a party of hostile
entities: initiative, attacks, damage, status effects, abilities, and
win/loss detection. Rendering, input, dungeon generation, and monster
data acquisition belong to the host game.

DETERMINISM:
- Every roll draws from one SeededRNG passed to the session
- The same seed and the same sequence of calls replay identically

Example:
    >>> from dungeon_combat import CombatSession, SeededRNG, create_fighter
    >>>
    >>> hero = create_fighter("Aria")
    >>> session = CombatSession(hero, hostiles, rng=SeededRNG("crypt-3"))
    >>> entry = session.get_current_turn()
    >>> session.start_turn()
    >>> result = session.player_attack(hostiles[0].id)
    >>> print(session.get_log()[-1])

Modules:
    core: Configuration, logging, constants, and exceptions.
    models: Pydantic V2 schemas for entities, effects, and combat state.
    engine: RNG, dice, turn management, and combat resolution.
"""

from __future__ import annotations

# Core
from dungeon_combat.core.config import CombatSettings, Settings, get_settings
from dungeon_combat.core.exceptions import DungeonCombatError
from dungeon_combat.core.logging import configure_logging, get_logger

# Models
from dungeon_combat.models import (
    Ability,
    Combatant,
    CombatState,
    CombatStatus,
    HostileEntity,
    HostileType,
    Protagonist,
    StatusEffect,
    StatusEffectCategory,
    StatusEffectType,
    TurnOrderEntry,
    create_fighter,
    create_warlock,
)

# Engine
from dungeon_combat.engine import (
    AbilityResult,
    ApplyEffectResult,
    AttackResult,
    CombatSession,
    FleeResult,
    SeededRNG,
    StatusEffectTickResult,
)


__version__ = "0.1.0"

__all__ = [
    # Core
    "Settings",
    "CombatSettings",
    "get_settings",
    "DungeonCombatError",
    "configure_logging",
    "get_logger",
    # Models
    "Ability",
    "Combatant",
    "CombatState",
    "CombatStatus",
    "HostileEntity",
    "HostileType",
    "Protagonist",
    "StatusEffect",
    "StatusEffectCategory",
    "StatusEffectType",
    "TurnOrderEntry",
    "create_fighter",
    "create_warlock",
    # Engine
    "AbilityResult",
    "ApplyEffectResult",
    "AttackResult",
    "CombatSession",
    "FleeResult",
    "SeededRNG",
    "StatusEffectTickResult",
]
