"""Combat engine for the dungeon combat core.

This module provides the turn-based combat machinery: a seeded random
source, dice notation, the combat arena, turn scheduling, status effects,
attack and ability resolution, and the combat session that ties them
together for a host loop.

Submodules:
    rng: Seeded Mulberry32 random source
    dice: Dice notation parsing and rolling
    arena: Roster, combatant projection, and health bookkeeping
    turn_manager: Initiative order and turn progression
    effects: Status effect application, ticking, and modifiers
    attacks: To-hit rolls, damage, and basic attacks
    abilities: Ability validation and archetype dispatch
    session: The combat session driven by the host loop

Example:
    >>> from dungeon_combat.engine import CombatSession, SeededRNG
    >>>
    >>> session = CombatSession(hero, hostiles, rng=SeededRNG("seed"))
    >>> while not session.is_over:
    ...     tick = session.start_turn()
    ...     if session.is_player_turn() and not tick.is_incapacitated:
    ...         session.player_attack(session.get_valid_targets()[0].id)
    ...     session.next_turn()
"""

from __future__ import annotations

# =============================================================================
# Random Source & Dice
# =============================================================================
from dungeon_combat.engine.dice import (
    DiceExpression,
    DiceNotation,
    DiceRoller,
    parse_dice,
)
from dungeon_combat.engine.rng import SeededRNG, hash_seed

# =============================================================================
# Turn Management
# =============================================================================
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.turn_manager import TurnScheduler

# =============================================================================
# Resolution
# =============================================================================
from dungeon_combat.engine.effects import (
    ApplyEffectResult,
    StatusEffectEngine,
    StatusEffectTickResult,
)
from dungeon_combat.engine.attacks import (
    AttackResolver,
    AttackResult,
    AttackRollResult,
    DamageResult,
    hostile_attack_bonus,
    hostile_damage_dice,
    protagonist_attack_bonus,
    scale_attack_power,
)
from dungeon_combat.engine.abilities import AbilityResolver, AbilityResult

# =============================================================================
# Session
# =============================================================================
from dungeon_combat.engine.session import CombatSession, FleeResult


__all__ = [
    # Random source & dice
    "SeededRNG",
    "hash_seed",
    "DiceExpression",
    "DiceNotation",
    "DiceRoller",
    "parse_dice",
    # Turn management
    "CombatArena",
    "TurnScheduler",
    # Status effects
    "ApplyEffectResult",
    "StatusEffectEngine",
    "StatusEffectTickResult",
    # Attacks
    "AttackResolver",
    "AttackResult",
    "AttackRollResult",
    "DamageResult",
    "hostile_attack_bonus",
    "hostile_damage_dice",
    "protagonist_attack_bonus",
    "scale_attack_power",
    # Abilities
    "AbilityResolver",
    "AbilityResult",
    # Session
    "CombatSession",
    "FleeResult",
]
