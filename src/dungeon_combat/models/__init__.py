"""Pydantic models for the dungeon combat engine.

Exports:
    Effects:
        StatusEffectType: Closed set of status effect types.
        StatusEffectCategory: DOT, HOT, BUFF, DEBUFF, INCAPACITATION.
        StatusEffect: An active effect instance.

    Combat:
        CombatStatus: Encounter status (terminal once decided).
        Combatant: Uniform in-combat projection.
        TurnOrderEntry: Initiative entry referencing a combatant id.
        CombatState: Full encounter state.

    Entities:
        HostileEntity, Ability, ActiveBuff, ProtagonistStats, Protagonist,
        create_fighter, create_warlock.
"""

from __future__ import annotations

from dungeon_combat.models.combat import (
    Combatant,
    CombatState,
    CombatStatus,
    TurnOrderEntry,
)
from dungeon_combat.models.effects import (
    StatusEffect,
    StatusEffectCategory,
    StatusEffectType,
)
from dungeon_combat.models.entities import (
    Ability,
    ActiveBuff,
    HostileEntity,
    Protagonist,
    ProtagonistStats,
    create_fighter,
    create_warlock,
)
from dungeon_combat.models.enums import (
    AbilityArchetype,
    HostileType,
    PlayerClass,
    StatName,
)


__all__ = [
    # Enums
    "AbilityArchetype",
    "HostileType",
    "PlayerClass",
    "StatName",
    # Effects
    "StatusEffectType",
    "StatusEffectCategory",
    "StatusEffect",
    # Combat
    "CombatStatus",
    "Combatant",
    "TurnOrderEntry",
    "CombatState",
    # Entities
    "HostileEntity",
    "Ability",
    "ActiveBuff",
    "ProtagonistStats",
    "Protagonist",
    "create_fighter",
    "create_warlock",
]
