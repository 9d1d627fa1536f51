"""Enumeration types for the dungeon combat engine.

This module defines the enumeration types shared by the entity models,
including creature types, protagonist classes, buffable stats, and the
closed set of ability archetypes the ability resolver dispatches on.
"""

from __future__ import annotations

from enum import StrEnum


class HostileType(StrEnum):
    """Creature classification of a hostile entity.

    Mirrors the standard fantasy creature types so that monster data
    from any provider maps onto a closed set.
    """

    ABERRATION = "aberration"
    BEAST = "beast"
    CELESTIAL = "celestial"
    CONSTRUCT = "construct"
    DRAGON = "dragon"
    ELEMENTAL = "elemental"
    FEY = "fey"
    FIEND = "fiend"
    GIANT = "giant"
    HUMANOID = "humanoid"
    MONSTROSITY = "monstrosity"
    OOZE = "ooze"
    PLANT = "plant"
    UNDEAD = "undead"


class PlayerClass(StrEnum):
    """Playable protagonist classes."""

    FIGHTER = "fighter"
    WARLOCK = "warlock"

    @property
    def display_name(self) -> str:
        """Get the display name of the class.

        Returns:
            Capitalized class name (e.g., 'Fighter').
        """
        return self.value.capitalize()


class StatName(StrEnum):
    """Protagonist stats that temporary buffs can modify."""

    MAX_HEALTH = "max_health"
    MAX_MANA = "max_mana"
    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"
    CRIT_CHANCE = "crit_chance"
    CRIT_MULTIPLIER = "crit_multiplier"


class AbilityArchetype(StrEnum):
    """Closed set of ways an ability can resolve.

    Members are listed in resolution precedence: an ability takes the
    first archetype whose declared attributes it satisfies.
    """

    SELF_HEAL = "self_heal"
    ATTACK_BUFF = "attack_buff"
    FULL_RESTORE = "full_restore"
    INVULNERABILITY = "invulnerability"
    AOE_DAMAGE = "aoe_damage"
    DRAIN = "drain"
    SINGLE_TARGET = "single_target"
    FALLBACK = "fallback"

    @property
    def requires_target(self) -> bool:
        """Check whether abilities of this archetype need a hostile target.

        Returns:
            True for DRAIN and SINGLE_TARGET.
        """
        return self in (AbilityArchetype.DRAIN, AbilityArchetype.SINGLE_TARGET)


__all__ = [
    "HostileType",
    "PlayerClass",
    "StatName",
    "AbilityArchetype",
]
