"""Status effect types and the status effect model.

Every per-type rule of the status effect engine (category, display name,
default magnitude, percent modifier) is an exhaustive ``match`` over the
closed set of effect types, so adding a new type without handling it is
flagged by the type checker through ``assert_never``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, assert_never

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dungeon_combat.core.constants import (
    BLEED_DAMAGE,
    BURN_BASE_DAMAGE,
    BURN_DAMAGE_PER_LEVEL,
    MIN_POISON_DAMAGE,
    POISON_MAX_HEALTH_FRACTION,
    REGENERATION_BASE_HEALING,
    REGENERATION_LEVEL_DIVISOR,
)


class StatusEffectCategory(StrEnum):
    """Broad behavior class of a status effect."""

    DOT = "dot"
    HOT = "hot"
    BUFF = "buff"
    DEBUFF = "debuff"
    INCAPACITATION = "incapacitation"

    @property
    def uses_value_per_turn(self) -> bool:
        """Check whether effects of this category tick for a flat amount.

        Returns:
            True for damage-over-time and healing-over-time categories.
        """
        return self in (StatusEffectCategory.DOT, StatusEffectCategory.HOT)

    @property
    def uses_percent_modifier(self) -> bool:
        """Check whether effects of this category carry a percent modifier.

        Returns:
            True for buff and debuff categories.
        """
        return self in (StatusEffectCategory.BUFF, StatusEffectCategory.DEBUFF)


class StatusEffectType(StrEnum):
    """Closed set of status effect types."""

    # Damage over time
    POISON = "poison"
    BURN = "burn"
    BLEED = "bleed"

    # Incapacitation
    STUN = "stun"
    FREEZE = "freeze"
    SLEEP = "sleep"

    # Debuffs
    SLOW = "slow"
    WEAKEN = "weaken"
    VULNERABLE = "vulnerable"

    # Buffs
    HASTE = "haste"
    STRENGTHEN = "strengthen"
    FORTIFY = "fortify"

    # Healing over time
    REGENERATION = "regeneration"

    @property
    def category(self) -> StatusEffectCategory:
        """Get the category this effect type belongs to.

        Returns:
            The StatusEffectCategory for this type.
        """
        match self:
            case StatusEffectType.POISON | StatusEffectType.BURN | StatusEffectType.BLEED:
                return StatusEffectCategory.DOT
            case StatusEffectType.STUN | StatusEffectType.FREEZE | StatusEffectType.SLEEP:
                return StatusEffectCategory.INCAPACITATION
            case (
                StatusEffectType.SLOW | StatusEffectType.WEAKEN | StatusEffectType.VULNERABLE
            ):
                return StatusEffectCategory.DEBUFF
            case (
                StatusEffectType.HASTE | StatusEffectType.STRENGTHEN | StatusEffectType.FORTIFY
            ):
                return StatusEffectCategory.BUFF
            case StatusEffectType.REGENERATION:
                return StatusEffectCategory.HOT
            case _:
                assert_never(self)

    @property
    def display_name(self) -> str:
        """Get the human-readable name used in the combat log.

        Returns:
            Display name (e.g., 'Stunned' for STUN).
        """
        match self:
            case StatusEffectType.POISON:
                return "Poison"
            case StatusEffectType.BURN:
                return "Burn"
            case StatusEffectType.BLEED:
                return "Bleed"
            case StatusEffectType.STUN:
                return "Stunned"
            case StatusEffectType.FREEZE:
                return "Frozen"
            case StatusEffectType.SLEEP:
                return "Asleep"
            case StatusEffectType.SLOW:
                return "Slowed"
            case StatusEffectType.WEAKEN:
                return "Weakened"
            case StatusEffectType.VULNERABLE:
                return "Vulnerable"
            case StatusEffectType.HASTE:
                return "Haste"
            case StatusEffectType.STRENGTHEN:
                return "Strengthened"
            case StatusEffectType.FORTIFY:
                return "Fortified"
            case StatusEffectType.REGENERATION:
                return "Regeneration"
            case _:
                assert_never(self)

    @property
    def percent_modifier(self) -> int:
        """Get the fixed percent modifier for buff and debuff types.

        Returns:
            Signed percent modifier, or 0 for types that do not use one.
        """
        match self:
            case StatusEffectType.SLOW:
                return -50
            case StatusEffectType.WEAKEN:
                return -25
            case StatusEffectType.VULNERABLE:
                return 25
            case StatusEffectType.HASTE:
                return 50
            case StatusEffectType.STRENGTHEN:
                return 25
            case StatusEffectType.FORTIFY:
                return 25
            case (
                StatusEffectType.POISON
                | StatusEffectType.BURN
                | StatusEffectType.BLEED
                | StatusEffectType.STUN
                | StatusEffectType.FREEZE
                | StatusEffectType.SLEEP
                | StatusEffectType.REGENERATION
            ):
                return 0
            case _:
                assert_never(self)

    def default_value(self, *, target_max_health: int, source_level: int) -> int:
        """Compute the default per-turn magnitude for this effect type.

        Args:
            target_max_health: Maximum health of the affected combatant.
            source_level: Level of whatever applied the effect.

        Returns:
            Per-turn damage or healing, or 0 for types without one.
        """
        match self:
            case StatusEffectType.POISON:
                return max(MIN_POISON_DAMAGE, int(target_max_health * POISON_MAX_HEALTH_FRACTION))
            case StatusEffectType.BURN:
                return BURN_BASE_DAMAGE + BURN_DAMAGE_PER_LEVEL * source_level
            case StatusEffectType.BLEED:
                return BLEED_DAMAGE
            case StatusEffectType.REGENERATION:
                return REGENERATION_BASE_HEALING + source_level // REGENERATION_LEVEL_DIVISOR
            case (
                StatusEffectType.STUN
                | StatusEffectType.FREEZE
                | StatusEffectType.SLEEP
                | StatusEffectType.SLOW
                | StatusEffectType.WEAKEN
                | StatusEffectType.VULNERABLE
                | StatusEffectType.HASTE
                | StatusEffectType.STRENGTHEN
                | StatusEffectType.FORTIFY
            ):
                return 0
            case _:
                assert_never(self)


class StatusEffect(BaseModel):
    """An active status effect instance on a combatant.

    Attributes:
        id: Unique identifier of this instance within its session.
        type: The effect type.
        name: Display name of the effect.
        remaining_turns: Turns left; 0 means due for removal.
        value_per_turn: Per-turn damage or healing (DOT/HOT only).
        percent_modifier: Signed percent modifier (BUFF/DEBUFF only).
        source: Attribution string for whatever applied the effect.
        source_level: Level of the source, scaling DOT/HOT magnitude.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(min_length=1, description="Effect instance ID")
    type: StatusEffectType = Field(description="Effect type")
    name: str = Field(description="Display name")
    remaining_turns: Annotated[int, Field(ge=0, description="Turns remaining")]
    value_per_turn: int | None = Field(default=None, description="Per-turn magnitude")
    percent_modifier: int | None = Field(default=None, description="Percent modifier")
    source: str = Field(default="unknown", description="Effect source")
    source_level: Annotated[int, Field(ge=0, description="Source level")] = 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category(self) -> StatusEffectCategory:
        """Get the category derived from the effect type.

        Returns:
            The effect's StatusEffectCategory.
        """
        return self.type.category


__all__ = [
    "StatusEffectCategory",
    "StatusEffectType",
    "StatusEffect",
]
