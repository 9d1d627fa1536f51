"""Pydantic V2 schemas for combat state.

This module defines the data models for an encounter: the uniform
combatant projection, initiative entries, and the combat state that
keys combatants by stable id and keeps the turn order as a list of ids.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

from dungeon_combat.models.effects import StatusEffect, StatusEffectType


class CombatStatus(StrEnum):
    """Combat encounter status."""

    IN_PROGRESS = "in_progress"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"

    @property
    def is_terminal(self) -> bool:
        """Check whether the status ends the encounter.

        Returns:
            True for VICTORY, DEFEAT and FLED.
        """
        return self is not CombatStatus.IN_PROGRESS


class Combatant(BaseModel):
    """In-combat projection of the protagonist or one hostile entity.

    Attributes:
        id: Stable combatant identifier.
        name: Display name in combat.
        health: Current health.
        max_health: Maximum health.
        speed: Speed used for initiative.
        defense: Current defense.
        is_player: Whether this is the protagonist.
        status_effects: Active effects in application order.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(min_length=1, description="Combatant ID")
    name: str = Field(min_length=1, description="Display name")
    health: Annotated[int, Field(ge=0, description="Current health")]
    max_health: Annotated[int, Field(ge=1, description="Maximum health")]
    speed: int = Field(description="Speed")
    defense: int = Field(description="Defense")
    is_player: bool = Field(default=False, description="Is the protagonist")
    status_effects: list[StatusEffect] = Field(
        default_factory=list,
        description="Active status effects",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_alive(self) -> bool:
        """Check if the combatant still has health.

        Returns:
            True if health > 0.
        """
        return self.health > 0

    def find_effect(self, effect_type: StatusEffectType) -> StatusEffect | None:
        """Find the active effect of a given type.

        Args:
            effect_type: The effect type to look for.

        Returns:
            The effect instance, or None if the type is not active.
        """
        for effect in self.status_effects:
            if effect.type == effect_type:
                return effect
        return None


class TurnOrderEntry(BaseModel):
    """Initiative order entry referencing a combatant by id.

    Attributes:
        combatant_id: Reference to the combatant.
        name: Display name of the combatant.
        initiative: Speed-derived initiative value.
        is_player: Whether the entry is the protagonist.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    combatant_id: str = Field(description="Reference to combatant")
    name: str = Field(description="Display name")
    initiative: int = Field(description="Initiative value")
    is_player: bool = Field(default=False, description="Is the protagonist")


class CombatState(BaseModel):
    """Current state of a combat encounter.

    Attributes:
        round: Current round number, starting at 1.
        current_turn_index: Index of the acting entry in the turn order.
        turn_order: Initiative entries, computed once and only shrunk.
        combatants: Living combatants keyed by id.
        status: Encounter status.
        log: Append-only gameplay messages.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    round: Annotated[int, Field(ge=1, description="Current round")] = 1
    current_turn_index: int = Field(default=0, description="Current turn index")
    turn_order: list[TurnOrderEntry] = Field(default_factory=list, description="Turn order")
    combatants: dict[str, Combatant] = Field(default_factory=dict, description="Combatants")
    status: CombatStatus = Field(default=CombatStatus.IN_PROGRESS, description="Status")
    log: list[str] = Field(default_factory=list, description="Combat log")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def current_combatant_id(self) -> str | None:
        """Get the id of the combatant whose turn it is.

        Returns:
            Combatant id, or None when the encounter is over.
        """
        if self.status.is_terminal:
            return None
        if not 0 <= self.current_turn_index < len(self.turn_order):
            return None
        return self.turn_order[self.current_turn_index].combatant_id


__all__ = [
    "CombatStatus",
    "Combatant",
    "TurnOrderEntry",
    "CombatState",
]
