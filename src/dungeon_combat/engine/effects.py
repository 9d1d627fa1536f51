"""Status effect engine.

This module owns the lifecycle of status effects: application with
refresh and upgrade semantics, the per-turn tick (damage and healing over
time, incapacitation, expiry), removal, and the derived attack and
damage-received modifiers.

A combatant holds at most one effect per type. Reapplying a type extends
its duration to the longer of the two and raises its per-turn value if
the new one is strictly greater.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dungeon_combat.core.logging import get_logger
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.models.effects import (
    StatusEffect,
    StatusEffectCategory,
    StatusEffectType,
)


logger = get_logger(__name__)


@dataclass(frozen=True)
class ApplyEffectResult:
    """Outcome of applying a status effect.

    Attributes:
        applied: Whether the target existed and the effect took hold.
        refreshed: Whether an existing effect of the same type was refreshed.
        upgraded: Whether the existing effect's per-turn value was raised.
        message: Log line describing the outcome.
        effect: The new or refreshed effect instance, if applied.
    """

    applied: bool
    refreshed: bool
    upgraded: bool
    message: str
    effect: StatusEffect | None = None


@dataclass(frozen=True)
class StatusEffectTickResult:
    """Outcome of one per-turn status effect tick.

    Attributes:
        processed_effects: Effects still active after the tick.
        dot_damage: Total damage over time applied.
        hot_healing: Total healing over time rolled up this tick.
        expired_effects: Effects that wore off this tick.
        is_incapacitated: Whether the combatant loses this turn.
        messages: Log lines produced by the tick, in order.
    """

    processed_effects: list[StatusEffect] = field(default_factory=list)
    dot_damage: int = 0
    hot_healing: int = 0
    expired_effects: list[StatusEffect] = field(default_factory=list)
    is_incapacitated: bool = False
    messages: list[str] = field(default_factory=list)


class StatusEffectEngine:
    """Apply, tick, query, and remove status effects within an arena."""

    def __init__(self, arena: CombatArena) -> None:
        """Initialize the engine.

        Args:
            arena: The encounter the effects live in.
        """
        self._arena = arena

    # -------------------------------------------------------------------------
    # Application & removal
    # -------------------------------------------------------------------------

    def apply_status_effect(
        self,
        target_id: str,
        effect_type: StatusEffectType,
        duration: int,
        source: str = "unknown",
        source_level: int = 1,
        value_override: int | None = None,
    ) -> ApplyEffectResult:
        """Apply a status effect, refreshing any existing effect of the same type.

        Args:
            target_id: The combatant receiving the effect.
            effect_type: The effect type.
            duration: Duration in turns.
            source: Attribution for whatever applied the effect.
            source_level: Level of the source, scaling DOT/HOT values.
            value_override: Per-turn value replacing the type's formula.

        Returns:
            ApplyEffectResult describing what happened.
        """
        combatant = self._arena.get_combatant(target_id)
        if combatant is None:
            return ApplyEffectResult(
                applied=False,
                refreshed=False,
                upgraded=False,
                message="Target not found",
            )

        category = effect_type.category
        value = (
            value_override
            if value_override is not None
            else effect_type.default_value(
                target_max_health=combatant.max_health,
                source_level=source_level,
            )
        )

        existing = combatant.find_effect(effect_type)
        if existing is not None:
            existing.remaining_turns = max(existing.remaining_turns, duration)
            upgraded = False
            if (
                category.uses_value_per_turn
                and existing.value_per_turn is not None
                and value > existing.value_per_turn
            ):
                existing.value_per_turn = value
                upgraded = True

            if upgraded:
                message = f"{combatant.name}'s {existing.name} is upgraded and refreshed!"
            else:
                message = f"{combatant.name}'s {existing.name} duration refreshed."
            self._arena.log(message)
            logger.debug(
                "Status effect refreshed",
                target=combatant.name,
                effect=effect_type.value,
                remaining_turns=existing.remaining_turns,
                upgraded=upgraded,
            )
            return ApplyEffectResult(
                applied=True,
                refreshed=True,
                upgraded=upgraded,
                message=message,
                effect=existing,
            )

        effect = StatusEffect(
            id=self._arena.next_effect_id(target_id, effect_type),
            type=effect_type,
            name=effect_type.display_name,
            remaining_turns=duration,
            value_per_turn=value if category.uses_value_per_turn else None,
            percent_modifier=(
                effect_type.percent_modifier if category.uses_percent_modifier else None
            ),
            source=source,
            source_level=source_level,
        )
        combatant.status_effects.append(effect)

        message = f"{combatant.name} is afflicted with {effect.name}!"
        self._arena.log(message)
        logger.info(
            "Status effect applied",
            target=combatant.name,
            effect=effect_type.value,
            duration=duration,
            value=effect.value_per_turn,
            source=source,
        )
        return ApplyEffectResult(
            applied=True,
            refreshed=False,
            upgraded=False,
            message=message,
            effect=effect,
        )

    def remove_status_effect(self, target_id: str, effect_id: str) -> bool:
        """Remove one effect instance by id.

        Args:
            target_id: The combatant holding the effect.
            effect_id: The effect instance id.

        Returns:
            True if an effect was removed, False if nothing matched.
        """
        combatant = self._arena.get_combatant(target_id)
        if combatant is None:
            return False

        for index, effect in enumerate(combatant.status_effects):
            if effect.id == effect_id:
                del combatant.status_effects[index]
                self._arena.log(f"{combatant.name}'s {effect.name} has worn off.")
                return True
        return False

    def remove_effects_by_type(self, target_id: str, effect_type: StatusEffectType) -> int:
        """Remove every effect of a type from a combatant.

        Args:
            target_id: The combatant holding the effects.
            effect_type: The type to remove.

        Returns:
            Number of effects removed.
        """
        combatant = self._arena.get_combatant(target_id)
        if combatant is None:
            return 0

        kept = [e for e in combatant.status_effects if e.type != effect_type]
        removed = len(combatant.status_effects) - len(kept)
        combatant.status_effects[:] = kept
        return removed

    def break_sleep(self, target_id: str) -> bool:
        """Wake a sleeping combatant after it takes a direct hit.

        Args:
            target_id: The combatant that was struck.

        Returns:
            True if a sleep effect was removed.
        """
        if self.remove_effects_by_type(target_id, StatusEffectType.SLEEP) == 0:
            return False
        combatant = self._arena.get_combatant(target_id)
        if combatant is not None:
            self._arena.log(f"{combatant.name} wakes up from the damage!")
        return True

    # -------------------------------------------------------------------------
    # Per-turn tick
    # -------------------------------------------------------------------------

    def process_status_effects(self, combatant_id: str) -> StatusEffectTickResult:
        """Run the start-of-turn tick for one combatant.

        Every effect contributes its damage, healing, or incapacitation,
        then loses one turn; effects reaching zero are removed. Damage
        over time bypasses defense and may kill, which removes a hostile
        and can end the encounter.

        Args:
            combatant_id: The combatant whose turn is starting.

        Returns:
            StatusEffectTickResult for the tick.
        """
        combatant = self._arena.get_combatant(combatant_id)
        if combatant is None:
            return StatusEffectTickResult()

        messages: list[str] = []
        expired: list[StatusEffect] = []
        dot_damage = 0
        hot_healing = 0
        is_incapacitated = False

        for effect in combatant.status_effects:
            match effect.category:
                case StatusEffectCategory.DOT if effect.value_per_turn:
                    dot_damage += effect.value_per_turn
                    messages.append(
                        f"{combatant.name} takes {effect.value_per_turn} {effect.name} damage."
                    )
                case StatusEffectCategory.HOT if effect.value_per_turn:
                    hot_healing += effect.value_per_turn
                    messages.append(
                        f"{combatant.name} regenerates {effect.value_per_turn} health."
                    )
                case StatusEffectCategory.INCAPACITATION:
                    is_incapacitated = True
                    messages.append(
                        f"{combatant.name} is {effect.name.lower()} and cannot act!"
                    )
                case _:
                    pass

            effect.remaining_turns = max(0, effect.remaining_turns - 1)
            if effect.remaining_turns <= 0:
                expired.append(effect)

        for effect in expired:
            combatant.status_effects.remove(effect)
            messages.append(f"{combatant.name}'s {effect.name} has worn off.")

        died = False
        if dot_damage > 0:
            self._arena.damage(combatant_id, dot_damage)
            died = not self._arena.is_alive(combatant_id)
            if died and not self._arena.is_protagonist(combatant_id):
                messages.append(f"{combatant.name} succumbs to their wounds!")

        if hot_healing > 0 and not died:
            self._arena.heal(combatant_id, hot_healing)

        for message in messages:
            self._arena.log(message)

        if died and not self._arena.is_protagonist(combatant_id):
            self._arena.remove_dead_hostile(combatant_id)

        self._arena.check_combat_end()

        if dot_damage or hot_healing or expired or is_incapacitated:
            logger.debug(
                "Status effects processed",
                combatant=combatant.name,
                dot_damage=dot_damage,
                hot_healing=hot_healing,
                expired=[e.type.value for e in expired],
                incapacitated=is_incapacitated,
            )

        return StatusEffectTickResult(
            processed_effects=list(combatant.status_effects),
            dot_damage=dot_damage,
            hot_healing=hot_healing,
            expired_effects=expired,
            is_incapacitated=is_incapacitated,
            messages=messages,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_status_effects(self, combatant_id: str) -> list[StatusEffect]:
        """Get a copy of a combatant's active effects."""
        combatant = self._arena.get_combatant(combatant_id)
        return list(combatant.status_effects) if combatant is not None else []

    def has_status_effect(self, combatant_id: str, effect_type: StatusEffectType) -> bool:
        """Check whether a combatant has an active effect of a type."""
        combatant = self._arena.get_combatant(combatant_id)
        return combatant is not None and combatant.find_effect(effect_type) is not None

    def is_incapacitated(self, combatant_id: str) -> bool:
        """Check whether a combatant holds any incapacitating effect."""
        return any(
            effect.category is StatusEffectCategory.INCAPACITATION
            for effect in self.get_status_effects(combatant_id)
        )

    def get_effective_attack_modifier(self, combatant_id: str) -> int:
        """Sum the percent modifiers that affect outgoing attack power.

        Args:
            combatant_id: The attacking combatant.

        Returns:
            Additive percent modifier from WEAKEN and STRENGTHEN.
        """
        modifier = 0
        for effect in self.get_status_effects(combatant_id):
            if effect.type in (StatusEffectType.WEAKEN, StatusEffectType.STRENGTHEN):
                modifier += effect.percent_modifier or 0
        return modifier

    def get_damage_received_modifier(self, combatant_id: str) -> float:
        """Compute the multiplier applied to damage a combatant takes.

        Args:
            combatant_id: The defending combatant.

        Returns:
            1.0 adjusted by VULNERABLE and FORTIFY, floored at the
            configured minimum.
        """
        modifier = 1.0
        for effect in self.get_status_effects(combatant_id):
            if effect.type is StatusEffectType.VULNERABLE:
                modifier += (effect.percent_modifier or 0) / 100
            elif effect.type is StatusEffectType.FORTIFY:
                modifier -= (effect.percent_modifier or 0) / 100
        return max(self._arena.settings.min_damage_received_modifier, modifier)


__all__ = [
    "ApplyEffectResult",
    "StatusEffectTickResult",
    "StatusEffectEngine",
]
