"""Ability resolution.

This module resolves protagonist abilities. Each use is validated first
(cooldown, mana, and a living target for targeted archetypes); a failed
validation changes nothing and is reported as an unsuccessful result.
A valid use spends mana and starts the cooldown, then dispatches on the
ability's archetype.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import assert_never

from dungeon_combat.core.constants import MIN_HIT_DAMAGE
from dungeon_combat.core.exceptions import InvalidGameStateError
from dungeon_combat.core.logging import get_logger
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.attacks import scale_attack_power
from dungeon_combat.engine.effects import StatusEffectEngine
from dungeon_combat.models.combat import CombatStatus
from dungeon_combat.models.effects import StatusEffectType
from dungeon_combat.models.entities import Ability, HostileEntity
from dungeon_combat.models.enums import AbilityArchetype, StatName


logger = get_logger(__name__)


@dataclass(frozen=True)
class AbilityResult:
    """Outcome of an ability use.

    Attributes:
        ability_name: Name of the ability, or 'Unknown' if it was not found.
        success: Whether the ability resolved.
        message: Human-readable summary or failure reason.
        damage: Total damage dealt, if any.
        healing: Total healing done, if any.
        effect_applied: Effect tag applied, if any.
        enemies_killed: Ids of hostiles killed by the ability.
        is_aoe: Whether the ability hit every hostile.
    """

    ability_name: str
    success: bool
    message: str
    damage: int | None = None
    healing: int | None = None
    effect_applied: str | None = None
    enemies_killed: list[str] = field(default_factory=list)
    is_aoe: bool = False


class AbilityResolver:
    """Validate and resolve protagonist abilities within an arena."""

    def __init__(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Initialize the resolver.

        Args:
            arena: The encounter being resolved.
            effects: Status effect engine for modifiers, stun, and sleep.
        """
        self._arena = arena
        self._effects = effects

    def use_ability(self, ability_id: str, target_id: str | None = None) -> AbilityResult:
        """Use one of the protagonist's abilities.

        Args:
            ability_id: The ability to use.
            target_id: Hostile target for targeted abilities.

        Returns:
            AbilityResult describing the outcome.

        Raises:
            InvalidGameStateError: If combat has already ended.
        """
        arena = self._arena
        status = arena.state.status
        if status.is_terminal:
            raise InvalidGameStateError(
                "Cannot use an ability after combat has ended",
                current_state=status.value,
                expected_states=[CombatStatus.IN_PROGRESS.value],
            )

        protagonist = arena.protagonist
        ability = protagonist.get_ability(ability_id)
        if ability is None:
            return AbilityResult(ability_name="Unknown", success=False, message="Ability not found")

        if ability.current_cooldown > 0:
            return AbilityResult(
                ability_name=ability.name,
                success=False,
                message=(
                    f"{ability.name} is on cooldown "
                    f"({ability.current_cooldown} turns remaining)"
                ),
            )

        if protagonist.mana < ability.mana_cost:
            return AbilityResult(
                ability_name=ability.name,
                success=False,
                message=(
                    f"Not enough mana for {ability.name} "
                    f"(need {ability.mana_cost}, have {protagonist.mana})"
                ),
            )

        archetype = ability.archetype
        target: HostileEntity | None = None
        if archetype.requires_target:
            target = arena.hostiles.get(target_id) if target_id is not None else None
            if target is None:
                return AbilityResult(
                    ability_name=ability.name,
                    success=False,
                    message="Target not found",
                )

        protagonist.use_mana(ability.mana_cost)
        ability.current_cooldown = ability.cooldown

        match archetype:
            case AbilityArchetype.SELF_HEAL:
                result = self._self_heal(ability)
            case AbilityArchetype.ATTACK_BUFF:
                result = self._attack_buff(ability)
            case AbilityArchetype.FULL_RESTORE:
                result = self._full_restore(ability)
            case AbilityArchetype.INVULNERABILITY:
                result = self._invulnerability(ability)
            case AbilityArchetype.AOE_DAMAGE:
                result = self._aoe_damage(ability)
            case AbilityArchetype.DRAIN:
                assert target is not None
                result = self._drain(ability, target)
            case AbilityArchetype.SINGLE_TARGET:
                assert target is not None
                result = self._single_target(ability, target)
            case AbilityArchetype.FALLBACK:
                result = self._fallback(ability)
            case _:
                assert_never(archetype)

        arena.refresh(protagonist.id)
        logger.info(
            "Ability used",
            ability=ability.id,
            archetype=archetype.value,
            target=target.name if target is not None else None,
            damage=result.damage,
            healing=result.healing,
            killed=result.enemies_killed,
        )
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _scaled_basic_damage(self) -> int:
        protagonist = self._arena.protagonist
        basic = protagonist.basic_attack(self._arena.rng)
        return scale_attack_power(
            basic["damage"],
            self._effects.get_effective_attack_modifier(protagonist.id),
        )

    def _strike(self, target: HostileEntity, amount: int) -> int:
        """Apply ability damage to a hostile, returning the damage dealt."""
        modifier = self._effects.get_damage_received_modifier(target.id)
        final_damage = max(MIN_HIT_DAMAGE, math.floor(amount * modifier))
        self._effects.break_sleep(target.id)
        self._arena.damage(target.id, final_damage)
        return final_damage

    def _defeat(self, target: HostileEntity, killed: list[str]) -> None:
        killed.append(target.id)
        self._arena.log(f"{target.name} is defeated!")

    # -------------------------------------------------------------------------
    # Archetypes
    # -------------------------------------------------------------------------

    def _self_heal(self, ability: Ability) -> AbilityResult:
        protagonist = self._arena.protagonist
        amount = math.floor(protagonist.get_max_health() * (ability.healing or 0))
        healed = protagonist.heal(amount)
        message = f"{protagonist.name} uses {ability.name} and heals for {healed} HP!"
        self._arena.log(message)
        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=message,
            healing=healed,
        )

    def _attack_buff(self, ability: Ability) -> AbilityResult:
        protagonist = self._arena.protagonist
        settings = self._arena.settings
        bonus = math.floor(protagonist.stats.attack * settings.attack_buff_fraction)
        duration = settings.attack_buff_duration
        protagonist.apply_buff(ability.name, {StatName.ATTACK: bonus}, duration)
        message = (
            f"{protagonist.name} uses {ability.name}, "
            f"increasing attack by {bonus} for {duration} turns!"
        )
        self._arena.log(message)
        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=message,
            effect_applied="attack_buff",
        )

    def _full_restore(self, ability: Ability) -> AbilityResult:
        protagonist = self._arena.protagonist
        healed = protagonist.full_restore()
        message = (
            f"{protagonist.name} uses {ability.name}! "
            "Fully restored health, mana, and cooldowns!"
        )
        self._arena.log(message)
        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=message,
            healing=healed,
            effect_applied="full_restore",
        )

    def _invulnerability(self, ability: Ability) -> AbilityResult:
        protagonist = self._arena.protagonist
        settings = self._arena.settings
        protagonist.apply_buff(
            ability.name,
            {StatName.DEFENSE: settings.invulnerability_defense_bonus},
            settings.invulnerability_duration,
        )
        message = f"{protagonist.name} uses {ability.name} and becomes temporarily invulnerable!"
        self._arena.log(message)
        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=message,
            effect_applied=ability.effect,
        )

    def _aoe_damage(self, ability: Ability) -> AbilityResult:
        arena = self._arena
        multiplier = ability.damage or arena.settings.aoe_basic_attack_fraction
        ability_damage = math.floor(self._scaled_basic_damage() * multiplier)

        killed: list[str] = []
        total_damage = 0
        for hostile in [h for h in arena.hostiles.values() if h.health > 0]:
            dealt = self._strike(hostile, ability_damage)
            total_damage += dealt
            arena.log(f"{ability.name} hits {hostile.name} for {dealt} damage!")
            if hostile.health <= 0:
                self._defeat(hostile, killed)

        for hostile_id in killed:
            arena.remove_dead_hostile(hostile_id)
        arena.check_combat_end()

        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=(
                f"{arena.protagonist.name} uses {ability.name}, "
                f"dealing {total_damage} total damage to all enemies!"
            ),
            damage=total_damage,
            enemies_killed=killed,
            is_aoe=True,
        )

    def _drain(self, ability: Ability, target: HostileEntity) -> AbilityResult:
        arena = self._arena
        protagonist = arena.protagonist
        dealt = self._strike(target, math.floor(ability.damage or 0))
        healed = protagonist.heal(math.floor(ability.healing or 0))

        arena.log(f"{ability.name} drains {target.name} for {dealt} damage!")
        arena.log(f"{protagonist.name} heals for {healed} HP!")

        killed: list[str] = []
        if target.health <= 0:
            self._defeat(target, killed)
            arena.remove_dead_hostile(target.id)
        arena.check_combat_end()

        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=(
                f"{protagonist.name} uses {ability.name}, "
                f"dealing {dealt} damage and healing for {healed}!"
            ),
            damage=dealt,
            healing=healed,
            enemies_killed=killed,
        )

    def _single_target(self, ability: Ability, target: HostileEntity) -> AbilityResult:
        arena = self._arena
        protagonist = arena.protagonist
        ability_damage = math.floor(self._scaled_basic_damage() * (ability.damage or 0))

        if ability.effect == "stun":
            self._effects.apply_status_effect(
                target.id,
                StatusEffectType.STUN,
                arena.settings.stun_duration,
                ability.name,
                protagonist.level,
            )
            arena.log(f"{target.name} is stunned!")

        dealt = self._strike(target, ability_damage)
        arena.log(f"{ability.name} hits {target.name} for {dealt} damage!")

        killed: list[str] = []
        if target.health <= 0:
            self._defeat(target, killed)
            arena.remove_dead_hostile(target.id)
        arena.check_combat_end()

        return AbilityResult(
            ability_name=ability.name,
            success=True,
            message=f"{protagonist.name} uses {ability.name} on {target.name} for {dealt} damage!",
            damage=dealt,
            effect_applied=ability.effect,
            enemies_killed=killed,
        )

    def _fallback(self, ability: Ability) -> AbilityResult:
        message = f"{self._arena.protagonist.name} uses {ability.name}!"
        self._arena.log(message)
        return AbilityResult(ability_name=ability.name, success=True, message=message)


__all__ = [
    "AbilityResult",
    "AbilityResolver",
]
