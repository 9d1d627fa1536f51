"""Attack and damage resolution.

This module resolves basic attacks in both directions: a d20 to-hit roll
against defense, weapon or challenge-rated damage dice, critical hits,
defense reduction, and the damage-received modifier from status effects.
A confirmed hit always deals at least one point of damage.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from dungeon_combat.core.constants import (
    ATTACK_POWER_BONUS_DIVISOR,
    DAMAGE_POWER_DIVISOR,
    DEFENSE_REDUCTION_DIVISOR,
    HOSTILE_DAMAGE_DICE,
    HOSTILE_DAMAGE_DICE_CAP,
    MIN_HIT_DAMAGE,
    NATURAL_CRITICAL,
    NATURAL_FUMBLE,
    RANK_BONUS_DIVISOR,
)
from dungeon_combat.core.exceptions import InvalidGameStateError
from dungeon_combat.core.logging import get_logger
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.effects import StatusEffectEngine
from dungeon_combat.models.combat import Combatant, CombatStatus


logger = get_logger(__name__)


@dataclass(frozen=True)
class AttackRollResult:
    """Result of a to-hit roll.

    Attributes:
        roll: The natural d20 result.
        attack_bonus: Bonus added to the roll.
        total: Roll plus bonus.
        target_defense: Defense the total was compared against.
        is_hit: Whether the attack hits.
        is_natural_20: Whether the d20 showed 20 (automatic hit).
        is_natural_1: Whether the d20 showed 1 (automatic miss).
    """

    roll: int
    attack_bonus: int
    total: int
    target_defense: int
    is_hit: bool
    is_natural_20: bool
    is_natural_1: bool


@dataclass(frozen=True)
class DamageResult:
    """Breakdown of a damage calculation.

    Attributes:
        weapon_roll: Total of the damage dice.
        base_damage: Damage before defense, after any critical multiplier.
        is_critical: Whether the hit was critical.
        crit_roll: The d100 crit check, or None when a natural 20 decided it.
        damage_reduction: Damage absorbed by defense.
        final_damage: Damage dealt, after every modifier.
    """

    weapon_roll: int
    base_damage: int
    is_critical: bool
    crit_roll: int | None
    damage_reduction: int
    final_damage: int


@dataclass(frozen=True)
class AttackResult:
    """Outcome of a basic attack.

    Attributes:
        attacker: Snapshot of the attacker after resolution.
        defender: Snapshot of the defender after resolution.
        attack_roll: The to-hit roll.
        damage: Damage breakdown, or None on a miss.
        defender_died: Whether the defender was reduced to 0 health.
    """

    attacker: Combatant
    defender: Combatant
    attack_roll: AttackRollResult
    damage: DamageResult | None
    defender_died: bool


def protagonist_attack_bonus(attack_power: int, level: int) -> int:
    """Compute the protagonist's to-hit bonus."""
    return attack_power // ATTACK_POWER_BONUS_DIVISOR + level // RANK_BONUS_DIVISOR


def hostile_attack_bonus(attack_power: int, challenge_rating: float) -> int:
    """Compute a hostile's to-hit bonus."""
    return attack_power // ATTACK_POWER_BONUS_DIVISOR + math.floor(
        challenge_rating / RANK_BONUS_DIVISOR
    )


def hostile_damage_dice(challenge_rating: float) -> str:
    """Pick a hostile's damage dice from its challenge rating.

    Args:
        challenge_rating: The hostile's challenge rating.

    Returns:
        Dice notation from the first threshold the rating does not exceed.
    """
    for max_rating, dice in HOSTILE_DAMAGE_DICE:
        if challenge_rating <= max_rating:
            return dice
    return HOSTILE_DAMAGE_DICE_CAP


def scale_attack_power(attack_power: int, percent_modifier: int) -> int:
    """Apply an additive percent modifier to attack power, floored at 0."""
    return max(0, math.floor(attack_power * (100 + percent_modifier) / 100))


class AttackResolver:
    """Resolve to-hit rolls, damage, and basic attacks within an arena."""

    def __init__(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Initialize the resolver.

        Args:
            arena: The encounter being resolved.
            effects: Status effect engine for modifiers and sleep.
        """
        self._arena = arena
        self._effects = effects

    def roll_attack(self, attack_bonus: int, target_defense: int) -> AttackRollResult:
        """Roll a d20 to hit.

        A natural 20 always hits and a natural 1 always misses; otherwise
        the attack hits when roll plus bonus meets the target's defense.

        Args:
            attack_bonus: The attacker's to-hit bonus.
            target_defense: The defender's defense.

        Returns:
            AttackRollResult for the roll.
        """
        roll = self._arena.dice.roll_d20()
        is_natural_20 = roll == NATURAL_CRITICAL
        is_natural_1 = roll == NATURAL_FUMBLE
        total = roll + attack_bonus
        is_hit = is_natural_20 or (not is_natural_1 and total >= target_defense)
        return AttackRollResult(
            roll=roll,
            attack_bonus=attack_bonus,
            total=total,
            target_defense=target_defense,
            is_hit=is_hit,
            is_natural_20=is_natural_20,
            is_natural_1=is_natural_1,
        )

    def calculate_damage(
        self,
        attack_power: int,
        weapon_dice: str | None,
        target_defense: int,
        crit_chance: float,
        crit_multiplier: float,
        is_natural_20: bool,
    ) -> DamageResult:
        """Roll and reduce damage for a confirmed hit.

        Args:
            attack_power: The attacker's attack power.
            weapon_dice: Damage dice, or None for the unarmed die.
            target_defense: The defender's defense.
            crit_chance: Percent chance of a critical hit.
            crit_multiplier: Damage multiplier on a critical hit.
            is_natural_20: Whether the to-hit roll was a natural 20.

        Returns:
            DamageResult with the full breakdown.
        """
        dice = weapon_dice or self._arena.settings.unarmed_damage_dice
        weapon_roll = self._arena.dice.roll(dice).total
        base_damage = weapon_roll + attack_power // DAMAGE_POWER_DIVISOR

        crit_roll: int | None = None
        if is_natural_20:
            is_critical = True
        else:
            crit_roll = self._arena.dice.roll_d100()
            is_critical = crit_roll <= crit_chance

        if is_critical:
            base_damage = math.floor(base_damage * crit_multiplier)

        damage_reduction = target_defense // DEFENSE_REDUCTION_DIVISOR
        final_damage = max(MIN_HIT_DAMAGE, base_damage - damage_reduction)
        return DamageResult(
            weapon_roll=weapon_roll,
            base_damage=base_damage,
            is_critical=is_critical,
            crit_roll=crit_roll,
            damage_reduction=damage_reduction,
            final_damage=final_damage,
        )

    def _ensure_in_progress(self, action: str) -> None:
        status = self._arena.state.status
        if status.is_terminal:
            raise InvalidGameStateError(
                f"Cannot {action} after combat has ended",
                current_state=status.value,
                expected_states=[CombatStatus.IN_PROGRESS.value],
            )

    def _apply_received_modifier(self, damage: DamageResult, defender_id: str) -> DamageResult:
        modifier = self._effects.get_damage_received_modifier(defender_id)
        final_damage = max(MIN_HIT_DAMAGE, math.floor(damage.final_damage * modifier))
        return replace(damage, final_damage=final_damage)

    def _log_outcome(
        self,
        attacker_name: str,
        defender_name: str,
        roll: AttackRollResult,
        damage: DamageResult | None,
    ) -> None:
        if damage is not None:
            if damage.is_critical:
                self._arena.log(
                    f"{attacker_name} CRITICALLY hits {defender_name} "
                    f"for {damage.final_damage} damage!"
                )
            else:
                self._arena.log(
                    f"{attacker_name} hits {defender_name} for {damage.final_damage} damage."
                )
        elif roll.is_natural_1:
            self._arena.log(f"{attacker_name} critically misses {defender_name}!")
        else:
            self._arena.log(f"{attacker_name} misses {defender_name}.")

    def player_attack(self, target_id: str) -> AttackResult:
        """Resolve a protagonist basic attack against a hostile.

        Args:
            target_id: The hostile being attacked.

        Returns:
            AttackResult for the attack.

        Raises:
            InvalidGameStateError: If combat has already ended.
            UnknownCombatantError: If the hostile is not in the encounter.
        """
        self._ensure_in_progress("attack")
        arena = self._arena
        protagonist = arena.protagonist
        target = arena.require_hostile(target_id)

        attack_power = protagonist.get_attack_power()
        roll = self.roll_attack(
            protagonist_attack_bonus(attack_power, protagonist.level),
            target.defense,
        )

        damage: DamageResult | None = None
        defender_died = False
        if roll.is_hit:
            scaled_power = scale_attack_power(
                attack_power,
                self._effects.get_effective_attack_modifier(protagonist.id),
            )
            damage = self.calculate_damage(
                scaled_power,
                protagonist.weapon_dice,
                target.defense,
                protagonist.get_crit_chance(),
                protagonist.get_crit_multiplier(),
                roll.is_natural_20,
            )
            damage = self._apply_received_modifier(damage, target.id)
            self._effects.break_sleep(target.id)
            arena.damage(target.id, damage.final_damage)
            defender_died = target.health <= 0

        defender_snapshot = arena.state.combatants[target.id].model_copy(deep=True)
        self._log_outcome(protagonist.name, target.name, roll, damage)
        if defender_died:
            arena.log(f"{target.name} is defeated!")
            arena.remove_dead_hostile(target.id)

        arena.check_combat_end()
        logger.info(
            "Player attack resolved",
            target=target.name,
            roll=roll.roll,
            hit=roll.is_hit,
            damage=damage.final_damage if damage else 0,
            critical=damage.is_critical if damage else False,
            killed=defender_died,
        )
        return AttackResult(
            attacker=arena.state.combatants[protagonist.id].model_copy(deep=True),
            defender=defender_snapshot,
            attack_roll=roll,
            damage=damage,
            defender_died=defender_died,
        )

    def enemy_attack(self, hostile_id: str) -> AttackResult:
        """Resolve a hostile basic attack against the protagonist.

        Args:
            hostile_id: The attacking hostile.

        Returns:
            AttackResult for the attack.

        Raises:
            InvalidGameStateError: If combat has already ended.
            UnknownCombatantError: If the hostile is not in the encounter.
        """
        self._ensure_in_progress("attack")
        arena = self._arena
        settings = arena.settings
        protagonist = arena.protagonist
        hostile = arena.require_hostile(hostile_id)

        defense = protagonist.get_defense()
        roll = self.roll_attack(
            hostile_attack_bonus(hostile.attack_power, hostile.challenge_rating),
            defense,
        )

        damage: DamageResult | None = None
        defender_died = False
        if roll.is_hit:
            scaled_power = scale_attack_power(
                hostile.attack_power,
                self._effects.get_effective_attack_modifier(hostile.id),
            )
            damage = self.calculate_damage(
                scaled_power,
                hostile_damage_dice(hostile.challenge_rating),
                defense,
                settings.hostile_crit_chance,
                settings.hostile_crit_multiplier,
                roll.is_natural_20,
            )
            damage = self._apply_received_modifier(damage, protagonist.id)
            self._effects.break_sleep(protagonist.id)
            arena.damage(protagonist.id, damage.final_damage)
            defender_died = not protagonist.is_alive()

        self._log_outcome(hostile.name, protagonist.name, roll, damage)
        if defender_died:
            arena.log(f"{protagonist.name} has fallen!")

        arena.check_combat_end()
        logger.info(
            "Enemy attack resolved",
            attacker=hostile.name,
            roll=roll.roll,
            hit=roll.is_hit,
            damage=damage.final_damage if damage else 0,
            critical=damage.is_critical if damage else False,
            protagonist_health=protagonist.health,
        )
        return AttackResult(
            attacker=arena.state.combatants[hostile.id].model_copy(deep=True),
            defender=arena.state.combatants[protagonist.id].model_copy(deep=True),
            attack_roll=roll,
            damage=damage,
            defender_died=defender_died,
        )


__all__ = [
    "AttackRollResult",
    "DamageResult",
    "AttackResult",
    "AttackResolver",
    "protagonist_attack_bonus",
    "hostile_attack_bonus",
    "hostile_damage_dice",
    "scale_attack_power",
]
