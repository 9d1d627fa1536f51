"""Tests for attack and damage resolution."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dungeon_combat.core.exceptions import InvalidGameStateError, UnknownCombatantError
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.attacks import (
    AttackResolver,
    hostile_attack_bonus,
    hostile_damage_dice,
    protagonist_attack_bonus,
    scale_attack_power,
)
from dungeon_combat.engine.effects import StatusEffectEngine
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.models.combat import CombatStatus
from dungeon_combat.models.effects import StatusEffectType
from dungeon_combat.models.entities import HostileEntity, Protagonist


Build = Callable[..., tuple[CombatArena, StatusEffectEngine, AttackResolver]]


@pytest.fixture
def build(
    hero: Protagonist,
    make_hostile: Callable[..., HostileEntity],
    scripted_rng: Callable[..., SeededRNG],
) -> Build:
    """Provide a factory wiring an arena with scripted integer rolls."""

    def factory(
        ints: list[int], hostiles: list[HostileEntity] | None = None
    ) -> tuple[CombatArena, StatusEffectEngine, AttackResolver]:
        roster = hostiles if hostiles is not None else [make_hostile()]
        arena = CombatArena(hero, roster, rng=scripted_rng(ints=ints))
        effects = StatusEffectEngine(arena)
        return arena, effects, AttackResolver(arena, effects)

    return factory


class TestFormulas:
    """Tests for the attack formula helpers."""

    def test_protagonist_attack_bonus(self) -> None:
        """Test attack power and level both contribute."""
        assert protagonist_attack_bonus(14, 1) == 2
        assert protagonist_attack_bonus(14, 8) == 4

    def test_hostile_attack_bonus(self) -> None:
        """Test attack power and challenge rating both contribute."""
        assert hostile_attack_bonus(5, 0.25) == 1
        assert hostile_attack_bonus(12, 9) == 4

    @pytest.mark.parametrize(
        ("rating", "dice"),
        [
            (0, "1d4"),
            (0.5, "1d4"),
            (1, "1d6"),
            (3, "1d10"),
            (8, "2d6"),
            (16, "2d10"),
            (20, "2d12"),
        ],
    )
    def test_hostile_damage_dice(self, rating: float, dice: str) -> None:
        """Test challenge rating thresholds pick the damage dice."""
        assert hostile_damage_dice(rating) == dice

    def test_scale_attack_power(self) -> None:
        """Test percent scaling floors and never goes negative."""
        assert scale_attack_power(14, 0) == 14
        assert scale_attack_power(14, -25) == 10
        assert scale_attack_power(14, 25) == 17
        assert scale_attack_power(14, -150) == 0


class TestRollAttack:
    """Tests for the to-hit roll."""

    def test_natural_20_always_hits(self, build: Build) -> None:
        """Test a natural 20 hits any defense."""
        _, _, resolver = build([20])
        roll = resolver.roll_attack(0, 99)
        assert roll.is_hit
        assert roll.is_natural_20

    def test_natural_1_always_misses(self, build: Build) -> None:
        """Test a natural 1 misses regardless of bonus."""
        _, _, resolver = build([1])
        roll = resolver.roll_attack(50, 5)
        assert not roll.is_hit
        assert roll.is_natural_1

    def test_meets_defense(self, build: Build) -> None:
        """Test a total equal to defense hits."""
        _, _, resolver = build([8])
        roll = resolver.roll_attack(2, 10)
        assert roll.total == 10
        assert roll.is_hit


class TestCalculateDamage:
    """Tests for damage calculation."""

    def test_normal_hit(self, build: Build) -> None:
        """Test dice plus half attack power minus half defense."""
        _, _, resolver = build([6, 50])

        damage = resolver.calculate_damage(14, "1d8", 8, 15, 1.75, False)

        assert damage.weapon_roll == 6
        assert damage.base_damage == 13
        assert damage.crit_roll == 50
        assert not damage.is_critical
        assert damage.damage_reduction == 4
        assert damage.final_damage == 9

    def test_crit_roll(self, build: Build) -> None:
        """Test a low d100 roll confirms a critical hit."""
        _, _, resolver = build([6, 15])

        damage = resolver.calculate_damage(14, "1d8", 8, 15, 1.75, False)

        assert damage.is_critical
        assert damage.base_damage == 22
        assert damage.final_damage == 18

    def test_natural_20_skips_crit_roll(self, build: Build) -> None:
        """Test a natural 20 is critical without a d100 draw."""
        _, _, resolver = build([8])

        damage = resolver.calculate_damage(14, "1d8", 8, 0, 1.75, True)

        assert damage.crit_roll is None
        assert damage.is_critical
        assert damage.final_damage == 22

    def test_minimum_damage(self, build: Build) -> None:
        """Test a hit always deals at least one damage."""
        _, _, resolver = build([1, 99])

        damage = resolver.calculate_damage(0, "1d4", 40, 0, 1.5, False)

        assert damage.final_damage == 1

    def test_unarmed_dice(self, build: Build) -> None:
        """Test missing weapon dice fall back to the unarmed die."""
        _, _, resolver = build([4, 99])

        damage = resolver.calculate_damage(0, None, 0, 0, 1.5, False)

        assert damage.weapon_roll == 4


class TestPlayerAttack:
    """Tests for protagonist basic attacks."""

    def test_hit(self, build: Build) -> None:
        """Test a normal hit damages the hostile and is logged."""
        arena, _, resolver = build([15, 6, 50])

        result = resolver.player_attack("goblin-1")

        assert result.attack_roll.total == 17
        assert result.damage is not None
        assert result.damage.final_damage == 9
        assert not result.defender_died
        assert result.defender.health == 1
        assert arena.hostiles["goblin-1"].health == 1
        assert arena.state.log == ["Test Hero hits Goblin for 9 damage."]

    def test_critical_kill(self, build: Build, hero: Protagonist) -> None:
        """Test a natural 20 kill removes the hostile and wins the fight."""
        arena, _, resolver = build([20, 8])

        result = resolver.player_attack("goblin-1")

        assert result.defender_died
        assert result.defender.health == 0
        assert result.damage is not None and result.damage.final_damage == 22
        assert arena.state.log == [
            "Test Hero CRITICALLY hits Goblin for 22 damage!",
            "Goblin is defeated!",
            "VICTORY - All enemies defeated!",
        ]
        assert arena.state.status is CombatStatus.VICTORY
        assert "goblin-1" not in arena.hostiles
        assert not hero.in_combat

    def test_critical_miss(self, build: Build) -> None:
        """Test a natural 1 is logged as a critical miss."""
        arena, _, resolver = build([1])

        result = resolver.player_attack("goblin-1")

        assert result.damage is None
        assert arena.state.log == ["Test Hero critically misses Goblin!"]

    def test_miss(self, build: Build) -> None:
        """Test a low total misses."""
        arena, _, resolver = build([3])

        resolver.player_attack("goblin-1")

        assert arena.state.log == ["Test Hero misses Goblin."]
        assert arena.hostiles["goblin-1"].health == 10

    def test_weakened_attacker(
        self,
        build: Build,
        make_hostile: Callable[..., HostileEntity],
    ) -> None:
        """Test weaken scales damage but not the to-hit bonus."""
        arena, effects, resolver = build([15, 6, 50], [make_hostile(health=30)])
        effects.apply_status_effect("hero", StatusEffectType.WEAKEN, 2)

        result = resolver.player_attack("goblin-1")

        assert result.attack_roll.attack_bonus == 2
        assert result.damage is not None and result.damage.final_damage == 7

    def test_vulnerable_defender(
        self,
        build: Build,
        make_hostile: Callable[..., HostileEntity],
    ) -> None:
        """Test vulnerability increases damage taken."""
        arena, effects, resolver = build([15, 6, 50], [make_hostile(health=30)])
        effects.apply_status_effect("goblin-1", StatusEffectType.VULNERABLE, 2)

        result = resolver.player_attack("goblin-1")

        assert result.damage is not None and result.damage.final_damage == 11
        assert arena.hostiles["goblin-1"].health == 19

    def test_hit_breaks_sleep(
        self,
        build: Build,
        make_hostile: Callable[..., HostileEntity],
    ) -> None:
        """Test a hit wakes a sleeping hostile."""
        arena, effects, resolver = build([15, 6, 50], [make_hostile(health=30)])
        effects.apply_status_effect("goblin-1", StatusEffectType.SLEEP, 3)

        resolver.player_attack("goblin-1")

        assert not effects.has_status_effect("goblin-1", StatusEffectType.SLEEP)
        assert "Goblin wakes up from the damage!" in arena.state.log

    def test_unknown_target(self, build: Build) -> None:
        """Test attacking a missing hostile raises."""
        _, _, resolver = build([15])
        with pytest.raises(UnknownCombatantError):
            resolver.player_attack("ghost")

    def test_after_combat_ended(self, build: Build) -> None:
        """Test attacking after a terminal status raises."""
        arena, _, resolver = build([15])
        arena.end(CombatStatus.FLED)

        with pytest.raises(InvalidGameStateError):
            resolver.player_attack("goblin-1")


class TestEnemyAttack:
    """Tests for hostile basic attacks."""

    def test_hit_minimum_damage(self, build: Build, hero: Protagonist) -> None:
        """Test a weak hostile still deals one damage on a hit."""
        arena, _, resolver = build([12, 3, 50])

        result = resolver.enemy_attack("goblin-1")

        assert result.attack_roll.attack_bonus == 1
        assert result.damage is not None and result.damage.final_damage == 1
        assert hero.health == 119
        assert arena.state.log == ["Goblin hits Test Hero for 1 damage."]

    def test_critical_hit(self, build: Build, hero: Protagonist) -> None:
        """Test hostile crits use the configured multiplier."""
        arena, _, resolver = build([20, 4])

        result = resolver.enemy_attack("goblin-1")

        assert result.damage is not None and result.damage.final_damage == 4
        assert hero.health == 116
        assert arena.state.log == ["Goblin CRITICALLY hits Test Hero for 4 damage!"]

    def test_miss(self, build: Build, hero: Protagonist) -> None:
        """Test a total below the protagonist's defense misses."""
        arena, _, resolver = build([8])

        result = resolver.enemy_attack("goblin-1")

        assert result.damage is None
        assert hero.health == 120
        assert arena.state.log == ["Goblin misses Test Hero."]

    def test_kills_protagonist(self, build: Build, hero: Protagonist) -> None:
        """Test a killing blow defeats the protagonist."""
        arena, _, resolver = build([12, 3, 50])
        arena.damage("hero", 119)

        result = resolver.enemy_attack("goblin-1")

        assert result.defender_died
        assert arena.state.log[-2:] == [
            "Test Hero has fallen!",
            "DEFEAT - You have been slain!",
        ]
        assert arena.state.status is CombatStatus.DEFEAT
        assert not hero.in_combat

    def test_unknown_attacker(self, build: Build) -> None:
        """Test a missing attacker raises."""
        _, _, resolver = build([12])
        with pytest.raises(UnknownCombatantError):
            resolver.enemy_attack("ghost")
