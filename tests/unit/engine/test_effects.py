"""Tests for the status effect engine."""

from __future__ import annotations

from dungeon_combat.core.config import CombatSettings
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.effects import StatusEffectEngine
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.models.combat import CombatStatus
from dungeon_combat.models.effects import StatusEffectCategory, StatusEffectType
from dungeon_combat.models.entities import HostileEntity, Protagonist


class TestApplyStatusEffect:
    """Tests for applying effects."""

    def test_new_effect(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Test a new effect is attached and announced."""
        result = effects.apply_status_effect("goblin-1", StatusEffectType.POISON, 3, "Spider")

        assert result.applied
        assert not result.refreshed
        assert result.message == "Goblin is afflicted with Poison!"
        assert result.effect is not None
        assert result.effect.id == "goblin-1:poison:1"
        assert result.effect.remaining_turns == 3
        assert result.effect.source == "Spider"
        assert arena.state.log == ["Goblin is afflicted with Poison!"]

    def test_poison_scales_with_max_health(self, effects: StatusEffectEngine) -> None:
        """Test poison deals 5% of max health, at least 1."""
        on_goblin = effects.apply_status_effect("goblin-1", StatusEffectType.POISON, 3)
        on_hero = effects.apply_status_effect("hero", StatusEffectType.POISON, 3)

        assert on_goblin.effect.value_per_turn == 1  # type: ignore[union-attr]
        assert on_hero.effect.value_per_turn == 6  # type: ignore[union-attr]

    def test_level_scaled_values(self, effects: StatusEffectEngine) -> None:
        """Test burn and regeneration scale with the source level."""
        burn = effects.apply_status_effect("goblin-1", StatusEffectType.BURN, 2, source_level=5)
        bleed = effects.apply_status_effect("goblin-1", StatusEffectType.BLEED, 2)
        regen = effects.apply_status_effect(
            "hero", StatusEffectType.REGENERATION, 2, source_level=4
        )

        assert burn.effect.value_per_turn == 13  # type: ignore[union-attr]
        assert bleed.effect.value_per_turn == 5  # type: ignore[union-attr]
        assert regen.effect.value_per_turn == 7  # type: ignore[union-attr]

    def test_value_override(self, effects: StatusEffectEngine) -> None:
        """Test an explicit value replaces the formula."""
        result = effects.apply_status_effect(
            "goblin-1", StatusEffectType.BURN, 2, value_override=40
        )
        assert result.effect.value_per_turn == 40  # type: ignore[union-attr]

    def test_modifier_effects(self, effects: StatusEffectEngine) -> None:
        """Test buffs and debuffs carry a percent modifier and no per-turn value."""
        result = effects.apply_status_effect("goblin-1", StatusEffectType.WEAKEN, 2)

        assert result.effect is not None
        assert result.effect.category is StatusEffectCategory.DEBUFF
        assert result.effect.percent_modifier == -25
        assert result.effect.value_per_turn is None

    def test_incapacitation_has_no_magnitude(self, effects: StatusEffectEngine) -> None:
        """Test incapacitating effects carry neither value nor modifier."""
        result = effects.apply_status_effect("goblin-1", StatusEffectType.STUN, 1)

        assert result.effect.value_per_turn is None  # type: ignore[union-attr]
        assert result.effect.percent_modifier is None  # type: ignore[union-attr]

    def test_unknown_target(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Test applying to a missing combatant does nothing."""
        result = effects.apply_status_effect("ghost", StatusEffectType.BURN, 2)

        assert not result.applied
        assert result.message == "Target not found"
        assert arena.state.log == []


class TestRefreshAndUpgrade:
    """Tests for reapplying an effect type already present."""

    def test_upgrade(self, effects: StatusEffectEngine) -> None:
        """Test a stronger reapplication raises the value and extends duration."""
        effects.apply_status_effect("goblin-1", StatusEffectType.BURN, 2, source_level=1)

        result = effects.apply_status_effect(
            "goblin-1", StatusEffectType.BURN, 4, source_level=3
        )

        assert result.refreshed
        assert result.upgraded
        assert result.message == "Goblin's Burn is upgraded and refreshed!"
        assert result.effect.value_per_turn == 9  # type: ignore[union-attr]
        assert result.effect.remaining_turns == 4  # type: ignore[union-attr]
        assert len(effects.get_status_effects("goblin-1")) == 1

    def test_weaker_refresh_keeps_value_and_duration(self, effects: StatusEffectEngine) -> None:
        """Test a weaker, shorter reapplication changes nothing but the log."""
        effects.apply_status_effect("goblin-1", StatusEffectType.BURN, 4, source_level=3)

        result = effects.apply_status_effect(
            "goblin-1", StatusEffectType.BURN, 1, source_level=1
        )

        assert result.refreshed
        assert not result.upgraded
        assert result.message == "Goblin's Burn duration refreshed."
        assert result.effect.value_per_turn == 9  # type: ignore[union-attr]
        assert result.effect.remaining_turns == 4  # type: ignore[union-attr]

    def test_refresh_keeps_instance_id(self, effects: StatusEffectEngine) -> None:
        """Test refreshing keeps the original effect instance."""
        first = effects.apply_status_effect("hero", StatusEffectType.HASTE, 1)
        second = effects.apply_status_effect("hero", StatusEffectType.HASTE, 3)

        assert second.effect is first.effect
        assert second.effect.remaining_turns == 3  # type: ignore[union-attr]


class TestRemoval:
    """Tests for removing effects."""

    def test_remove_by_id(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Test removing an effect instance by id."""
        applied = effects.apply_status_effect("goblin-1", StatusEffectType.POISON, 3)
        assert applied.effect is not None

        assert effects.remove_status_effect("goblin-1", applied.effect.id)
        assert arena.state.log[-1] == "Goblin's Poison has worn off."
        assert not effects.remove_status_effect("goblin-1", applied.effect.id)

    def test_remove_by_type(self, effects: StatusEffectEngine) -> None:
        """Test removing every effect of a type."""
        effects.apply_status_effect("goblin-1", StatusEffectType.SLOW, 3)
        effects.apply_status_effect("goblin-1", StatusEffectType.BLEED, 3)

        assert effects.remove_effects_by_type("goblin-1", StatusEffectType.SLOW) == 1
        assert effects.remove_effects_by_type("goblin-1", StatusEffectType.SLOW) == 0
        assert effects.has_status_effect("goblin-1", StatusEffectType.BLEED)

    def test_break_sleep(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Test a struck sleeper wakes up."""
        effects.apply_status_effect("goblin-1", StatusEffectType.SLEEP, 3)

        assert effects.break_sleep("goblin-1")
        assert arena.state.log[-1] == "Goblin wakes up from the damage!"
        assert not effects.is_incapacitated("goblin-1")
        assert not effects.break_sleep("goblin-1")


class TestProcessStatusEffects:
    """Tests for the per-turn tick."""

    def test_damage_over_time(self, arena: CombatArena, effects: StatusEffectEngine) -> None:
        """Test DOT damage is applied and the duration ticks down."""
        effects.apply_status_effect("goblin-1", StatusEffectType.BLEED, 2)

        result = effects.process_status_effects("goblin-1")

        assert result.dot_damage == 5
        assert result.messages == ["Goblin takes 5 Bleed damage."]
        assert arena.hostiles["goblin-1"].health == 5
        assert result.processed_effects[0].remaining_turns == 1

    def test_expiry(self, effects: StatusEffectEngine) -> None:
        """Test effects reaching zero turns are removed."""
        effects.apply_status_effect("hero", StatusEffectType.HASTE, 1)

        result = effects.process_status_effects("hero")

        assert [e.type for e in result.expired_effects] == [StatusEffectType.HASTE]
        assert result.messages == ["Test Hero's Haste has worn off."]
        assert effects.get_status_effects("hero") == []

    def test_dot_kill_removes_hostile(
        self,
        arena: CombatArena,
        effects: StatusEffectEngine,
        hero: Protagonist,
    ) -> None:
        """Test a hostile killed by DOT leaves the encounter."""
        arena.damage("goblin-1", 7)
        effects.apply_status_effect("goblin-1", StatusEffectType.BLEED, 1)

        result = effects.process_status_effects("goblin-1")

        assert result.messages == [
            "Goblin takes 5 Bleed damage.",
            "Goblin's Bleed has worn off.",
            "Goblin succumbs to their wounds!",
        ]
        assert "goblin-1" not in arena.hostiles
        assert arena.get_combatant("goblin-1") is None
        assert arena.state.status is CombatStatus.VICTORY
        assert not hero.in_combat

    def test_dot_kill_prevents_healing(
        self,
        arena: CombatArena,
        effects: StatusEffectEngine,
    ) -> None:
        """Test regeneration does not revive a combatant killed by DOT."""
        arena.damage("goblin-1", 7)
        effects.apply_status_effect("goblin-1", StatusEffectType.BLEED, 2)
        effects.apply_status_effect("goblin-1", StatusEffectType.REGENERATION, 2)

        result = effects.process_status_effects("goblin-1")

        assert result.dot_damage == 5
        assert result.hot_healing == 5
        assert "goblin-1" not in arena.hostiles

    def test_healing_over_time(
        self,
        arena: CombatArena,
        effects: StatusEffectEngine,
        hero: Protagonist,
    ) -> None:
        """Test HOT heals the protagonist."""
        arena.damage("hero", 20)
        effects.apply_status_effect("hero", StatusEffectType.REGENERATION, 3, source_level=4)

        result = effects.process_status_effects("hero")

        assert result.hot_healing == 7
        assert result.messages == ["Test Hero regenerates 7 health."]
        assert hero.health == 107

    def test_dot_kills_protagonist(
        self,
        arena: CombatArena,
        effects: StatusEffectEngine,
    ) -> None:
        """Test DOT can defeat the protagonist."""
        arena.damage("hero", 118)
        effects.apply_status_effect("hero", StatusEffectType.BLEED, 3)

        result = effects.process_status_effects("hero")

        assert "Test Hero succumbs to their wounds!" not in result.messages
        assert arena.state.status is CombatStatus.DEFEAT
        assert arena.state.log[-1] == "DEFEAT - You have been slain!"

    def test_incapacitation(self, effects: StatusEffectEngine) -> None:
        """Test stun makes the combatant lose its turn, then wears off."""
        effects.apply_status_effect("goblin-1", StatusEffectType.STUN, 1)

        result = effects.process_status_effects("goblin-1")

        assert result.is_incapacitated
        assert result.messages == [
            "Goblin is stunned and cannot act!",
            "Goblin's Stunned has worn off.",
        ]
        assert not effects.is_incapacitated("goblin-1")

    def test_unknown_combatant(self, effects: StatusEffectEngine) -> None:
        """Test ticking a missing combatant is a no-op."""
        result = effects.process_status_effects("ghost")
        assert result.messages == []
        assert result.dot_damage == 0


class TestModifiers:
    """Tests for derived attack and damage modifiers."""

    def test_attack_modifier(self, effects: StatusEffectEngine) -> None:
        """Test weaken and strengthen add together."""
        effects.apply_status_effect("goblin-1", StatusEffectType.WEAKEN, 2)
        assert effects.get_effective_attack_modifier("goblin-1") == -25

        effects.apply_status_effect("goblin-1", StatusEffectType.STRENGTHEN, 2)
        assert effects.get_effective_attack_modifier("goblin-1") == 0

    def test_unrelated_buffs_ignored(self, effects: StatusEffectEngine) -> None:
        """Test haste does not change attack power."""
        effects.apply_status_effect("hero", StatusEffectType.HASTE, 2)
        assert effects.get_effective_attack_modifier("hero") == 0

    def test_damage_received_modifier(self, effects: StatusEffectEngine) -> None:
        """Test vulnerable and fortify shift the multiplier."""
        assert effects.get_damage_received_modifier("goblin-1") == 1.0

        effects.apply_status_effect("goblin-1", StatusEffectType.VULNERABLE, 2)
        assert effects.get_damage_received_modifier("goblin-1") == 1.25

        effects.apply_status_effect("goblin-1", StatusEffectType.FORTIFY, 2)
        assert effects.get_damage_received_modifier("goblin-1") == 1.0

    def test_damage_received_floor(
        self,
        hero: Protagonist,
        goblin: HostileEntity,
        rng: SeededRNG,
    ) -> None:
        """Test the multiplier never drops below the configured minimum."""
        arena = CombatArena(
            hero,
            [goblin],
            rng=rng,
            settings=CombatSettings(min_damage_received_modifier=0.9),
        )
        engine = StatusEffectEngine(arena)
        engine.apply_status_effect("goblin-1", StatusEffectType.FORTIFY, 2)

        assert engine.get_damage_received_modifier("goblin-1") == 0.9
