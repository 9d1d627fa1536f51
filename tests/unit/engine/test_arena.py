"""Tests for the combat arena."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dungeon_combat.core.config import CombatSettings
from dungeon_combat.core.exceptions import (
    InvalidGameStateError,
    UnknownCombatantError,
    ValidationError,
)
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.models.combat import CombatStatus
from dungeon_combat.models.effects import StatusEffectType
from dungeon_combat.models.entities import HostileEntity, Protagonist


class TestArenaSetup:
    """Tests for arena construction."""

    def test_combatants_projected(self, arena: CombatArena) -> None:
        """Test the protagonist and hostiles are projected as combatants."""
        hero = arena.get_combatant("hero")
        goblin = arena.get_combatant("goblin-1")

        assert hero is not None and hero.is_player
        assert hero.health == 120
        assert hero.defense == 10
        assert goblin is not None and not goblin.is_player
        assert goblin.speed == 10

    def test_hostiles_are_cloned(self, arena: CombatArena, goblin: HostileEntity) -> None:
        """Test damage in the arena never touches the caller's roster."""
        arena.damage("goblin-1", 4)

        assert arena.hostiles["goblin-1"].health == 6
        assert goblin.health == 10

    def test_protagonist_engaged(self, arena: CombatArena, hero: Protagonist) -> None:
        """Test the arena engages the protagonist it was given."""
        assert arena.protagonist is hero
        assert hero.in_combat

    def test_second_arena_rejected(
        self,
        arena: CombatArena,
        hero: Protagonist,
        rng: SeededRNG,
    ) -> None:
        """Test an engaged protagonist cannot join a second encounter."""
        with pytest.raises(InvalidGameStateError):
            CombatArena(hero, [], rng=rng)

    def test_duplicate_hostile_ids(
        self,
        hero: Protagonist,
        make_hostile: Callable[..., HostileEntity],
        rng: SeededRNG,
    ) -> None:
        """Test two hostiles with the same id are rejected."""
        with pytest.raises(ValidationError):
            CombatArena(hero, [make_hostile(), make_hostile()], rng=rng)
        assert not hero.in_combat

    def test_hostile_sharing_protagonist_id(
        self,
        hero: Protagonist,
        make_hostile: Callable[..., HostileEntity],
        rng: SeededRNG,
    ) -> None:
        """Test a hostile may not reuse the protagonist's id."""
        with pytest.raises(ValidationError):
            CombatArena(hero, [make_hostile(id="hero")], rng=rng)

    def test_defeated_hostiles_skipped(
        self,
        hero: Protagonist,
        make_hostile: Callable[..., HostileEntity],
        rng: SeededRNG,
    ) -> None:
        """Test hostiles supplied without health never enter the encounter."""
        arena = CombatArena(
            hero,
            [make_hostile(id="corpse", health=0, max_health=10), make_hostile()],
            rng=rng,
        )

        assert list(arena.hostiles) == ["goblin-1"]
        assert set(arena.state.combatants) == {"hero", "goblin-1"}
        assert arena.get_combatant("corpse") is None

    def test_default_settings(
        self,
        hero: Protagonist,
        rng: SeededRNG,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the arena falls back to the application settings."""
        monkeypatch.setenv("DUNGEON_COMBAT_COMBAT_FLEE_CHANCE", "5")

        arena = CombatArena(hero, [], rng=rng)

        assert isinstance(arena.settings, CombatSettings)
        assert arena.settings.flee_chance == 5


class TestArenaHealth:
    """Tests for damage and healing bookkeeping."""

    def test_damage_floors_at_zero(self, arena: CombatArena) -> None:
        """Test overkill damage reports only health actually lost."""
        dealt = arena.damage("goblin-1", 25)

        assert dealt == 10
        assert not arena.is_alive("goblin-1")
        assert arena.get_combatant("goblin-1").health == 0  # type: ignore[union-attr]

    def test_damage_protagonist(self, arena: CombatArena, hero: Protagonist) -> None:
        """Test protagonist damage flows into the projection."""
        arena.damage("hero", 30)

        assert hero.health == 90
        assert arena.get_combatant("hero").health == 90  # type: ignore[union-attr]

    def test_heal_capped(self, arena: CombatArena) -> None:
        """Test healing stops at max health."""
        arena.damage("goblin-1", 3)

        assert arena.heal("goblin-1", 10) == 3
        assert arena.hostiles["goblin-1"].health == 10

    def test_refresh_keeps_effect_list(self, arena: CombatArena) -> None:
        """Test refreshing a combatant keeps the same live effect list."""
        combatant = arena.get_combatant("hero")
        assert combatant is not None
        effects = combatant.status_effects

        arena.protagonist.stats.defense = 20
        refreshed = arena.refresh("hero")

        assert refreshed is combatant
        assert refreshed.defense == 20
        assert refreshed.status_effects is effects

    def test_unknown_ids(self, arena: CombatArena) -> None:
        """Test unknown ids are ignored by damage, heal, and refresh."""
        assert arena.damage("ghost", 5) == 0
        assert arena.heal("ghost", 5) == 0
        assert arena.refresh("ghost") is None
        assert not arena.is_alive("ghost")


class TestArenaLookups:
    """Tests for lookups and identifiers."""

    def test_require_hostile(self, arena: CombatArena) -> None:
        """Test a living hostile is returned."""
        assert arena.require_hostile("goblin-1").name == "Goblin"

    def test_require_missing_hostile(self, arena: CombatArena) -> None:
        """Test a missing hostile raises with its id."""
        with pytest.raises(UnknownCombatantError, match="Enemy with ID ghost not found"):
            arena.require_hostile("ghost")

    def test_effect_ids_are_sequential(self, arena: CombatArena) -> None:
        """Test effect ids are deterministic per arena."""
        assert arena.next_effect_id("goblin-1", StatusEffectType.POISON) == "goblin-1:poison:1"
        assert arena.next_effect_id("hero", StatusEffectType.HASTE) == "hero:haste:2"


class TestCombatEnd:
    """Tests for terminal status detection."""

    def test_victory_when_roster_empty(self, arena: CombatArena, hero: Protagonist) -> None:
        """Test removing the last hostile ends in victory."""
        arena.damage("goblin-1", 10)
        arena.remove_dead_hostile("goblin-1")

        assert arena.check_combat_end() is CombatStatus.VICTORY
        assert arena.state.log[-1] == "VICTORY - All enemies defeated!"
        assert not hero.in_combat

    def test_defeat(self, arena: CombatArena) -> None:
        """Test a dead protagonist ends in defeat."""
        arena.damage("hero", 500)

        assert arena.check_combat_end() is CombatStatus.DEFEAT
        assert arena.state.log[-1] == "DEFEAT - You have been slain!"

    def test_defeat_checked_first(self, arena: CombatArena) -> None:
        """Test defeat wins when both sides fall together."""
        arena.damage("hero", 500)
        arena.remove_dead_hostile("goblin-1")

        assert arena.check_combat_end() is CombatStatus.DEFEAT

    def test_terminal_status_sticks(self, arena: CombatArena) -> None:
        """Test later checks never leave a terminal status."""
        arena.end(CombatStatus.FLED)
        arena.damage("hero", 500)

        assert arena.check_combat_end() is CombatStatus.FLED

    def test_in_progress(self, arena: CombatArena) -> None:
        """Test combat continues while both sides stand."""
        assert arena.check_combat_end() is CombatStatus.IN_PROGRESS
        assert arena.state.log == []
