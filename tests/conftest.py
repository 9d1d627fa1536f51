"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the dungeon combat test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import pytest

from dungeon_combat.core.config import CombatSettings
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.effects import StatusEffectEngine
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.models.entities import HostileEntity, Protagonist, create_fighter
from dungeon_combat.models.enums import HostileType


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dungeon_combat.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def combat_settings() -> CombatSettings:
    """Provide combat settings with the stock rule values.

    Returns:
        Default CombatSettings.
    """
    return CombatSettings()


# =============================================================================
# Random Source Fixtures
# =============================================================================


class ScriptedRNG(SeededRNG):
    """Seeded generator that returns scripted values first.

    Integer draws pop from ``ints`` and float draws pop from ``floats``;
    once a queue is empty the seeded stream takes over.
    """

    def __init__(
        self,
        ints: Iterable[int] = (),
        floats: Iterable[float] = (),
        seed: str = "scripted",
    ) -> None:
        super().__init__(seed)
        self.ints = list(ints)
        self.floats = list(floats)

    def next_int(self, min_value: int, max_value: int) -> int:
        if self.ints:
            return self.ints.pop(0)
        return super().next_int(min_value, max_value)

    def next_float(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return super().next_float()


@pytest.fixture
def rng() -> SeededRNG:
    """Provide a seeded random source.

    Returns:
        SeededRNG with a fixed test seed.
    """
    return SeededRNG("combat-test-seed")


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRNG]:
    """Provide a factory for generators with scripted rolls.

    Returns:
        Callable taking ``ints`` and ``floats`` sequences.
    """

    def factory(ints: Iterable[int] = (), floats: Iterable[float] = ()) -> ScriptedRNG:
        return ScriptedRNG(ints=ints, floats=floats)

    return factory


# =============================================================================
# Entity Fixtures
# =============================================================================


@pytest.fixture
def hero() -> Protagonist:
    """Provide a level 1 Fighter with a fixed id.

    Returns:
        Fighter Protagonist named 'Test Hero'.
    """
    return create_fighter("Test Hero", id="hero")


@pytest.fixture
def make_hostile() -> Callable[..., HostileEntity]:
    """Provide a factory for goblin-like hostiles.

    Returns:
        Callable accepting HostileEntity field overrides.
    """

    def factory(**overrides: Any) -> HostileEntity:
        data: dict[str, Any] = {
            "id": "goblin-1",
            "name": "Goblin",
            "health": 10,
            "max_health": 10,
            "attack_power": 5,
            "defense": 8,
            "experience": 50,
            "challenge_rating": 0.25,
            "type": HostileType.HUMANOID,
            "speed": 10,
        }
        data.update(overrides)
        if "max_health" not in overrides and "health" in overrides:
            data["max_health"] = max(1, overrides["health"])
        return HostileEntity(**data)

    return factory


@pytest.fixture
def goblin(make_hostile: Callable[..., HostileEntity]) -> HostileEntity:
    """Provide a single 10 HP goblin.

    Returns:
        HostileEntity with id 'goblin-1'.
    """
    return make_hostile()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def arena(
    hero: Protagonist,
    goblin: HostileEntity,
    rng: SeededRNG,
    combat_settings: CombatSettings,
) -> CombatArena:
    """Provide an arena holding the test hero and one goblin.

    Returns:
        CombatArena with the hero engaged.
    """
    return CombatArena(hero, [goblin], rng=rng, settings=combat_settings)


@pytest.fixture
def effects(arena: CombatArena) -> StatusEffectEngine:
    """Provide a status effect engine over the shared arena.

    Returns:
        StatusEffectEngine bound to ``arena``.
    """
    return StatusEffectEngine(arena)
