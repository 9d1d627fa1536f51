"""Rule constants for the dungeon combat engine.

This module defines the fixed numbers of the combat rules: dice sizes,
attack and damage divisors, status effect magnitudes, and the challenge
rating table used to pick hostile damage dice. Tunable values live in
the settings layer instead.
"""

from __future__ import annotations

# =============================================================================
# Dice
# =============================================================================

D20_SIDES = 20
"""Sides on the attack die."""

NATURAL_CRITICAL = 20
"""Natural d20 result that always hits."""

NATURAL_FUMBLE = 1
"""Natural d20 result that always misses."""

PERCENTILE_SIDES = 100
"""Sides on the percentile die used for crit and flee checks."""

DICE_NOTATION_PATTERN = r"^\s*(\d*)\s*[dD]\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$"
"""Accepted dice notation: NdS with an optional +M / -M modifier."""

# =============================================================================
# Attack & Damage Formulas
# =============================================================================

ATTACK_POWER_BONUS_DIVISOR = 5
"""Attack bonus gains +1 per this much attack power."""

RANK_BONUS_DIVISOR = 4
"""Attack bonus gains +1 per this many levels (protagonist) or CR (hostile)."""

DAMAGE_POWER_DIVISOR = 2
"""Base damage gains +1 per this much attack power."""

DEFENSE_REDUCTION_DIVISOR = 2
"""Damage is reduced by 1 per this much target defense."""

MIN_HIT_DAMAGE = 1
"""A confirmed hit never deals less than this."""

# =============================================================================
# Status Effect Magnitudes
# =============================================================================

POISON_MAX_HEALTH_FRACTION = 0.05
"""Poison ticks for this fraction of the target's max health."""

MIN_POISON_DAMAGE = 1
"""Poison always ticks for at least this much."""

BURN_BASE_DAMAGE = 3
"""Burn damage before source level scaling."""

BURN_DAMAGE_PER_LEVEL = 2
"""Additional burn damage per source level."""

BLEED_DAMAGE = 5
"""Flat bleed damage per tick."""

REGENERATION_BASE_HEALING = 5
"""Regeneration healing before source level scaling."""

REGENERATION_LEVEL_DIVISOR = 2
"""Regeneration gains +1 healing per this many source levels."""

# =============================================================================
# Hostile Damage Dice
# =============================================================================

HOSTILE_DAMAGE_DICE: tuple[tuple[float, str], ...] = (
    (0.5, "1d4"),
    (1, "1d6"),
    (2, "1d8"),
    (4, "1d10"),
    (8, "2d6"),
    (12, "2d8"),
    (16, "2d10"),
)
"""Ascending (max challenge rating, dice) thresholds for hostile damage."""

HOSTILE_DAMAGE_DICE_CAP = "2d12"
"""Damage dice for hostiles above every threshold."""


__all__ = [
    # Dice
    "D20_SIDES",
    "NATURAL_CRITICAL",
    "NATURAL_FUMBLE",
    "PERCENTILE_SIDES",
    "DICE_NOTATION_PATTERN",
    # Formulas
    "ATTACK_POWER_BONUS_DIVISOR",
    "RANK_BONUS_DIVISOR",
    "DAMAGE_POWER_DIVISOR",
    "DEFENSE_REDUCTION_DIVISOR",
    "MIN_HIT_DAMAGE",
    # Status effects
    "POISON_MAX_HEALTH_FRACTION",
    "MIN_POISON_DAMAGE",
    "BURN_BASE_DAMAGE",
    "BURN_DAMAGE_PER_LEVEL",
    "BLEED_DAMAGE",
    "REGENERATION_BASE_HEALING",
    "REGENERATION_LEVEL_DIVISOR",
    # Hostile dice
    "HOSTILE_DAMAGE_DICE",
    "HOSTILE_DAMAGE_DICE_CAP",
]
