"""Dice rolling mechanics.

This module parses ``NdS[+/-M]`` dice notation and rolls it through the
session's seeded generator, one die at a time in order, so that rolls
are reproducible from the seed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dungeon_combat.core.constants import (
    D20_SIDES,
    DICE_NOTATION_PATTERN,
    NATURAL_CRITICAL,
    NATURAL_FUMBLE,
    PERCENTILE_SIDES,
)
from dungeon_combat.core.exceptions import DiceRollError
from dungeon_combat.core.logging import get_logger


if TYPE_CHECKING:
    from dungeon_combat.engine.rng import SeededRNG

logger = get_logger(__name__)

_NOTATION_RE = re.compile(DICE_NOTATION_PATTERN)


@dataclass(frozen=True)
class DiceNotation:
    """A parsed dice notation.

    Attributes:
        count: Number of dice.
        sides: Sides per die.
        modifier: Flat modifier added to the sum.
    """

    count: int
    sides: int
    modifier: int = 0

    @property
    def minimum(self) -> int:
        """Lowest possible total."""
        return self.count + self.modifier

    @property
    def maximum(self) -> int:
        """Highest possible total."""
        return self.count * self.sides + self.modifier

    @property
    def average(self) -> float:
        """Expected total."""
        return self.count * (self.sides + 1) / 2 + self.modifier

    def __str__(self) -> str:
        if self.modifier > 0:
            return f"{self.count}d{self.sides}+{self.modifier}"
        if self.modifier < 0:
            return f"{self.count}d{self.sides}{self.modifier}"
        return f"{self.count}d{self.sides}"


@dataclass(frozen=True)
class DiceExpression:
    """The result of rolling a dice expression.

    Attributes:
        expression: The original dice expression string.
        total: The total result of the roll.
        dice: Individual dice results, in roll order.
        modifier: Static modifier applied.
        is_critical: Whether a single d20 came up 20.
        is_fumble: Whether a single d20 came up 1.
    """

    expression: str
    total: int
    dice: list[int]
    modifier: int
    is_critical: bool
    is_fumble: bool


def parse_dice(notation: str) -> DiceNotation:
    """Parse dice notation such as '2d6+3' or 'd20'.

    Args:
        notation: The dice notation. A missing count means one die.

    Returns:
        The parsed DiceNotation.

    Raises:
        DiceRollError: If the notation is empty or malformed.
    """
    if not notation or not notation.strip():
        raise DiceRollError("Empty dice expression", expression=notation)

    match = _NOTATION_RE.match(notation)
    if match is None:
        raise DiceRollError("Invalid dice expression", expression=notation)

    count_str, sides_str, sign, modifier_str = match.groups()
    count = int(count_str) if count_str else 1
    sides = int(sides_str)
    if count < 1 or sides < 1:
        raise DiceRollError(
            "Dice count and sides must be positive",
            expression=notation,
        )

    modifier = int(modifier_str) if modifier_str else 0
    if sign == "-":
        modifier = -modifier
    return DiceNotation(count=count, sides=sides, modifier=modifier)


class DiceRoller:
    """Dice rolling backed by a seeded generator.

    Example:
        >>> roller = DiceRoller(SeededRNG("seed"))
        >>> result = roller.roll("2d6+3")
        >>> print(f"Total: {result.total}")
    """

    def __init__(self, rng: SeededRNG) -> None:
        """Initialize the dice roller.

        Args:
            rng: The generator every die is drawn from.
        """
        self._rng = rng

    def roll(self, expression: str) -> DiceExpression:
        """Roll dice according to the given expression.

        Args:
            expression: Dice expression (e.g., '1d20+5', '2d6+3').

        Returns:
            DiceExpression containing roll results.

        Raises:
            DiceRollError: If the expression is invalid.
        """
        notation = parse_dice(expression)
        dice = [self._rng.next_int(1, notation.sides) for _ in range(notation.count)]
        total = sum(dice) + notation.modifier

        is_single_d20 = notation.count == 1 and notation.sides == D20_SIDES
        result = DiceExpression(
            expression=expression,
            total=total,
            dice=dice,
            modifier=notation.modifier,
            is_critical=is_single_d20 and dice[0] == NATURAL_CRITICAL,
            is_fumble=is_single_d20 and dice[0] == NATURAL_FUMBLE,
        )

        logger.debug("Dice rolled", expression=expression, dice=dice, total=total)
        return result

    def roll_d20(self) -> int:
        """Roll a single d20.

        Returns:
            The natural result.
        """
        return self._rng.next_int(1, D20_SIDES)

    def roll_d100(self) -> int:
        """Roll a single percentile die.

        Returns:
            The natural result.
        """
        return self._rng.next_int(1, PERCENTILE_SIDES)


__all__ = [
    "DiceNotation",
    "DiceExpression",
    "DiceRoller",
    "parse_dice",
]
