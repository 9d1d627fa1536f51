"""Deterministic random number generation for combat.

This module provides a seedable Mulberry32 generator. Every random draw
in an encounter goes through one generator instance in a fixed call
order, so the same seed and the same sequence of actions always replay
to the same outcome.

Example:
    >>> rng = SeededRNG("crypt-of-ash")
    >>> rng.next_int(1, 20)
"""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence
from typing import TypeVar

from dungeon_combat.core.exceptions import GameEngineError
from dungeon_combat.core.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

_UINT32_MASK = 0xFFFFFFFF
_MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    """Multiply two 32-bit integers, keeping the low 32 bits."""
    return (a * b) & _UINT32_MASK


def hash_seed(seed: str) -> int:
    """Fold a string seed into a non-negative 32-bit integer.

    Uses the classic ``hash * 31 + char`` string hash, wrapped to a signed
    32-bit integer at every step, then takes the absolute value.

    Args:
        seed: The string seed.

    Returns:
        Non-negative integer seed.
    """
    value = 0
    for char in seed:
        value = (value * 31 + ord(char)) & _UINT32_MASK
        if value >= 0x80000000:
            value -= 0x100000000
    return abs(value)


class SeededRNG:
    """Seedable Mulberry32 pseudo-random generator.

    Attributes:
        seed: The integer seed the generator started from.
    """

    def __init__(self, seed: str | int) -> None:
        """Initialize the generator.

        Args:
            seed: String or integer seed. Strings are hashed with hash_seed.
        """
        self.seed = hash_seed(seed) if isinstance(seed, str) else seed
        self._state = self.seed & _UINT32_MASK
        logger.debug("SeededRNG initialized", seed=self.seed)

    def next_uint32(self) -> int:
        """Advance the stream and return the next unsigned 32-bit value.

        Returns:
            Integer in [0, 2**32).
        """
        self._state = (self._state + _MULBERRY_INCREMENT) & _UINT32_MASK
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _UINT32_MASK
        return (t ^ (t >> 14)) & _UINT32_MASK

    def next_float(self) -> float:
        """Return a uniform float in [0, 1)."""
        return self.next_uint32() / 0x100000000

    def next_int(self, min_value: int, max_value: int) -> int:
        """Return a uniform integer in [min_value, max_value].

        Args:
            min_value: Inclusive lower bound.
            max_value: Inclusive upper bound.

        Returns:
            The drawn integer.

        Raises:
            GameEngineError: If min_value exceeds max_value.
        """
        if min_value > max_value:
            raise GameEngineError(
                "Invalid integer range",
                details={"min": min_value, "max": max_value},
            )
        span = max_value - min_value + 1
        return int(self.next_uint32() / 0x100000000 * span) + min_value

    def chance(self, probability: float) -> bool:
        """Return True with the given probability (0.0 to 1.0)."""
        return self.next_float() < probability

    def percent_chance(self, percent: float) -> bool:
        """Return True with the given percent chance (0 to 100)."""
        return self.next_float() * 100 < percent

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly.

        Args:
            items: Non-empty sequence to choose from.

        Returns:
            The chosen element.

        Raises:
            GameEngineError: If the sequence is empty.
        """
        if not items:
            raise GameEngineError("Cannot choose from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        """Shuffle a sequence in place with Fisher-Yates.

        Args:
            items: The sequence to shuffle.

        Returns:
            The same sequence, shuffled.
        """
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(0, i)
            items[i], items[j] = items[j], items[i]
        return items


__all__ = [
    "SeededRNG",
    "hash_seed",
]
