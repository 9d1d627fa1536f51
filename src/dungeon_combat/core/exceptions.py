"""Exceptions raised by the combat core.

Only contract breaches raise: acting after an encounter has ended,
targeting a combatant that is not in it, malformed dice notation, bad
settings, or an inconsistent roster. Gameplay outcomes such as an
ability on cooldown are reported through result values instead.

Every exception carries a ``details`` mapping with the context needed
to diagnose the breach, rendered into its string form.

Example:
    >>> raise UnknownCombatantError("Enemy with ID ghost not found", combatant_id="ghost")
"""

from __future__ import annotations

from typing import Any


def _with_context(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Merge keyword context into a details mapping, skipping unset values."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class DungeonCombatError(Exception):
    """Root of the dungeon combat exception hierarchy.

    Attributes:
        message: Human-readable description of the breach.
        details: Structured context, such as the offending id or value.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = dict(details or {})
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{context}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Engine
# =============================================================================


class GameEngineError(DungeonCombatError):
    """A combat engine component was driven outside its contract."""


class InvalidGameStateError(GameEngineError):
    """An operation was attempted in a state that does not allow it.

    Raised when acting after the encounter reached a terminal status and
    when engaging a protagonist that another live session already holds.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record the offending state.

        Args:
            message: Description of the refused operation.
            current_state: State the encounter or protagonist is in.
            expected_states: States in which the operation is allowed.
            details: Further context.
        """
        super().__init__(
            message,
            details=_with_context(
                details,
                current_state=current_state,
                expected_states=expected_states,
            ),
        )


class CombatError(GameEngineError):
    """Combat resolution was asked to do something impossible."""

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record which combatant and round the failure concerns.

        Args:
            message: Description of the failure.
            combatant_id: The combatant involved.
            round_number: The encounter round at the time.
            details: Further context.
        """
        super().__init__(
            message,
            details=_with_context(details, combatant_id=combatant_id, round_number=round_number),
        )


class UnknownCombatantError(CombatError):
    """An attack named a combatant that is not in the encounter.

    The host loop only offers living targets, so this is a caller
    defect rather than a combat outcome.
    """


class DiceRollError(GameEngineError):
    """Dice notation could not be parsed."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, expression=expression))


class TurnManagementError(GameEngineError):
    """The turn scheduler was misused, e.g. ordering an empty encounter."""


# =============================================================================
# Configuration & input
# =============================================================================


class ConfigurationError(DungeonCombatError):
    """Settings could not be loaded or hold an invalid value."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, config_key=config_key))


class ValidationError(DungeonCombatError):
    """Encounter input is inconsistent, such as two hostiles sharing an id."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record the offending field and value.

        Args:
            message: Description of the problem.
            field_name: The field that failed validation.
            invalid_value: The rejected value.
            details: Further context.
        """
        super().__init__(
            message,
            details=_with_context(details, field_name=field_name, invalid_value=invalid_value),
        )


__all__ = [
    "DungeonCombatError",
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "UnknownCombatantError",
    "DiceRollError",
    "TurnManagementError",
    "ConfigurationError",
    "ValidationError",
]
