"""Turn and initiative management for combat encounters.

This module orders combatants by speed and advances turns. The order is
computed once at the start of an encounter and afterwards only shrinks:
entries reference combatants by id, and removing one recomputes the
current index from the removed entry's prior position.
"""

from __future__ import annotations

from dungeon_combat.core.exceptions import TurnManagementError
from dungeon_combat.core.logging import get_logger
from dungeon_combat.models.combat import CombatState, TurnOrderEntry


logger = get_logger(__name__)


class TurnScheduler:
    """Track initiative order, the acting combatant, and the round counter.

    The scheduler operates on the CombatState it is given and writes the
    round announcements into its log.
    """

    def __init__(self, state: CombatState) -> None:
        """Initialize the scheduler.

        Args:
            state: The encounter state to schedule.
        """
        self._state = state

    @property
    def current_round(self) -> int:
        """Get the current combat round."""
        return self._state.round

    @property
    def turn_order(self) -> list[TurnOrderEntry]:
        """Get a copy of the current turn order."""
        return list(self._state.turn_order)

    def calculate_initial_order(self) -> list[TurnOrderEntry]:
        """Sort every combatant by speed, fastest first.

        Ties place the protagonist ahead of hostiles; among hostiles the
        roster order is kept.

        Returns:
            The computed turn order.

        Raises:
            TurnManagementError: If there are no combatants to order.
        """
        if not self._state.combatants:
            raise TurnManagementError("Cannot build a turn order without combatants")

        entries = [
            TurnOrderEntry(
                combatant_id=combatant.id,
                name=combatant.name,
                initiative=combatant.speed,
                is_player=combatant.is_player,
            )
            for combatant in self._state.combatants.values()
        ]
        entries.sort(key=lambda e: (-e.initiative, not e.is_player))

        self._state.turn_order = entries
        self._state.current_turn_index = 0

        logger.info(
            "Initiative order calculated",
            order=[(e.name, e.initiative) for e in entries],
        )
        return list(entries)

    def get_current_turn(self) -> TurnOrderEntry | None:
        """Get the entry whose turn it is.

        Returns:
            The acting entry, or None if combat is over or the acting
            combatant was just removed.
        """
        if self._state.status.is_terminal:
            return None
        index = self._state.current_turn_index
        if not 0 <= index < len(self._state.turn_order):
            return None
        return self._state.turn_order[index]

    def next_turn(self) -> TurnOrderEntry | None:
        """Advance to the next combatant, wrapping into a new round.

        Returns:
            The new acting entry, or None if combat is over.
        """
        if self._state.status.is_terminal or not self._state.turn_order:
            return None

        index = self._state.current_turn_index + 1
        if index >= len(self._state.turn_order):
            index = 0
            self._state.round += 1
            self._state.log.append(f"Round {self._state.round}")
            logger.debug("New round", round=self._state.round)

        self._state.current_turn_index = index
        return self._state.turn_order[index]

    def remove(self, combatant_id: str) -> int | None:
        """Remove a combatant from the turn order.

        If the removed entry sat at or before the current index, the
        index moves back one so the next advance lands on the successor.

        Args:
            combatant_id: The combatant to remove.

        Returns:
            The removed entry's prior position, or None if it was absent.
        """
        position = next(
            (
                i
                for i, entry in enumerate(self._state.turn_order)
                if entry.combatant_id == combatant_id
            ),
            None,
        )
        if position is None:
            return None

        self._state.turn_order = [
            entry for entry in self._state.turn_order if entry.combatant_id != combatant_id
        ]
        if position <= self._state.current_turn_index:
            self._state.current_turn_index -= 1

        logger.debug(
            "Removed from turn order",
            combatant_id=combatant_id,
            position=position,
            current_turn_index=self._state.current_turn_index,
        )
        return position


__all__ = [
    "TurnScheduler",
]
