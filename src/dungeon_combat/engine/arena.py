"""Combat arena: the roster, the combatant projection, and health bookkeeping.

The arena holds everything a single encounter mutates. Hostile entities
are cloned on entry so the caller's roster is never aliased, and every
combatant lives in a map keyed by its stable id. The protagonist is the
one object mutated in place; the arena engages it for the lifetime of
the encounter.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import uuid4

from dungeon_combat.core.config import CombatSettings, get_settings
from dungeon_combat.core.exceptions import UnknownCombatantError, ValidationError
from dungeon_combat.core.logging import get_logger
from dungeon_combat.engine.dice import DiceRoller
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.engine.turn_manager import TurnScheduler
from dungeon_combat.models.combat import Combatant, CombatState, CombatStatus
from dungeon_combat.models.effects import StatusEffect, StatusEffectType
from dungeon_combat.models.entities import HostileEntity, Protagonist


logger = get_logger(__name__)


class CombatArena:
    """Shared encounter state used by every resolver.

    Attributes:
        session_id: Identifier used to engage the protagonist.
        protagonist: The engaged protagonist, mutated in place.
        hostiles: Living hostile entities keyed by id, in roster order.
        state: The encounter state.
        rng: The encounter's random source.
        dice: Dice roller drawing from ``rng``.
        settings: Combat rule tuning.
        scheduler: Turn scheduler over ``state``.
    """

    def __init__(
        self,
        protagonist: Protagonist,
        hostiles: Iterable[HostileEntity],
        *,
        rng: SeededRNG,
        settings: CombatSettings | None = None,
    ) -> None:
        """Set up the arena and engage the protagonist.

        Args:
            protagonist: The protagonist to engage.
            hostiles: Hostile roster; each entry is deep-copied. Hostiles
                without health never enter the encounter.
            rng: The encounter's random source.
            settings: Combat settings; defaults to the application settings.

        Raises:
            ValidationError: If two hostiles share an id.
            InvalidGameStateError: If the protagonist is already engaged.
        """
        self.session_id = str(uuid4())
        self.settings = settings if settings is not None else get_settings().combat
        self.rng = rng
        self.dice = DiceRoller(rng)

        self.hostiles: dict[str, HostileEntity] = {}
        for hostile in hostiles:
            if hostile.id in self.hostiles or hostile.id == protagonist.id:
                raise ValidationError(
                    "Duplicate combatant id in encounter",
                    field_name="id",
                    invalid_value=hostile.id,
                )
            if not hostile.is_alive:
                logger.warning("Skipping defeated hostile", hostile_id=hostile.id)
                continue
            self.hostiles[hostile.id] = hostile.model_copy(deep=True)

        protagonist.engage(self.session_id)
        self.protagonist = protagonist

        self.state = CombatState()
        self.state.combatants[protagonist.id] = self._project_protagonist([])
        for hostile in self.hostiles.values():
            self.state.combatants[hostile.id] = self._project_hostile(hostile, [])

        self.scheduler = TurnScheduler(self.state)
        self._effect_sequence = 0

    # -------------------------------------------------------------------------
    # Projection
    # -------------------------------------------------------------------------

    def _project_protagonist(self, effects: list[StatusEffect]) -> Combatant:
        protagonist = self.protagonist
        return Combatant(
            id=protagonist.id,
            name=protagonist.name,
            health=protagonist.health,
            max_health=protagonist.get_max_health(),
            speed=protagonist.get_speed(),
            defense=protagonist.get_defense(),
            is_player=True,
            status_effects=effects,
        )

    @staticmethod
    def _project_hostile(hostile: HostileEntity, effects: list[StatusEffect]) -> Combatant:
        return Combatant(
            id=hostile.id,
            name=hostile.name,
            health=hostile.health,
            max_health=hostile.max_health,
            speed=hostile.speed,
            defense=hostile.defense,
            is_player=False,
            status_effects=effects,
        )

    def refresh(self, combatant_id: str) -> Combatant | None:
        """Re-derive a combatant's stats from its source entity, keeping its effects.

        Args:
            combatant_id: The combatant to refresh.

        Returns:
            The refreshed combatant, or None if it is not in the encounter.
        """
        current = self.state.combatants.get(combatant_id)
        if current is None:
            return None
        if combatant_id == self.protagonist.id:
            derived = self._project_protagonist([])
        else:
            hostile = self.hostiles.get(combatant_id)
            if hostile is None:
                return None
            derived = self._project_hostile(hostile, [])

        # Update in place so held references and effect lists stay live
        current.health = derived.health
        current.max_health = derived.max_health
        current.speed = derived.speed
        current.defense = derived.defense
        return current

    def refresh_all(self) -> None:
        """Re-derive every combatant."""
        for combatant_id in list(self.state.combatants):
            self.refresh(combatant_id)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_combatant(self, combatant_id: str) -> Combatant | None:
        """Get a combatant by id, or None if it is not in the encounter."""
        return self.state.combatants.get(combatant_id)

    def is_protagonist(self, combatant_id: str) -> bool:
        """Check whether an id refers to the protagonist."""
        return combatant_id == self.protagonist.id

    def require_hostile(self, hostile_id: str) -> HostileEntity:
        """Get a living hostile, treating a missing one as a caller defect.

        Args:
            hostile_id: The hostile's id.

        Returns:
            The hostile entity.

        Raises:
            UnknownCombatantError: If no such hostile is in the encounter.
        """
        hostile = self.hostiles.get(hostile_id)
        if hostile is None:
            raise UnknownCombatantError(
                f"Enemy with ID {hostile_id} not found",
                combatant_id=hostile_id,
                round_number=self.state.round,
            )
        return hostile

    def next_effect_id(self, combatant_id: str, effect_type: StatusEffectType) -> str:
        """Mint a deterministic effect instance id."""
        self._effect_sequence += 1
        return f"{combatant_id}:{effect_type.value}:{self._effect_sequence}"

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def damage(self, combatant_id: str, amount: int) -> int:
        """Subtract resolved damage from a combatant, floored at 0.

        Does not remove dead hostiles; callers decide when to do that.

        Args:
            combatant_id: The combatant to damage.
            amount: Damage after every reduction.

        Returns:
            Health actually lost.
        """
        if self.is_protagonist(combatant_id):
            dealt = self.protagonist.take_damage(amount)
        else:
            hostile = self.hostiles.get(combatant_id)
            if hostile is None:
                return 0
            dealt = min(hostile.health, max(0, amount))
            hostile.health -= dealt
        self.refresh(combatant_id)
        return dealt

    def heal(self, combatant_id: str, amount: int) -> int:
        """Heal a combatant, capped at max health.

        Args:
            combatant_id: The combatant to heal.
            amount: Healing to apply.

        Returns:
            Health actually restored.
        """
        if self.is_protagonist(combatant_id):
            healed = self.protagonist.heal(amount)
        else:
            hostile = self.hostiles.get(combatant_id)
            if hostile is None or amount <= 0:
                return 0
            previous = hostile.health
            hostile.health = min(hostile.max_health, previous + amount)
            healed = hostile.health - previous
        self.refresh(combatant_id)
        return healed

    def is_alive(self, combatant_id: str) -> bool:
        """Check whether a combatant is in the encounter with health left."""
        combatant = self.state.combatants.get(combatant_id)
        return combatant is not None and combatant.health > 0

    def remove_dead_hostile(self, hostile_id: str) -> None:
        """Remove a hostile from the roster, the combatant map, and the turn order.

        Args:
            hostile_id: The defeated hostile's id.
        """
        self.hostiles.pop(hostile_id, None)
        self.state.combatants.pop(hostile_id, None)
        self.scheduler.remove(hostile_id)
        logger.info("Hostile removed", hostile_id=hostile_id, remaining=len(self.hostiles))

    # -------------------------------------------------------------------------
    # Log & status
    # -------------------------------------------------------------------------

    def log(self, message: str) -> None:
        """Append a line to the combat log."""
        self.state.log.append(message)

    def check_combat_end(self) -> CombatStatus:
        """Settle the encounter status after a health change.

        The first terminal status reached wins; later checks never move
        the encounter out of it.

        Returns:
            The encounter status after the check.
        """
        if self.state.status.is_terminal:
            return self.state.status

        if not self.protagonist.is_alive():
            self.state.status = CombatStatus.DEFEAT
            self.log("DEFEAT - You have been slain!")
        elif not self.hostiles:
            self.state.status = CombatStatus.VICTORY
            self.log("VICTORY - All enemies defeated!")

        if self.state.status.is_terminal:
            self.end(self.state.status)
        return self.state.status

    def end(self, status: CombatStatus) -> None:
        """Enter a terminal status and release the protagonist.

        Args:
            status: The terminal status to enter.
        """
        self.state.status = status
        self.protagonist.release(self.session_id)
        logger.info("Combat ended", status=status.value, round=self.state.round)


__all__ = [
    "CombatArena",
]
