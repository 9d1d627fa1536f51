"""Combat session: the single entry point a host loop drives.

A session owns one encounter from initiative to a terminal status. The
host loop asks whose turn it is, starts that turn (status effect upkeep),
submits the chosen action, and advances the turn. Every call runs to
completion synchronously and returns a structured result.

Example:
    >>> rng = SeededRNG("crypt-of-ash")
    >>> session = CombatSession(create_fighter("Aria"), goblins, rng=rng)
    >>> session.start_turn()
    >>> session.player_attack(goblins[0].id)
    >>> session.next_turn()
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from dungeon_combat.core.config import CombatSettings
from dungeon_combat.core.exceptions import InvalidGameStateError
from dungeon_combat.core.logging import get_logger
from dungeon_combat.engine.abilities import AbilityResolver, AbilityResult
from dungeon_combat.engine.arena import CombatArena
from dungeon_combat.engine.attacks import AttackResolver, AttackResult
from dungeon_combat.engine.effects import (
    ApplyEffectResult,
    StatusEffectEngine,
    StatusEffectTickResult,
)
from dungeon_combat.engine.rng import SeededRNG
from dungeon_combat.models.combat import CombatState, CombatStatus, TurnOrderEntry
from dungeon_combat.models.effects import StatusEffect, StatusEffectType
from dungeon_combat.models.entities import HostileEntity, Protagonist


logger = get_logger(__name__)


@dataclass(frozen=True)
class FleeResult:
    """Outcome of a flee attempt.

    Attributes:
        success: Whether the protagonist escaped.
        message: Human-readable outcome.
        roll: The d100 roll, or None if fleeing was not allowed.
    """

    success: bool
    message: str
    roll: int | None = None


class CombatSession:
    """One combat encounter between the protagonist and a hostile roster.

    The session engages the protagonist for its lifetime and mutates it
    in place (health, mana, cooldowns, buffs). Hostiles are cloned on
    entry; the caller's roster is never modified.
    """

    def __init__(
        self,
        protagonist: Protagonist,
        hostiles: Iterable[HostileEntity],
        *,
        rng: SeededRNG,
        settings: CombatSettings | None = None,
    ) -> None:
        """Start a new encounter.

        Args:
            protagonist: The protagonist; engaged until the encounter ends.
            hostiles: The hostile roster; each entry is deep-copied.
            rng: Random source for every roll in the encounter.
            settings: Combat settings; defaults to the application settings.

        Raises:
            InvalidGameStateError: If the protagonist is already in combat.
            ValidationError: If two hostiles share an id.
        """
        self._arena = CombatArena(protagonist, hostiles, rng=rng, settings=settings)
        self._effects = StatusEffectEngine(self._arena)
        self._attacks = AttackResolver(self._arena, self._effects)
        self._abilities = AbilityResolver(self._arena, self._effects)

        order = self._arena.scheduler.calculate_initial_order()
        self._arena.log("Combat begins! Round 1")
        self._arena.check_combat_end()

        logger.info(
            "Combat session created",
            session_id=self._arena.session_id,
            protagonist=protagonist.name,
            hostiles=[h.name for h in self._arena.hostiles.values()],
            first=order[0].name,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        """Identifier of this session."""
        return self._arena.session_id

    @property
    def protagonist(self) -> Protagonist:
        """The engaged protagonist."""
        return self._arena.protagonist

    @property
    def status(self) -> CombatStatus:
        """The encounter status."""
        return self._arena.state.status

    @property
    def round(self) -> int:
        """The current round."""
        return self._arena.state.round

    @property
    def is_over(self) -> bool:
        """Whether the encounter has reached a terminal status."""
        return self._arena.state.status.is_terminal

    # -------------------------------------------------------------------------
    # Turn flow
    # -------------------------------------------------------------------------

    def get_current_turn(self) -> TurnOrderEntry | None:
        """Get the entry whose turn it is, or None if combat is over."""
        return self._arena.scheduler.get_current_turn()

    def next_turn(self) -> TurnOrderEntry | None:
        """Advance to the next combatant, or return None if combat is over."""
        return self._arena.scheduler.next_turn()

    def is_player_turn(self) -> bool:
        """Check whether the protagonist is the acting combatant."""
        entry = self.get_current_turn()
        return entry is not None and entry.is_player

    def start_turn(self) -> StatusEffectTickResult:
        """Run start-of-turn upkeep for the acting combatant.

        For the protagonist, ability cooldowns and buff durations tick
        down first. Then the combatant's status effects tick.

        Returns:
            The status effect tick result. If combat is over the result
            carries a single 'No current turn' message.
        """
        entry = self.get_current_turn()
        if entry is None:
            return StatusEffectTickResult(messages=["No current turn"])

        if entry.is_player:
            self._arena.protagonist.end_turn()
            self._arena.refresh(entry.combatant_id)

        return self._effects.process_status_effects(entry.combatant_id)

    def process_status_effects(self, combatant_id: str) -> StatusEffectTickResult:
        """Tick one combatant's status effects directly."""
        return self._effects.process_status_effects(combatant_id)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def player_attack(self, target_id: str) -> AttackResult:
        """Resolve a protagonist basic attack.

        Raises:
            InvalidGameStateError: If combat has already ended.
            UnknownCombatantError: If the target is not a living hostile.
        """
        return self._attacks.player_attack(target_id)

    def enemy_attack(self, hostile_id: str) -> AttackResult:
        """Resolve a hostile basic attack against the protagonist.

        Raises:
            InvalidGameStateError: If combat has already ended.
            UnknownCombatantError: If the attacker is not a living hostile.
        """
        return self._attacks.enemy_attack(hostile_id)

    def use_ability(self, ability_id: str, target_id: str | None = None) -> AbilityResult:
        """Use a protagonist ability, optionally against a hostile."""
        return self._abilities.use_ability(ability_id, target_id)

    def attempt_flee(self, *, allowed: bool = True) -> FleeResult:
        """Try to escape the encounter.

        Args:
            allowed: False for encounters that forbid fleeing, which then
                fails without a roll.

        Returns:
            FleeResult for the attempt.

        Raises:
            InvalidGameStateError: If combat has already ended.
        """
        arena = self._arena
        if arena.state.status.is_terminal:
            raise InvalidGameStateError(
                "Cannot flee after combat has ended",
                current_state=arena.state.status.value,
                expected_states=[CombatStatus.IN_PROGRESS.value],
            )

        if not allowed:
            message = "Cannot flee from this battle!"
            arena.log(message)
            return FleeResult(success=False, message=message)

        roll = arena.dice.roll_d100()
        if roll <= arena.settings.flee_chance:
            message = "You escaped!"
            arena.log(message)
            arena.end(CombatStatus.FLED)
            logger.info("Protagonist fled", roll=roll)
            return FleeResult(success=True, message=message, roll=roll)

        message = "Failed to escape!"
        arena.log(message)
        logger.debug("Flee failed", roll=roll)
        return FleeResult(success=False, message=message, roll=roll)

    def release(self) -> None:
        """Release the protagonist so another session may engage it."""
        self._arena.protagonist.release(self._arena.session_id)

    # -------------------------------------------------------------------------
    # Status effects
    # -------------------------------------------------------------------------

    def apply_status_effect(
        self,
        target_id: str,
        effect_type: StatusEffectType,
        duration: int,
        source: str = "unknown",
        source_level: int = 1,
        value_override: int | None = None,
    ) -> ApplyEffectResult:
        """Apply a status effect to a combatant."""
        return self._effects.apply_status_effect(
            target_id,
            effect_type,
            duration,
            source,
            source_level,
            value_override,
        )

    def remove_status_effect(self, target_id: str, effect_id: str) -> bool:
        """Remove one effect instance; False if nothing matched."""
        return self._effects.remove_status_effect(target_id, effect_id)

    def remove_effects_by_type(self, target_id: str, effect_type: StatusEffectType) -> int:
        """Remove every effect of a type; returns how many were removed."""
        return self._effects.remove_effects_by_type(target_id, effect_type)

    def get_status_effects(self, combatant_id: str) -> list[StatusEffect]:
        """Get a combatant's active effects."""
        return self._effects.get_status_effects(combatant_id)

    def has_status_effect(self, combatant_id: str, effect_type: StatusEffectType) -> bool:
        """Check whether a combatant has an active effect of a type."""
        return self._effects.has_status_effect(combatant_id, effect_type)

    def is_incapacitated(self, combatant_id: str) -> bool:
        """Check whether a combatant is stunned, frozen, or asleep."""
        return self._effects.is_incapacitated(combatant_id)

    def get_effective_attack_modifier(self, combatant_id: str) -> int:
        """Get the additive percent modifier to a combatant's attack."""
        return self._effects.get_effective_attack_modifier(combatant_id)

    def get_damage_received_modifier(self, combatant_id: str) -> float:
        """Get the multiplier applied to damage a combatant takes."""
        return self._effects.get_damage_received_modifier(combatant_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_state(self) -> CombatState:
        """Get a deep snapshot of the encounter state."""
        return self._arena.state.model_copy(deep=True)

    def get_log(self) -> list[str]:
        """Get a copy of the combat log."""
        return list(self._arena.state.log)

    def get_hostiles(self) -> list[HostileEntity]:
        """Get snapshots of the hostiles still in the encounter."""
        return [h.model_copy(deep=True) for h in self._arena.hostiles.values()]

    def get_valid_targets(self) -> list[HostileEntity]:
        """Get snapshots of hostiles that can be targeted."""
        return [
            h.model_copy(deep=True) for h in self._arena.hostiles.values() if h.health > 0
        ]


__all__ = [
    "FleeResult",
    "CombatSession",
]
