"""Entity models for the protagonist and hostile entities.

This module defines the participants the combat core operates on. Both
are owned by the host game: hostile entity data arrives already resolved
from a data provider, and the protagonist persists between encounters.

Entities:
    HostileEntity: A monster taking part in an encounter.
    Ability: A protagonist ability with mana cost and cooldown.
    ActiveBuff: A temporary stat bonus on the protagonist.
    ProtagonistStats: Base stats of the protagonist.
    Protagonist: The single player-controlled character.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field, model_validator

from dungeon_combat.core.exceptions import InvalidGameStateError
from dungeon_combat.models.enums import (
    AbilityArchetype,
    HostileType,
    PlayerClass,
    StatName,
)


if TYPE_CHECKING:
    from dungeon_combat.engine.rng import SeededRNG


# Effect tags that grant temporary invulnerability
INVULNERABILITY_EFFECTS = frozenset({"invulnerable", "magic_immunity"})


def _new_id() -> str:
    return str(uuid4())


# =============================================================================
# Hostile Entities
# =============================================================================


class HostileEntity(BaseModel):
    """A hostile creature participating in combat.

    Attributes:
        id: Unique identifier of this hostile instance.
        name: Display name.
        health: Current health.
        max_health: Maximum health.
        attack_power: Attack power used for to-hit and damage.
        defense: Defense value to beat on attack rolls.
        experience: Experience awarded on defeat.
        challenge_rating: Difficulty rating scaling attack bonus and dice.
        type: Creature classification.
        speed: Speed used for initiative.
        image_url: Optional artwork reference supplied by the data provider.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(default_factory=_new_id, min_length=1, description="Hostile ID")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    health: Annotated[int, Field(ge=0, description="Current health")]
    max_health: Annotated[int, Field(ge=1, description="Maximum health")]
    attack_power: Annotated[int, Field(ge=0, description="Attack power")]
    defense: Annotated[int, Field(ge=0, description="Defense")]
    experience: Annotated[int, Field(ge=0, description="Experience reward")] = 0
    challenge_rating: Annotated[float, Field(ge=0, description="Challenge rating")] = 0
    type: HostileType = Field(default=HostileType.MONSTROSITY, description="Creature type")
    speed: int = Field(default=10, description="Speed")
    image_url: str | None = Field(default=None, description="Artwork URL")

    @model_validator(mode="after")
    def _health_within_max(self) -> HostileEntity:
        if self.health > self.max_health:
            raise ValueError(
                f"health ({self.health}) cannot exceed max_health ({self.max_health})"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_alive(self) -> bool:
        """Check if the hostile still has health.

        Returns:
            True if health > 0.
        """
        return self.health > 0


# =============================================================================
# Abilities
# =============================================================================


class Ability(BaseModel):
    """A protagonist ability.

    ``damage`` is a multiplier of basic attack damage for single-target
    and AOE abilities, and a flat amount for drain abilities. ``healing``
    is a fraction of max health for self-heals and a flat amount for
    drains.

    Attributes:
        id: Unique ability identifier.
        name: Display name.
        description: Player-facing description.
        mana_cost: Mana consumed on use.
        cooldown: Turns before the ability can be used again.
        current_cooldown: Turns remaining until ready (0 = ready).
        damage: Declared damage attribute.
        healing: Declared healing attribute.
        effect: Special effect tag (e.g., 'stun', 'aoe', 'attack_buff').
        source: Where the ability comes from ('class' or an item name).
        is_aoe: Whether the ability hits every hostile.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(min_length=1, description="Ability ID")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Description")
    mana_cost: Annotated[int, Field(ge=0, description="Mana cost")] = 0
    cooldown: Annotated[int, Field(ge=0, description="Cooldown in turns")] = 0
    current_cooldown: Annotated[int, Field(ge=0, description="Cooldown remaining")] = 0
    damage: float | None = Field(default=None, description="Damage attribute")
    healing: float | None = Field(default=None, description="Healing attribute")
    effect: str | None = Field(default=None, description="Effect tag")
    source: str = Field(default="class", description="Ability source")
    is_aoe: bool = Field(default=False, description="Hits all hostiles")

    @property
    def archetype(self) -> AbilityArchetype:
        """Resolve the archetype from the declared attributes.

        Returns:
            The first matching AbilityArchetype in precedence order.
        """
        if self.healing and not self.damage:
            return AbilityArchetype.SELF_HEAL
        if self.effect == "attack_buff":
            return AbilityArchetype.ATTACK_BUFF
        if self.effect == "full_restore":
            return AbilityArchetype.FULL_RESTORE
        if self.effect in INVULNERABILITY_EFFECTS:
            return AbilityArchetype.INVULNERABILITY
        if self.effect == "aoe" or self.is_aoe:
            return AbilityArchetype.AOE_DAMAGE
        if self.damage and self.healing:
            return AbilityArchetype.DRAIN
        if self.damage:
            return AbilityArchetype.SINGLE_TARGET
        return AbilityArchetype.FALLBACK

    @property
    def is_ready(self) -> bool:
        """Check if the ability is off cooldown.

        Returns:
            True if current_cooldown is 0.
        """
        return self.current_cooldown == 0


# =============================================================================
# Protagonist
# =============================================================================


class ActiveBuff(BaseModel):
    """A temporary stat bonus.

    Attributes:
        name: Buff name; reapplying the same name refreshes it.
        bonuses: Flat bonus per stat.
        remaining_turns: Turns left before the buff expires.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(min_length=1, description="Buff name")
    bonuses: dict[StatName, float] = Field(default_factory=dict, description="Stat bonuses")
    remaining_turns: Annotated[int, Field(ge=0, description="Turns remaining")]


class ProtagonistStats(BaseModel):
    """Base stats of the protagonist, before buffs.

    Attributes:
        health: Current health.
        max_health: Maximum health.
        mana: Current mana.
        max_mana: Maximum mana.
        attack: Base attack.
        defense: Base defense.
        speed: Base speed.
        crit_chance: Critical hit chance (percent).
        crit_multiplier: Critical damage multiplier.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    health: Annotated[int, Field(ge=0)]
    max_health: Annotated[int, Field(ge=1)]
    mana: Annotated[int, Field(ge=0)] = 0
    max_mana: Annotated[int, Field(ge=0)] = 0
    attack: Annotated[int, Field(ge=0)]
    defense: Annotated[int, Field(ge=0)]
    speed: int = 10
    crit_chance: Annotated[float, Field(ge=0, le=100)] = 5
    crit_multiplier: Annotated[float, Field(ge=1)] = 1.5


class Protagonist(BaseModel):
    """The single player-controlled character.

    A protagonist persists across encounters and is mutated in place by
    the combat session that engages it. Only one live session may engage
    a protagonist at a time.

    Attributes:
        id: Unique identifier.
        name: Display name.
        player_class: Character class.
        level: Character level (1-20).
        stats: Base stats.
        weapon_dice: Damage dice of the equipped weapon, if any.
        abilities: Class and item abilities.
        active_buffs: Temporary stat bonuses.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(default_factory=_new_id, min_length=1, description="Protagonist ID")
    name: str = Field(min_length=1, max_length=50, description="Display name")
    player_class: PlayerClass = Field(description="Character class")
    level: Annotated[int, Field(ge=1, le=20, description="Character level")] = 1
    stats: ProtagonistStats = Field(description="Base stats")
    weapon_dice: str | None = Field(default=None, description="Weapon damage dice")
    abilities: list[Ability] = Field(default_factory=list, description="Abilities")
    active_buffs: list[ActiveBuff] = Field(default_factory=list, description="Active buffs")

    _engaged_by: str | None = PrivateAttr(default=None)

    # -------------------------------------------------------------------------
    # Derived stats
    # -------------------------------------------------------------------------

    def _buff_bonus(self, stat: StatName) -> float:
        return sum(buff.bonuses.get(stat, 0) for buff in self.active_buffs)

    def get_max_health(self) -> int:
        """Get max health including buff bonuses."""
        return self.stats.max_health + int(self._buff_bonus(StatName.MAX_HEALTH))

    def get_max_mana(self) -> int:
        """Get max mana including buff bonuses."""
        return self.stats.max_mana + int(self._buff_bonus(StatName.MAX_MANA))

    def get_attack_power(self) -> int:
        """Get attack power including buff bonuses."""
        return self.stats.attack + int(self._buff_bonus(StatName.ATTACK))

    def get_defense(self) -> int:
        """Get defense including buff bonuses."""
        return self.stats.defense + int(self._buff_bonus(StatName.DEFENSE))

    def get_speed(self) -> int:
        """Get speed including buff bonuses."""
        return self.stats.speed + int(self._buff_bonus(StatName.SPEED))

    def get_crit_chance(self) -> float:
        """Get critical hit chance (percent) including buff bonuses."""
        return self.stats.crit_chance + self._buff_bonus(StatName.CRIT_CHANCE)

    def get_crit_multiplier(self) -> float:
        """Get critical damage multiplier including buff bonuses."""
        return self.stats.crit_multiplier + self._buff_bonus(StatName.CRIT_MULTIPLIER)

    @property
    def health(self) -> int:
        """Current health."""
        return self.stats.health

    @property
    def mana(self) -> int:
        """Current mana."""
        return self.stats.mana

    def is_alive(self) -> bool:
        """Check if the protagonist still has health.

        Returns:
            True if health > 0.
        """
        return self.stats.health > 0

    # -------------------------------------------------------------------------
    # Health & mana
    # -------------------------------------------------------------------------

    def take_damage(self, amount: int) -> int:
        """Subtract already-resolved damage from health.

        Args:
            amount: Damage after every reduction has been applied.

        Returns:
            Health actually lost, never more than current health.
        """
        actual = min(self.stats.health, max(0, amount))
        self.stats.health -= actual
        return actual

    def heal(self, amount: int) -> int:
        """Heal, capped at max health.

        Args:
            amount: Amount to heal.

        Returns:
            Health actually restored.
        """
        if amount <= 0:
            return 0
        previous = self.stats.health
        self.stats.health = min(self.get_max_health(), previous + amount)
        return self.stats.health - previous

    def restore_mana(self, amount: int) -> int:
        """Restore mana, capped at max mana.

        Args:
            amount: Amount to restore.

        Returns:
            Mana actually restored.
        """
        if amount <= 0:
            return 0
        previous = self.stats.mana
        self.stats.mana = min(self.get_max_mana(), previous + amount)
        return self.stats.mana - previous

    def use_mana(self, amount: int) -> bool:
        """Spend mana if enough is available.

        Args:
            amount: Mana to spend.

        Returns:
            True if the mana was spent, False if there was not enough.
        """
        if self.stats.mana < amount:
            return False
        self.stats.mana -= amount
        return True

    def full_restore(self) -> int:
        """Restore health and mana to max and reset every cooldown.

        Returns:
            Health actually restored.
        """
        previous = self.stats.health
        self.stats.health = self.get_max_health()
        self.stats.mana = self.get_max_mana()
        for ability in self.abilities:
            ability.current_cooldown = 0
        return self.stats.health - previous

    # -------------------------------------------------------------------------
    # Buffs & cooldowns
    # -------------------------------------------------------------------------

    def apply_buff(self, name: str, bonuses: dict[StatName, float], duration: int) -> None:
        """Apply a temporary buff, refreshing an existing one with the same name.

        A refresh takes the new bonuses and keeps the longer duration.

        Args:
            name: Buff name.
            bonuses: Flat bonus per stat.
            duration: Duration in turns.
        """
        for buff in self.active_buffs:
            if buff.name == name:
                buff.bonuses = dict(bonuses)
                buff.remaining_turns = max(buff.remaining_turns, duration)
                return
        self.active_buffs.append(
            ActiveBuff(name=name, bonuses=bonuses, remaining_turns=duration)
        )

    def tick_buffs(self) -> list[str]:
        """Decrement buff durations and drop expired buffs.

        Returns:
            Names of the buffs that expired.
        """
        expired: list[str] = []
        remaining: list[ActiveBuff] = []
        for buff in self.active_buffs:
            buff.remaining_turns = max(0, buff.remaining_turns - 1)
            if buff.remaining_turns > 0:
                remaining.append(buff)
            else:
                expired.append(buff.name)
        self.active_buffs = remaining
        return expired

    def tick_cooldowns(self) -> None:
        """Reduce every ability cooldown by one turn."""
        for ability in self.abilities:
            if ability.current_cooldown > 0:
                ability.current_cooldown -= 1

    def end_turn(self) -> None:
        """Run per-turn upkeep: cooldowns, then buffs."""
        self.tick_cooldowns()
        self.tick_buffs()

    # -------------------------------------------------------------------------
    # Abilities & attacks
    # -------------------------------------------------------------------------

    def get_all_abilities(self) -> list[Ability]:
        """Get every ability available to the protagonist.

        Returns:
            The live ability objects, in catalog order.
        """
        return list(self.abilities)

    def get_ability(self, ability_id: str) -> Ability | None:
        """Look up an ability by id.

        Args:
            ability_id: The ability identifier.

        Returns:
            The ability, or None if the protagonist does not have it.
        """
        for ability in self.abilities:
            if ability.id == ability_id:
                return ability
        return None

    def basic_attack(self, rng: SeededRNG) -> dict[str, Any]:
        """Compute raw basic attack damage.

        Draws exactly one float from the generator for the crit check.

        Args:
            rng: The session's random source.

        Returns:
            Dictionary with 'damage' and 'is_crit'.
        """
        attack_power = self.get_attack_power()
        is_crit = rng.percent_chance(self.get_crit_chance())
        damage = int(attack_power * self.get_crit_multiplier()) if is_crit else attack_power
        return {"damage": damage, "is_crit": is_crit}

    # -------------------------------------------------------------------------
    # Combat engagement
    # -------------------------------------------------------------------------

    @property
    def in_combat(self) -> bool:
        """Check if a live combat session currently engages this protagonist."""
        return self._engaged_by is not None

    def engage(self, session_id: str) -> None:
        """Mark the protagonist as engaged by a combat session.

        Args:
            session_id: Identifier of the engaging session.

        Raises:
            InvalidGameStateError: If another session already engages it.
        """
        if self._engaged_by is not None and self._engaged_by != session_id:
            raise InvalidGameStateError(
                f"{self.name} is already engaged in another combat",
                current_state="engaged",
                expected_states=["idle"],
                details={"session_id": self._engaged_by},
            )
        self._engaged_by = session_id

    def release(self, session_id: str) -> None:
        """Release the engagement held by a session.

        Releasing from a session that does not hold the engagement is a
        no-op.

        Args:
            session_id: Identifier of the releasing session.
        """
        if self._engaged_by == session_id:
            self._engaged_by = None


# =============================================================================
# Class Presets
# =============================================================================


def create_fighter(name: str, **kwargs: Any) -> Protagonist:
    """Create a level 1 Fighter.

    Fighters are durable melee combatants with low mana and
    short-cooldown martial abilities.

    Args:
        name: Character name.
        **kwargs: Additional Protagonist fields (e.g., id, level).

    Returns:
        A new Fighter Protagonist.
    """
    stats = ProtagonistStats(
        health=120,
        max_health=120,
        mana=30,
        max_mana=30,
        attack=14,
        defense=10,
        speed=25,
        crit_chance=15,
        crit_multiplier=1.75,
    )
    abilities = [
        Ability(
            id="power_strike",
            name="Power Strike",
            description="A devastating blow that deals 150% weapon damage.",
            mana_cost=10,
            cooldown=1,
            damage=1.5,
        ),
        Ability(
            id="shield_bash",
            name="Shield Bash",
            description="Bash the enemy, dealing moderate damage and stunning them for 1 turn.",
            mana_cost=15,
            cooldown=3,
            damage=0.75,
            effect="stun",
        ),
        Ability(
            id="battle_cry",
            name="Battle Cry",
            description="Let out a fierce cry, increasing attack by 25% for 3 turns.",
            mana_cost=20,
            cooldown=5,
            effect="attack_buff",
        ),
        Ability(
            id="second_wind",
            name="Second Wind",
            description="Catch your breath and recover 30% of max health.",
            mana_cost=25,
            cooldown=6,
            healing=0.3,
        ),
        Ability(
            id="whirlwind",
            name="Whirlwind",
            description="Spin and strike all enemies for 75% weapon damage.",
            mana_cost=30,
            cooldown=4,
            damage=0.75,
            effect="aoe",
        ),
    ]
    kwargs.setdefault("weapon_dice", "1d8")
    return Protagonist(
        name=name,
        player_class=PlayerClass.FIGHTER,
        stats=stats,
        abilities=abilities,
        **kwargs,
    )


def create_warlock(name: str, **kwargs: Any) -> Protagonist:
    """Create a level 1 Warlock.

    Warlocks trade health and armor for a deep mana pool and spells
    that drain, ward, and restore.

    Args:
        name: Character name.
        **kwargs: Additional Protagonist fields (e.g., id, level).

    Returns:
        A new Warlock Protagonist.
    """
    stats = ProtagonistStats(
        health=80,
        max_health=80,
        mana=100,
        max_mana=100,
        attack=6,
        defense=6,
        speed=20,
        crit_chance=10,
        crit_multiplier=1.75,
    )
    abilities = [
        Ability(
            id="eldritch_blast",
            name="Eldritch Blast",
            description="Fire a beam of crackling energy, dealing 125% attack damage.",
            mana_cost=8,
            cooldown=1,
            damage=1.25,
        ),
        Ability(
            id="drain_life",
            name="Drain Life",
            description="Siphon life from an enemy, dealing 12 damage and healing 12 health.",
            mana_cost=20,
            cooldown=3,
            damage=12,
            healing=12,
            effect="lifesteal",
        ),
        Ability(
            id="hex",
            name="Hex",
            description="Curse an enemy with a lingering hex.",
            mana_cost=15,
            cooldown=4,
            effect="debuff",
        ),
        Ability(
            id="shadow_bolt",
            name="Shadow Bolt",
            description="Hurl a bolt of shadow energy for double attack damage.",
            mana_cost=25,
            cooldown=2,
            damage=2.0,
        ),
        Ability(
            id="eldritch_ward",
            name="Eldritch Ward",
            description="Wrap yourself in warding magic, ignoring damage for a turn.",
            mana_cost=30,
            cooldown=6,
            effect="magic_immunity",
        ),
        Ability(
            id="dark_renewal",
            name="Dark Renewal",
            description="Call on your patron to fully restore health, mana, and cooldowns.",
            mana_cost=40,
            cooldown=10,
            effect="full_restore",
        ),
    ]
    return Protagonist(
        name=name,
        player_class=PlayerClass.WARLOCK,
        stats=stats,
        abilities=abilities,
        **kwargs,
    )


__all__ = [
    "HostileEntity",
    "Ability",
    "ActiveBuff",
    "ProtagonistStats",
    "Protagonist",
    "create_fighter",
    "create_warlock",
]
