"""
Battle actors - the two combatants of a match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from duelkit.battle.stats import StatScaler
from duelkit.components import DerivedStats, Health

logger = logging.getLogger(__name__)

# Reference value for the mitigation curve
DEFAULT_DEFENSE_CONSTANT = 100.0


class Side(Enum):
    """Which side of the match an actor fights for."""
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> Side:
        """The other side."""
        return Side.ENEMY if self is Side.PLAYER else Side.PLAYER


@dataclass
class Combatant:
    """
    A participant in battle.

    Holds the level, the stats derived from it and the transient defend
    stance. Use Combatant.spawn() to get a fully healed unit at a level.
    """
    name: str
    side: Side
    scaler: StatScaler
    defense_constant: float = DEFAULT_DEFENSE_CONSTANT

    level: int = 1
    stats: DerivedStats = field(default_factory=DerivedStats)
    health: Health = field(default_factory=Health)

    # Battle state
    is_defending: bool = False

    @classmethod
    def spawn(
        cls,
        name: str,
        side: Side,
        scaler: StatScaler,
        level: int,
        defense_constant: float = DEFAULT_DEFENSE_CONSTANT,
    ) -> Combatant:
        """Create a combatant at a level with full HP."""
        actor = cls(
            name=name,
            side=side,
            scaler=scaler,
            defense_constant=defense_constant,
        )
        actor.initialize(level)
        return actor

    @property
    def is_alive(self) -> bool:
        """Check if actor is alive."""
        return not self.health.is_dead

    @property
    def is_player_controlled(self) -> bool:
        """Check if this actor waits for external input."""
        return self.side is Side.PLAYER

    @property
    def current_hp(self) -> int:
        """Get current HP."""
        return self.health.current

    @property
    def max_hp(self) -> int:
        """Get max HP."""
        return self.health.max_hp

    @property
    def missing_hp(self) -> int:
        """HP needed to be back at max."""
        return self.health.missing

    @property
    def attack(self) -> int:
        return self.stats.attack

    @property
    def speed(self) -> int:
        return self.stats.speed

    @property
    def defense(self) -> int:
        return self.stats.defense

    def initialize(self, level: int) -> None:
        """Set the level, recompute stats and heal to full."""
        self.level = max(1, level)
        self._recalculate_stats()
        self.health.initialize(self.stats.max_hp)

    def level_up(self, levels: int = 1) -> int:
        """
        Gain levels.

        HP goes up by exactly the increase in max HP, so damage already
        taken stays taken.

        Args:
            levels: Levels to gain (values <= 0 do nothing)

        Returns:
            The max HP increase that was healed
        """
        if levels <= 0:
            return 0

        old_max = self.health.max_hp
        self.level += levels
        self._recalculate_stats()

        diff = self.health.max_hp - old_max
        if diff > 0:
            self.health.heal(diff)

        logger.debug(
            "%s reached level %d (max HP %d -> %d)",
            self.name, self.level, old_max, self.health.max_hp,
        )
        return max(0, diff)

    def mitigate_damage(self, amount: int) -> int:
        """
        Damage that would actually land for a raw amount.

        Only a defending actor mitigates; mitigated damage never drops
        below 1 for a raw hit of at least 1.
        """
        if amount <= 0:
            return 0
        if not self.is_defending:
            return amount

        k = self.defense_constant
        return max(1, round(amount * k / (k + self.stats.defense)))

    def take_damage(self, amount: int) -> bool:
        """
        Take a hit.

        The defend stance is left in place; it lapses at the start of this
        actor's next turn.

        Args:
            amount: Raw damage before mitigation

        Returns:
            True if HP is now 0 (defeated)
        """
        self.health.take_damage(self.mitigate_damage(amount))
        return self.health.is_dead

    def heal(self, amount: int) -> int:
        """Heal HP. Returns the amount actually restored."""
        return self.health.heal(amount)

    def start_defending(self) -> None:
        """Start defending."""
        self.is_defending = True

    def end_defending(self) -> None:
        """Stop defending."""
        self.is_defending = False

    def start_turn(self) -> None:
        """Called at start of actor's turn."""
        self.end_defending()

    def _recalculate_stats(self) -> None:
        self.stats = self.scaler.calculate(self.level)
        self.health.set_max_hp(self.stats.max_hp)
