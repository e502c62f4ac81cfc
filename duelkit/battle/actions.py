"""
Battle actions - attack, heal, defend.

All randomness comes from the injected RNG, one draw per decision, in a
fixed order: hit, then damage amount, then crit. A miss stops after the
hit draw.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from duelcore.core.rng import RNG
from duelkit.battle.actor import Combatant
from duelkit.battle.config import BattleConfig

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Types of battle actions."""
    ATTACK = auto()
    HEAL = auto()
    DEFEND = auto()


@dataclass(frozen=True)
class DamageRoll:
    """A rolled damage amount before mitigation."""
    amount: int
    was_crit: bool


@dataclass
class AttackResult:
    """Result of one attack."""
    hit: bool
    hit_chance: float
    raw_damage: int = 0
    damage: int = 0  # after mitigation
    was_crit: bool = False
    mitigated: bool = False
    defeated: bool = False


@dataclass
class HealResult:
    """Result of one heal attempt."""
    healed: int = 0
    refused: bool = False  # already at full health


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


class ActionResolver:
    """
    Rolls and applies attacks and heals.

    The roll_* and resolve_* methods are pure given the RNG; execute_*
    methods also apply the result to the combatants.
    """

    def __init__(self, config: BattleConfig, rng: Optional[RNG] = None):
        self.config = config
        self.rng = rng or RNG()

    # Formulas

    @staticmethod
    def resolve_hit_chance(
        attacker_speed: int,
        defender_speed: int,
        base_hit_chance: float,
        speed_factor: float,
        min_hit: float,
        max_hit: float,
    ) -> float:
        """Hit probability, shifted by speed difference and clamped."""
        chance = base_hit_chance + (attacker_speed - defender_speed) * speed_factor
        return clamp(chance, min_hit, max_hit)

    def roll_hit(self, chance: float) -> bool:
        """One uniform draw; a draw at or below the chance hits."""
        return self.rng.random() <= chance

    def roll_damage(
        self,
        base_attack: int,
        min_mult: float,
        max_mult: float,
        crit_chance: float,
        crit_mult: float,
    ) -> DamageRoll:
        """
        Roll damage in [floor(attack * min), ceil(attack * max)].

        A crit multiplies the rolled amount and rounds up.
        """
        low = math.floor(base_attack * min_mult)
        high = math.ceil(base_attack * max_mult)
        if low > high:
            low = high

        amount = self.rng.randint(low, high)
        was_crit = self.rng.random() < crit_chance
        if was_crit:
            amount = math.ceil(amount * crit_mult)

        return DamageRoll(amount=amount, was_crit=was_crit)

    def roll_heal(
        self,
        level: int,
        min_mult: float,
        max_mult: float,
        minimum_one: bool = False,
    ) -> int:
        """
        Roll a heal in [floor(level * min), ceil(level * max)].

        Args:
            level: Healer level
            min_mult: Low multiplier
            max_mult: High multiplier
            minimum_one: Raise a roll of 0 to 1
        """
        low = max(0, math.floor(level * min_mult))
        high = max(0, math.ceil(level * max_mult))
        if low > high:
            low = high

        amount = self.rng.randint(low, high)
        if minimum_one:
            amount = max(1, amount)
        return amount

    # Execution

    def execute_attack(self, attacker: Combatant, defender: Combatant) -> AttackResult:
        """Execute a basic attack."""
        cfg = self.config
        chance = self.resolve_hit_chance(
            attacker.speed,
            defender.speed,
            cfg.base_hit_chance,
            cfg.accuracy_speed_factor,
            cfg.min_hit_chance,
            cfg.max_hit_chance,
        )

        if not self.roll_hit(chance):
            logger.debug("%s missed %s (chance %.2f)", attacker.name, defender.name, chance)
            return AttackResult(hit=False, hit_chance=chance)

        roll = self.roll_damage(
            attacker.attack,
            cfg.damage_min_multiplier,
            cfg.damage_max_multiplier,
            cfg.crit_chance,
            cfg.crit_multiplier,
        )

        # Defense state is read at the moment the hit lands
        damage = defender.mitigate_damage(roll.amount)
        mitigated = defender.is_defending and roll.amount > 0
        defeated = defender.take_damage(roll.amount)

        logger.debug(
            "%s hit %s for %d (raw %d%s)",
            attacker.name, defender.name, damage, roll.amount,
            ", crit" if roll.was_crit else "",
        )
        return AttackResult(
            hit=True,
            hit_chance=chance,
            raw_damage=roll.amount,
            damage=damage,
            was_crit=roll.was_crit,
            mitigated=mitigated,
            defeated=defeated,
        )

    def execute_heal(self, healer: Combatant) -> HealResult:
        """
        Execute a heal on the healer.

        At full health nothing is rolled and the heal is refused.
        """
        if healer.missing_hp <= 0:
            return HealResult(refused=True)

        cfg = self.config
        amount = self.roll_heal(
            healer.level,
            cfg.heal_min_multiplier,
            cfg.heal_max_multiplier,
            cfg.minimum_heal_one,
        )
        amount = min(amount, healer.missing_hp)
        healed = healer.heal(amount)

        logger.debug("%s healed %d HP", healer.name, healed)
        return HealResult(healed=healed)

    def execute_defend(self, actor: Combatant) -> None:
        """Execute defend action."""
        actor.start_defending()
