"""
Stat scaling - level to derived stats.

The rounding is deliberately uneven and must stay that way:
- HP rounds down, keeping HP growth conservative
- Attack rounds up, keeping damage growth generous
- Speed and defense round to nearest (ties to even)
"""

from __future__ import annotations

import math

from duelkit.battle.config import StatProfile
from duelkit.components import DerivedStats


def compute_stats(
    level: int,
    base_hp: int,
    hp_growth: float,
    base_attack: int,
    attack_growth: float,
    base_speed: int,
    speed_growth_per_level: float,
    base_defense: int = 0,
    defense_growth_per_level: float = 0.0,
) -> DerivedStats:
    """
    Compute derived stats for a level.

    Args:
        level: Unit level (clamped to at least 1)
        base_hp: HP scale factor
        hp_growth: HP growth factor
        base_attack: Attack scale factor
        attack_growth: Attack growth factor
        base_speed: Speed at level 1
        speed_growth_per_level: Flat speed per level above 1
        base_defense: Defense at level 1
        defense_growth_per_level: Flat defense per level above 1

    Returns:
        DerivedStats with HP/attack/speed >= 1 and defense >= 0
    """
    level = max(1, level)
    log_level = math.log(level + 1)

    max_hp = math.floor(base_hp * log_level * hp_growth)
    attack = math.ceil(base_attack * log_level * attack_growth)
    speed = round(base_speed + speed_growth_per_level * (level - 1))
    defense = round(base_defense + defense_growth_per_level * (level - 1))

    return DerivedStats(
        max_hp=max(1, max_hp),
        attack=max(1, attack),
        speed=max(1, speed),
        defense=max(0, defense),
    )


class StatScaler:
    """
    Stat calculator bound to one side's profile.

    Usage:
        scaler = StatScaler(config.player)
        stats = scaler.calculate(level=5)
    """

    def __init__(self, profile: StatProfile):
        self.profile = profile

    def calculate(self, level: int) -> DerivedStats:
        """Derived stats for a level."""
        p = self.profile
        return compute_stats(
            level,
            base_hp=p.base_hp,
            hp_growth=p.hp_growth,
            base_attack=p.base_attack,
            attack_growth=p.attack_growth,
            base_speed=p.base_speed,
            speed_growth_per_level=p.speed_growth_per_level,
            base_defense=p.base_defense,
            defense_growth_per_level=p.defense_growth_per_level,
        )
