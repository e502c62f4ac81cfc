"""
Character components - derived stats and health.
"""

from __future__ import annotations

from pydantic import Field

from duelcore.core.component import Component


class DerivedStats(Component):
    """
    Level-derived combat statistics.

    Recomputed by the stat scaler whenever a combatant's level changes,
    never edited by hand during a match.

    Attributes:
        max_hp: Maximum hit points
        attack: Base attack, the centre of every damage roll
        speed: Decides the opening turn and shifts hit chance
        defense: Mitigates hits taken while defending
    """
    max_hp: int = Field(default=1, ge=1)
    attack: int = Field(default=1, ge=1)
    speed: int = Field(default=1, ge=1)
    defense: int = Field(default=0, ge=0)


class Health(Component):
    """
    Health points tracking.

    current always stays within [0, max_hp].

    Attributes:
        current: Current HP
        max_hp: Maximum HP
    """
    current: int = Field(default=1, ge=0)
    max_hp: int = Field(default=1, ge=1)

    def model_post_init(self, __context):
        """Ensure current doesn't exceed max."""
        if self.current > self.max_hp:
            self.current = self.max_hp

    @property
    def is_dead(self) -> bool:
        """Check if HP has run out."""
        return self.current <= 0

    @property
    def is_full(self) -> bool:
        """Check if at full health."""
        return self.current >= self.max_hp

    @property
    def missing(self) -> int:
        """HP needed to reach max."""
        return self.max_hp - self.current

    @property
    def percent(self) -> float:
        """Get health as percentage (0-1)."""
        return self.current / self.max_hp

    def initialize(self, max_hp: int) -> None:
        """Set a new max and fill HP to it."""
        self.max_hp = max_hp
        self.current = max_hp

    def set_max_hp(self, max_hp: int) -> None:
        """Change max HP, clamping current HP down if needed."""
        self.max_hp = max_hp
        if self.current > max_hp:
            self.current = max_hp

    def take_damage(self, amount: int) -> int:
        """
        Take damage.

        Args:
            amount: Damage to take (negative values count as 0)

        Returns:
            Actual HP lost
        """
        actual = min(max(0, amount), self.current)
        self.current -= actual
        return actual

    def heal(self, amount: int) -> int:
        """
        Heal health.

        Args:
            amount: Amount to heal (negative values count as 0)

        Returns:
            Actual amount healed
        """
        old = self.current
        self.current = min(self.current + max(0, amount), self.max_hp)
        return self.current - old
