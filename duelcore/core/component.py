"""
Component base class for data-only components.

Components are plain data containers validated by Pydantic. Combatants,
stat blocks and battle configuration are all built from them, so a bad
value is rejected the moment it is assigned instead of surfacing mid-match.

Usage:
    class Health(Component):
        current: int
        max_hp: int

    class StatProfile(Component):
        base_hp: int = 20
        hp_growth: float = 2.5
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all components.

    Components use Pydantic for:
    - Automatic validation (on construction and on assignment)
    - JSON serialization
    - Type hints
    - Default values

    Small state-keeping helpers (clamped damage/heal on Health) are allowed;
    anything that coordinates several components belongs in the battle layer.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for references)
        arbitrary_types_allowed=True,
        # Validate on assignment
        validate_assignment=True,
        # Unknown keys are configuration mistakes
        extra='forbid',
    )

    # Class variable: component type name (used in logs and error messages)
    _type_name: ClassVar[str] = ""

    @classmethod
    def get_type_name(cls) -> str:
        """Get the component type name."""
        return cls._type_name or cls.__name__

    def clone(self) -> Component:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)
