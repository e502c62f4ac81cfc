"""
Duel Components - Data-only component definitions.

All components are Pydantic models.
"""

from duelkit.components.character import (
    DerivedStats,
    Health,
)

__all__ = [
    # Character
    "DerivedStats",
    "Health",
]
