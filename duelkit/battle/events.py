"""
Battle events emitted for the presentation layer.

Every resolved action yields an ordered list of these. Payloads use plain
values (side names, integers) so they can be logged or serialized as-is.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any

from duelcore.core.events import Event
from duelkit.battle.actor import Combatant, Side


class BattleEvent(Enum):
    """Battle events."""
    MATCH_STARTED = auto()
    TURN_CHANGED = auto()
    MISSED = auto()
    CRITICAL_HIT = auto()
    HIT_LANDED = auto()
    HEALED = auto()
    HEAL_REFUSED = auto()
    DEFENDED = auto()
    DEFEATED = auto()
    LEVELED_UP = auto()
    MATCH_ENDED = auto()


def battle_event(event_type: BattleEvent, **data: Any) -> Event:
    """Create an event, converting Side values to their names."""
    for key, value in data.items():
        if isinstance(value, Side):
            data[key] = value.value
    return Event(type=event_type, data=data)


def hp_snapshot(actor: Combatant) -> dict[str, int]:
    """HP fields attached to every event that changes HP."""
    return {"hp": actor.current_hp, "max_hp": actor.max_hp}
