"""
Core module.

Exports:
- Component: Pydantic base for data-only containers
- EventBus, Event, EventRecorder: Event system
- RNG: Seedable random source
- DuelError, ConfigurationError, PersistenceError: Error taxonomy
"""

from duelcore.core.component import Component
from duelcore.core.events import EventBus, Event, EventHandler, EventRecorder
from duelcore.core.rng import RNG
from duelcore.core.errors import DuelError, ConfigurationError, PersistenceError

__all__ = [
    # Components
    "Component",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    "EventRecorder",
    # Randomness
    "RNG",
    # Errors
    "DuelError",
    "ConfigurationError",
    "PersistenceError",
]
