"""
Duel Core

Infrastructure shared by the duel battle framework: data-only components,
a typed event bus, the seedable random source and the error taxonomy.

Quick Start:
    from duelcore.core import EventBus, EventRecorder, RNG

    bus = EventBus()
    recorder = EventRecorder()
    recorder.attach(bus, BattleEvent)
    rng = RNG(seed=42)
"""

__version__ = "0.1.0"
__author__ = "Developer"

from duelcore.core import (
    Component,
    EventBus,
    Event,
    EventRecorder,
    RNG,
    DuelError,
    ConfigurationError,
    PersistenceError,
)

__all__ = [
    # Components
    "Component",
    # Events
    "EventBus",
    "Event",
    "EventRecorder",
    # Randomness
    "RNG",
    # Errors
    "DuelError",
    "ConfigurationError",
    "PersistenceError",
]
