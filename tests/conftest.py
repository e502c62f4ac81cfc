import os
import sys
import pytest

# Ensure duel modules can be imported
sys.path.append(os.getcwd())

from duelcore.core.events import EventBus, EventRecorder
from duelcore.core.rng import RNG
from duelkit.battle.config import BattleConfig
from duelkit.battle.events import BattleEvent
from duelkit.save.manager import MemoryProgressStore


class ScriptedRNG(RNG):
    """
    RNG that replays queued draws before falling back to a seeded source.

    floats feed random(), ints feed randint(). Queued ints are not range
    checked so tests can force exact rolls.
    """

    def __init__(self, floats=(), ints=(), seed=0):
        super().__init__(seed)
        self.floats = list(floats)
        self.ints = list(ints)
        self.float_draws = 0
        self.int_draws = 0

    def random(self):
        self.float_draws += 1
        if self.floats:
            return self.floats.pop(0)
        return super().random()

    def randint(self, a, b):
        self.int_draws += 1
        if self.ints:
            return self.ints.pop(0)
        return super().randint(a, b)


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRNG instances."""
    return ScriptedRNG


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def recorder(event_bus):
    """Recorder attached to every battle event on the bus."""
    rec = EventRecorder()
    rec.attach(event_bus, BattleEvent)
    return rec


@pytest.fixture
def store():
    """Fresh in-memory progress store."""
    return MemoryProgressStore()


@pytest.fixture
def config():
    """Default battle configuration."""
    return BattleConfig()


@pytest.fixture
def no_crit_config():
    """Always-hit, never-crit configuration."""
    return BattleConfig(
        crit_chance=0.0,
        base_hit_chance=1.0,
        min_hit_chance=1.0,
        max_hit_chance=1.0,
    )
