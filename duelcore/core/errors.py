"""
Error taxonomy.

Only two conditions are real failures: a configuration that cannot produce
a valid match, and a progress store that cannot be read or written.
Stale or late player input is not an error; the battle system reports it
as a rejected outcome instead.
"""

from __future__ import annotations

from typing import Any, Optional


class DuelError(Exception):
    """Base class for all duel errors."""


class ConfigurationError(DuelError, ValueError):
    """Raised when battle configuration is invalid."""


class PersistenceError(DuelError):
    """
    Raised when the progress store cannot be read or written.

    Attributes:
        outcome: The finished action outcome when the failure happened while
            flushing writes after a battle action, else None. The match
            itself is already in its new state and remains playable.
    """

    def __init__(self, message: str, outcome: Optional[Any] = None):
        super().__init__(message)
        self.outcome = outcome
