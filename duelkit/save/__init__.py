"""
Save module - persisted progress.

Provides:
- ProgressStore interface (player level, enemy level, best level)
- In-memory store for tests and embedding
- JSON file store with checksum and schema validation
"""

from duelkit.save.manager import (
    ProgressStore,
    MemoryProgressStore,
    JsonProgressStore,
    SaveEvent,
    PROGRESS_SCHEMA,
)

__all__ = [
    "ProgressStore",
    "MemoryProgressStore",
    "JsonProgressStore",
    "SaveEvent",
    "PROGRESS_SCHEMA",
]
