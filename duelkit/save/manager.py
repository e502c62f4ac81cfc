"""
Progress persistence - levels that survive across matches.

Provides:
- Player level, enemy level and best level (all default to 1)
- Reset of a run (player/enemy level only, best level is kept)
- JSON storage with checksum validation and schema checks
- Event publishing for saves, failures and resets
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
from abc import ABC, abstractmethod
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional

import jsonschema

from duelcore.core.errors import PersistenceError
from duelcore.core.events import EventBus

logger = logging.getLogger(__name__)

PLAYER_LEVEL_KEY = "player_level"
ENEMY_LEVEL_KEY = "enemy_level"
BEST_LEVEL_KEY = "best_level"

DEFAULT_LEVEL = 1

PROGRESS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "version": {"type": "string"},
        PLAYER_LEVEL_KEY: {"type": "integer", "minimum": 1},
        ENEMY_LEVEL_KEY: {"type": "integer", "minimum": 1},
        BEST_LEVEL_KEY: {"type": "integer", "minimum": 1},
        "checksum": {"type": "string"},
    },
    "additionalProperties": False,
}


class SaveEvent(Enum):
    """Save system events."""
    PROGRESS_SAVED = auto()
    SAVE_FAILED = auto()
    PROGRESS_RESET = auto()


class ProgressStore(ABC):
    """
    Read/write access to persisted progress.

    Every setter is durable before it returns, so the next read sees it.

    Usage:
        store = JsonProgressStore("saves/progress.json")
        store.set_player_level(5)
        store.get_player_level()  # 5
        store.reset_progress()
        store.get_player_level()  # 1
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus

    # Storage primitives

    @abstractmethod
    def _get(self, key: str) -> Optional[int]:
        """Stored value for a key, or None."""

    @abstractmethod
    def _set(self, key: str, value: int) -> None:
        """Store a value durably."""

    @abstractmethod
    def _delete(self, *keys: str) -> None:
        """Remove keys durably."""

    # Levels

    def get_player_level(self) -> int:
        return self._get_level(PLAYER_LEVEL_KEY)

    def set_player_level(self, level: int) -> None:
        self._set_level(PLAYER_LEVEL_KEY, level)

    def get_enemy_level(self) -> int:
        return self._get_level(ENEMY_LEVEL_KEY)

    def set_enemy_level(self, level: int) -> None:
        self._set_level(ENEMY_LEVEL_KEY, level)

    def get_best_level(self) -> int:
        return self._get_level(BEST_LEVEL_KEY)

    def set_best_level(self, level: int) -> None:
        self._set_level(BEST_LEVEL_KEY, level)

    def reset_progress(self) -> None:
        """Clear player and enemy level; best level is kept."""
        self._guarded(
            "reset progress",
            lambda: self._delete(PLAYER_LEVEL_KEY, ENEMY_LEVEL_KEY),
        )
        logger.info("Progress reset")
        self._publish(SaveEvent.PROGRESS_RESET)

    # Run helpers

    @property
    def can_continue(self) -> bool:
        """Check if a run beyond the first level is saved."""
        return self.get_player_level() > DEFAULT_LEVEL

    def start_new_game(self, level: int = DEFAULT_LEVEL) -> None:
        """Begin a fresh run at a level."""
        self.set_player_level(level)
        self.set_enemy_level(DEFAULT_LEVEL)

    # Internals

    def _get_level(self, key: str) -> int:
        value = self._get(key)
        return DEFAULT_LEVEL if value is None else value

    def _set_level(self, key: str, level: int) -> None:
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValueError(f"{key} must be a positive integer, got {level!r}")

        self._guarded(f"save {key}", lambda: self._set(key, level))
        logger.debug("Saved %s=%d", key, level)
        self._publish(SaveEvent.PROGRESS_SAVED, key=key, value=level)

    def _guarded(self, action: str, write) -> None:
        try:
            write()
        except PersistenceError as e:
            logger.error("Failed to %s: %s", action, e)
            self._publish(SaveEvent.SAVE_FAILED, action=action, error=str(e))
            raise

    def _publish(self, event_type: SaveEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)


class MemoryProgressStore(ProgressStore):
    """Dictionary-backed store. Nothing survives the process."""

    def __init__(
        self,
        initial: Optional[dict[str, int]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        super().__init__(event_bus)
        self._values: dict[str, int] = dict(initial or {})

    def _get(self, key: str) -> Optional[int]:
        return self._values.get(key)

    def _set(self, key: str, value: int) -> None:
        self._values[key] = value

    def _delete(self, *keys: str) -> None:
        for key in keys:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, int]:
        """Copy of everything stored."""
        return dict(self._values)


class JsonProgressStore(ProgressStore):
    """
    Store backed by one JSON document.

    The file is rewritten on every change (write to a temp file, then
    replace) and carries a checksum. A missing file reads as defaults; a
    damaged one raises PersistenceError.
    """

    VERSION = "1.0"

    def __init__(
        self,
        path: str | Path,
        event_bus: Optional[EventBus] = None,
        validate: bool = True,
    ):
        super().__init__(event_bus)
        self.path = Path(path)
        self.validate = validate

    def _get(self, key: str) -> Optional[int]:
        return self._load().get(key)

    def _set(self, key: str, value: int) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def _delete(self, *keys: str) -> None:
        data = self._load()
        for key in keys:
            data.pop(key, None)
        self._write(data)

    def _load(self) -> dict[str, int]:
        """Read the level values from disk."""
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read progress file {self.path}: {e}") from e

        if self.validate:
            try:
                jsonschema.validate(instance=document, schema=PROGRESS_SCHEMA)
            except jsonschema.ValidationError as e:
                raise PersistenceError(
                    f"Progress file {self.path} is malformed: {e.message}"
                ) from e

            checksum = document.get('checksum')
            if checksum and not self._verify_checksum(document, checksum):
                raise PersistenceError(
                    f"Progress file {self.path} is corrupted: checksum mismatch"
                )

        return {
            key: document[key]
            for key in (PLAYER_LEVEL_KEY, ENEMY_LEVEL_KEY, BEST_LEVEL_KEY)
            if key in document
        }

    def _write(self, values: dict[str, int]) -> None:
        """Write level values to disk."""
        document: dict[str, Any] = {'version': self.VERSION, **values}
        document['checksum'] = self._calculate_checksum(document)

        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write progress file {self.path}: {e}") from e

    # Checksum validation

    def _calculate_checksum(self, data: dict) -> str:
        """Calculate checksum for save data."""
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _verify_checksum(self, data: dict, expected_checksum: str) -> bool:
        """Verify save data checksum."""
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return self._calculate_checksum(data_copy) == expected_checksum
