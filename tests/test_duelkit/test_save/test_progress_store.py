import json

import pytest

from duelcore.core.errors import PersistenceError
from duelcore.core.events import EventRecorder
from duelkit.save.manager import JsonProgressStore, MemoryProgressStore, SaveEvent


def test_defaults_to_level_one(store):
    assert store.get_player_level() == 1
    assert store.get_enemy_level() == 1
    assert store.get_best_level() == 1
    assert not store.can_continue


def test_round_trip(store):
    store.set_player_level(7)
    store.set_enemy_level(8)
    store.set_best_level(9)

    assert store.get_player_level() == 7
    assert store.get_enemy_level() == 8
    assert store.get_best_level() == 9
    assert store.can_continue


def test_reset_keeps_best_level(store):
    store.set_player_level(7)
    store.set_enemy_level(6)
    store.set_best_level(7)

    store.reset_progress()

    assert store.get_player_level() == 1
    assert store.get_enemy_level() == 1
    assert store.get_best_level() == 7


def test_start_new_game(store):
    store.set_player_level(7)
    store.set_enemy_level(6)

    store.start_new_game(3)

    assert store.get_player_level() == 3
    assert store.get_enemy_level() == 1


@pytest.mark.parametrize("level", [0, -1, True, "3", 2.0])
def test_rejects_invalid_levels(store, level):
    with pytest.raises(ValueError):
        store.set_player_level(level)


def test_save_events(event_bus):
    recorder = EventRecorder()
    recorder.attach(event_bus, SaveEvent)
    store = MemoryProgressStore(event_bus=event_bus)

    store.set_player_level(3)
    store.reset_progress()

    assert recorder.types() == [SaveEvent.PROGRESS_SAVED, SaveEvent.PROGRESS_RESET]
    assert recorder.events[0]["key"] == "player_level"
    assert recorder.events[0]["value"] == 3


def test_json_store_survives_reopen(tmp_path):
    path = tmp_path / "saves" / "progress.json"
    store = JsonProgressStore(path)
    store.set_player_level(5)
    store.set_best_level(5)

    reopened = JsonProgressStore(path)

    assert reopened.get_player_level() == 5
    assert reopened.get_best_level() == 5
    assert reopened.get_enemy_level() == 1

    data = json.loads(path.read_text())
    assert data["version"] == JsonProgressStore.VERSION
    assert "checksum" in data


def test_json_store_missing_file_reads_defaults(tmp_path):
    store = JsonProgressStore(tmp_path / "nothing.json")
    assert store.get_player_level() == 1
    assert not store.can_continue


def test_json_store_reset(tmp_path):
    store = JsonProgressStore(tmp_path / "progress.json")
    store.set_player_level(4)
    store.set_best_level(4)

    store.reset_progress()

    assert store.get_player_level() == 1
    assert store.get_best_level() == 4


def test_json_store_detects_tampering(tmp_path):
    path = tmp_path / "progress.json"
    JsonProgressStore(path).set_player_level(5)

    data = json.loads(path.read_text())
    data["player_level"] = 99
    path.write_text(json.dumps(data))

    with pytest.raises(PersistenceError, match="checksum"):
        JsonProgressStore(path).get_player_level()

    assert JsonProgressStore(path, validate=False).get_player_level() == 99


def test_json_store_rejects_malformed_documents(tmp_path):
    path = tmp_path / "progress.json"

    path.write_text(json.dumps({"player_level": 0}))
    with pytest.raises(PersistenceError):
        JsonProgressStore(path).get_player_level()

    path.write_text(json.dumps({"player_level": 2, "gold": 10}))
    with pytest.raises(PersistenceError):
        JsonProgressStore(path).get_player_level()

    path.write_text("{broken")
    with pytest.raises(PersistenceError):
        JsonProgressStore(path).get_player_level()


def test_json_store_accepts_unsigned_document(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"player_level": 3}))

    assert JsonProgressStore(path).get_player_level() == 3


def test_json_store_write_failure(tmp_path, event_bus):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    recorder = EventRecorder()
    recorder.attach(event_bus, SaveEvent)
    store = JsonProgressStore(blocker / "progress.json", event_bus=event_bus)

    with pytest.raises(PersistenceError):
        store.set_player_level(2)

    assert recorder.types() == [SaveEvent.SAVE_FAILED]
    assert recorder.events[0]["action"] == "save player_level"
