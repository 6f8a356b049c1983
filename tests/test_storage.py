"""Tests for the persistence store and best-effort save/load."""

import json
import logging

import pytest

from taskboard.board import Board
from taskboard.codec import Descriptor
from taskboard.primitives import GROUND_Y
from taskboard.shapes import SpawnRequest
from taskboard.storage import (
    STORAGE_KEY,
    JsonFileStore,
    MemoryStore,
    StoreError,
    load_descriptors,
    remove_saved,
    save_descriptors,
)


_HUGE_INT = "9" * 400
_OVERLONG_INT = "9" * 5000
_DEEP_NESTING = "[" * 100_000 + "]" * 100_000


def _cube_payload(x_literal):
    return '[{"kind": "cube", "x": ' + x_literal + ', "y": 0, "z": 0}]'


class BrokenStore:
    """Store whose every operation fails like an unavailable backend."""

    def get(self, key):
        raise StoreError("backend unavailable")

    def set(self, key, value):
        raise StoreError("backend unavailable")

    def remove(self, key):
        raise StoreError("backend unavailable")


class ReadOnlyStore(MemoryStore):
    """Third-party style store that fails with plain OS errors."""

    def set(self, key, value):
        raise PermissionError("read-only")

    def remove(self, key):
        raise PermissionError("read-only")


# ---------------------------------------------------------------------------
# save / load results
# ---------------------------------------------------------------------------


class TestSaveLoad:
    def test_empty_list_round_trip(self):
        store = MemoryStore()
        assert save_descriptors(store, STORAGE_KEY, []).ok
        result = load_descriptors(store, STORAGE_KEY)
        assert result.ok
        assert result.descriptors == []

    def test_missing_key(self):
        result = load_descriptors(MemoryStore(), STORAGE_KEY)
        assert result.ok
        assert result.descriptors == []

    def test_order_preserved(self):
        store = MemoryStore()
        descs = [Descriptor("cube", float(i), GROUND_Y, 0.0, label=str(i)) for i in range(5)]
        save_descriptors(store, STORAGE_KEY, descs)
        assert load_descriptors(store, STORAGE_KEY).descriptors == descs

    def test_payload_is_json_array(self):
        store = MemoryStore()
        save_descriptors(store, STORAGE_KEY, [Descriptor("cube", 1.0, 2.0, 3.0)])
        data = json.loads(store.get(STORAGE_KEY))
        assert data == [
            {"kind": "cube", "x": 1.0, "y": 2.0, "z": 3.0, "color": "#1475b5", "label": "", "status": "todo"}
        ]

    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            '{"kind": "cube"}',
            "42",
            '[{"kind": "cube"}]',
            _cube_payload(_HUGE_INT),
            _cube_payload(_OVERLONG_INT),
            _DEEP_NESTING,
        ],
    )
    def test_malformed_payload_is_no_saved_state(self, payload):
        store = MemoryStore({STORAGE_KEY: payload})
        result = load_descriptors(store, STORAGE_KEY)
        assert not result.ok
        assert result.descriptors == []
        assert result.error

    def test_one_bad_entry_rejects_whole_payload(self):
        good = Descriptor("cube", 0.0, GROUND_Y, 0.0).to_dict()
        store = MemoryStore({STORAGE_KEY: json.dumps([good, {"kind": "cone", "x": 0, "y": 0, "z": 0}])})
        result = load_descriptors(store, STORAGE_KEY)
        assert not result.ok
        assert result.descriptors == []

    def test_store_failure_is_captured(self):
        assert not save_descriptors(BrokenStore(), STORAGE_KEY, []).ok
        assert not load_descriptors(BrokenStore(), STORAGE_KEY).ok
        assert not remove_saved(BrokenStore(), STORAGE_KEY).ok

    def test_non_finite_position_fails_to_save(self):
        store = MemoryStore()
        result = save_descriptors(store, STORAGE_KEY, [Descriptor("cube", float("inf"), 0.0, 0.0)])
        assert not result.ok
        assert store.get(STORAGE_KEY) is None


# ---------------------------------------------------------------------------
# Board persistence
# ---------------------------------------------------------------------------


class TestBoardPersistence:
    def test_save_then_load_restores_shapes(self):
        store = MemoryStore()
        board = Board(store=store)
        board.spawn(SpawnRequest("cube", (1.0, 0.0, 1.0), "#d64545", "one"))
        board.spawn(SpawnRequest("sphere", (15.0, 0.0, 2.0), label_text="two"))
        assert board.save().count == 2

        restored = Board(store=store)
        assert restored.load().ok
        assert [s.kind.value for s in restored.shapes] == ["cube", "sphere"]
        assert [restored.label_of(s) for s in restored.shapes] == ["one", "two"]
        assert restored.descriptors() == board.descriptors()

    def test_malformed_load_leaves_board_empty(self, caplog):
        board = Board(store=MemoryStore({STORAGE_KEY: "][garbage"}))
        with caplog.at_level(logging.WARNING, logger="taskboard.board"):
            result = board.load()
        assert not result.ok
        assert len(board) == 0
        assert "Failed to load shapes" in caplog.text

    def test_save_failure_is_logged_not_raised(self, caplog):
        board = Board(store=BrokenStore())
        board.spawn(SpawnRequest("cube", (0.0, 0.0, 0.0)))
        with caplog.at_level(logging.WARNING, logger="taskboard.board"):
            result = board.save()
        assert not result.ok
        assert "Failed to save shapes" in caplog.text

    def test_read_only_store_is_logged_not_raised(self, caplog):
        board = Board(store=ReadOnlyStore())
        board.spawn(SpawnRequest("cube", (20.0, 0.0, 0.0)))
        with caplog.at_level(logging.WARNING, logger="taskboard.board"):
            saved = board.save()
            cleared = board.clear_done()
            removed = board.clear_all()
        assert not saved.ok
        assert saved.error.startswith("PermissionError")
        assert not cleared.ok
        assert not removed.ok
        assert "Failed to remove saved shapes" in caplog.text

    @pytest.mark.parametrize(
        "payload", [_cube_payload(_HUGE_INT), _cube_payload(_OVERLONG_INT), _DEEP_NESTING]
    )
    def test_hostile_payload_restores_welcome_cube(self, payload):
        board = Board(store=MemoryStore({STORAGE_KEY: payload}))
        result = board.restore()
        assert not result.ok
        assert [board.label_of(s) for s in board.shapes] == ["welcome!"]


# ---------------------------------------------------------------------------
# JsonFileStore
# ---------------------------------------------------------------------------


class TestJsonFileStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileStore(path).set("k", "v")
        assert JsonFileStore(path).get("k") == "v"

    def test_missing_file(self, tmp_path):
        assert JsonFileStore(tmp_path / "nope.json").get("k") is None

    def test_remove(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        store.set("a", "1")
        store.set("b", "2")
        store.remove("a")
        store.remove("missing")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_creates_parent_dirs(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "dir" / "state.json")
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("not json at all")
        with pytest.raises(StoreError):
            JsonFileStore(path).get(STORAGE_KEY)
        result = load_descriptors(JsonFileStore(path), STORAGE_KEY)
        assert not result.ok

    def test_board_round_trip_through_file(self, tmp_path):
        path = tmp_path / "state.json"
        board = Board(store=JsonFileStore(path))
        board.spawn(SpawnRequest("cylinder", (-4.0, 0.0, 6.0), label_text="file"))
        board.save()

        restored = Board(store=JsonFileStore(path))
        restored.load()
        assert restored.descriptors() == board.descriptors()
