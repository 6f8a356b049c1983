"""CLI tests: every subcommand against a temporary JSON store."""

import json
import sys

import pytest

from main import main
from taskboard.storage import STORAGE_KEY


@pytest.fixture
def store_path(tmp_path, monkeypatch):
    # main() installs a logging excepthook; restore the original afterwards
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    return str(tmp_path / "board.json")


def _saved(store_path):
    with open(store_path) as f:
        return json.loads(json.load(f)[STORAGE_KEY])


def test_no_command_prints_help(store_path, capsys):
    assert main(["--store", store_path]) == 0
    assert "usage:" in capsys.readouterr().out


def test_list_shows_welcome_cube(store_path, capsys):
    assert main(["--store", store_path, "list"]) == 0
    out = capsys.readouterr().out
    assert "welcome!" in out
    assert "ToDo: 1 | Done: 0" in out


def test_spawn_persists(store_path, capsys):
    assert main(["--store", store_path, "spawn", "--kind", "sphere", "--label", "docs", "--x", "15", "--z", "0"]) == 0
    out = capsys.readouterr().out
    assert "Spawned #2 sphere" in out
    assert "[done]" in out

    saved = _saved(store_path)
    assert [d["label"] for d in saved] == ["welcome!", "docs"]
    assert saved[1]["status"] == "done"


def test_spawn_random_with_seed(store_path, capsys):
    assert main(["--store", store_path, "spawn", "--seed", "3", "--label", "r"]) == 0
    assert "[todo]" in capsys.readouterr().out


def test_spawn_unknown_kind(store_path, capsys):
    assert main(["--store", store_path, "spawn", "--kind", "pyramid"]) == 2
    err = capsys.readouterr().err
    assert "unknown shape kind" in err
    assert "cube, sphere, cylinder" in err


def test_move_into_done(store_path, capsys):
    main(["--store", store_path, "spawn", "--label", "task", "--x", "-5", "--z", "-5"])
    capsys.readouterr()
    assert main(["--store", store_path, "move", "2", "--x", "20", "--z", "0"]) == 0
    assert "[done]" in capsys.readouterr().out

    saved = _saved(store_path)
    moved = [d for d in saved if d["label"] == "task"][0]
    assert moved["status"] == "done"
    assert moved["x"] == pytest.approx(20.0, abs=1e-6)


def test_move_unknown_id(store_path, capsys):
    assert main(["--store", store_path, "move", "99", "--x", "0", "--z", "0"]) == 1
    assert "no shape #99" in capsys.readouterr().err


def test_clear_done(store_path, capsys):
    main(["--store", store_path, "spawn", "--x", "20", "--z", "0"])
    main(["--store", store_path, "spawn", "--x", "2", "--z", "2"])
    capsys.readouterr()
    assert main(["--store", store_path, "clear", "done"]) == 0
    assert "ToDo: 2 | Done: 0" in capsys.readouterr().out
    assert all(d["status"] == "todo" for d in _saved(store_path))


def test_clear_all(store_path, capsys):
    main(["--store", store_path, "spawn", "--x", "2", "--z", "2"])
    assert main(["--store", store_path, "clear", "all"]) == 0
    with open(store_path) as f:
        assert STORAGE_KEY not in json.load(f)
