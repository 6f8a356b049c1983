"""Persistence store for the board's descriptor list.

The store is a plain string key-value store (get/set/remove), like browser
localStorage. The board keeps one ordered JSON array of descriptors under a
single fixed key.

Persistence is best-effort: save/load never raise. They return a SaveResult
or LoadResult and the caller decides whether to log.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from taskboard.codec import Descriptor, DescriptorError

STORAGE_KEY = "myShapes_v1"


class StoreError(RuntimeError):
    """The underlying store could not be read or written."""


class MemoryStore:
    """In-process store; contents vanish with the object."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """Store backed by one JSON object file mapping keys to strings."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


@dataclass
class SaveResult:
    ok: bool
    count: int = 0
    error: str | None = None


@dataclass
class LoadResult:
    """Outcome of reading the descriptor list.

    ``ok`` with no descriptors means nothing was saved. A failed load also
    carries no descriptors: a bad payload counts as "no saved state".
    """

    ok: bool
    descriptors: list[Descriptor] = field(default_factory=list)
    error: str | None = None


def _describe(e: BaseException) -> str:
    return f"{type(e).__name__}: {e}"


# The store is any object with get/set/remove, so its failures are not
# limited to StoreError; every store call below is a best-effort boundary.


def save_descriptors(store, key: str, descriptors: list[Descriptor]) -> SaveResult:
    """Serialize *descriptors* as a JSON array under *key*."""
    try:
        payload = json.dumps([d.to_dict() for d in descriptors], allow_nan=False)
        store.set(key, payload)
    except Exception as e:
        return SaveResult(ok=False, error=_describe(e))
    return SaveResult(ok=True, count=len(descriptors))


def load_descriptors(store, key: str) -> LoadResult:
    """Read and validate the whole descriptor list stored under *key*."""
    try:
        raw = store.get(key)
    except Exception as e:
        return LoadResult(ok=False, error=_describe(e))
    if not raw:
        return LoadResult(ok=True)
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise DescriptorError(f"saved state is a {type(data).__name__}, not a list")
        descriptors = [Descriptor.from_dict(item) for item in data]
    except (ValueError, TypeError, RecursionError) as e:
        # JSONDecodeError and DescriptorError are ValueErrors
        return LoadResult(ok=False, error=_describe(e))
    return LoadResult(ok=True, descriptors=descriptors)


def remove_saved(store, key: str) -> SaveResult:
    """Delete the saved list entirely."""
    try:
        store.remove(key)
    except Exception as e:
        return SaveResult(ok=False, error=_describe(e))
    return SaveResult(ok=True)
