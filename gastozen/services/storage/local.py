"""
Local Storage Implementations

InMemoryStore keeps values in a dict (tests, throwaway sessions).
JsonFileStore keeps every key in one JSON object on disk. Writes go to
a temporary file in the same directory which then atomically replaces
the target, so an interrupted write leaves the previous state intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Mapping, Optional

from gastozen.services.storage.interface import (
    KeyValueStoreInterface,
    StorageError,
)


class InMemoryStore(KeyValueStoreInterface):
    """Dict-backed store."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        self._values.update(values)

    def delete_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored (handy in tests)."""
        return dict(self._values)


class JsonFileStore(KeyValueStoreInterface):
    """
    Single-file JSON store.

    The file holds one JSON object mapping keys to string values.
    A missing file is an empty store.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._values: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._values is None:
            if not self._path.exists():
                self._values = {}
            else:
                try:
                    raw = json.loads(self._path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    raise StorageError(f"Failed to read state file {self._path}: {e}")
                if not isinstance(raw, dict):
                    raise StorageError(f"State file {self._path} does not hold a JSON object")
                self._values = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        return self._values

    def _write(self, values: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(values, fh, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise StorageError(f"Failed to write state file {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        merged = dict(self._load())
        merged.update(values)
        self._write(merged)
        self._values = merged

    def delete_many(self, keys: Iterable[str]) -> None:
        doomed = set(keys)
        current = self._load()
        remaining = {k: v for k, v in current.items() if k not in doomed}
        if len(remaining) != len(current):
            self._write(remaining)
            self._values = remaining
