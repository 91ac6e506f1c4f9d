"""State stores: where the ModStateTable survives restarts."""
from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from modcore.errors import StateStoreError
from .table import ModStateTable

_log = logging.getLogger(__name__)


class StateStore(Protocol):  # pragma: no cover
    def load(self) -> ModStateTable:
        ...

    def save(self, table: ModStateTable) -> None:
        ...


class JsonStateStore:
    """JSON document on disk.

    Missing file → empty table. Unreadable or corrupt file → StateStoreError
    (the caller decides how to proceed). Saves go through a temp file and an
    atomic rename so a crash never leaves a truncated document behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ModStateTable:
        if not self._path.exists():
            return ModStateTable()
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StateStoreError(
                f"Cannot read mod state {self._path}: {e}"
            ) from e
        except UnicodeDecodeError as e:
            raise StateStoreError(
                f"Corrupt mod state {self._path}: not UTF-8 ({e.reason})"
            ) from e
        if not raw.strip():
            return ModStateTable()
        try:
            return ModStateTable.model_validate_json(raw)
        except ValidationError as e:
            raise StateStoreError(
                f"Corrupt mod state {self._path}: {e}"
            ) from e

    def save(self, table: ModStateTable) -> None:
        payload = table.model_dump_json(indent=2)
        tmp_name: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StateStoreError(
                f"Cannot write mod state {self._path}: {e}"
            ) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    _log.debug("stale temp state file %s left", tmp_name)


class MemoryStateStore:
    """In-process store (embedding, tests)."""

    def __init__(self, table: Optional[ModStateTable] = None) -> None:
        self._table = table if table is not None else ModStateTable()
        self._lock = threading.Lock()
        self.saves = 0

    def load(self) -> ModStateTable:
        with self._lock:
            return self._table

    def save(self, table: ModStateTable) -> None:
        with self._lock:
            self._table = table
            self.saves += 1


__all__ = ["StateStore", "JsonStateStore", "MemoryStateStore"]
