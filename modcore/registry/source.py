"""Package handles and folder-based discovery.

A handle is the opaque identity of one candidate package. The core only
needs `open_file`; content importers may also enumerate files.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Protocol, Sequence

DEFAULT_MANIFEST_NAMES = ("manifest.yaml", "manifest.yml", "manifest.json")

_log = logging.getLogger(__name__)


class ModHandle(Protocol):  # pragma: no cover
    @property
    def path(self) -> Path:
        ...

    def open_file(self, rel: str) -> Optional[BinaryIO]:
        ...

    def list_files(self, subdir: str, pattern: str = "*") -> List[Path]:
        ...


class ModSource(Protocol):  # pragma: no cover
    def discover(self) -> Iterator[ModHandle]:
        ...


@dataclass(frozen=True, slots=True)
class FolderHandle:
    path: Path

    def open_file(self, rel: str) -> Optional[BinaryIO]:
        fp = self.path / rel
        if not fp.is_file():
            return None
        return fp.open("rb")

    def list_files(self, subdir: str, pattern: str = "*") -> List[Path]:
        folder = self.path / subdir
        if not folder.is_dir():
            return []
        return sorted(p for p in folder.glob(pattern) if p.is_file())

    def __str__(self) -> str:
        return str(self.path)


class FolderModSource:
    """Every sub-directory of `root` holding a manifest is a candidate."""

    def __init__(
        self,
        root: str | Path,
        manifest_names: Sequence[str] = DEFAULT_MANIFEST_NAMES,
    ) -> None:
        self._root = Path(root)
        self._manifest_names = tuple(manifest_names)

    @property
    def root(self) -> Path:
        return self._root

    def discover(self) -> Iterator[FolderHandle]:
        if not self._root.is_dir():
            _log.debug("mods root %s missing; nothing to discover", self._root)
            return
        for entry in sorted(self._root.iterdir()):
            if not entry.is_dir():
                continue
            if any((entry / n).is_file() for n in self._manifest_names):
                yield FolderHandle(entry)


__all__ = [
    "DEFAULT_MANIFEST_NAMES",
    "ModHandle",
    "ModSource",
    "FolderHandle",
    "FolderModSource",
]
