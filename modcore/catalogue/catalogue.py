"""Thread-safe registry of every imported content definition.

Keyed by (concrete definition type, casefolded id). A later write for the
same key replaces the earlier one together with its provenance, which is how
high-priority "override" mods replace entries from "base" mods.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Dict, List, Optional, Type, TypeVar

from modcore import metrics
from .content import ContentDef

T = TypeVar("T", bound=ContentDef)


@dataclass(frozen=True, slots=True)
class CatalogueEntry:
    definition: ContentDef
    source_file: Optional[str] = None
    mod_id: Optional[str] = None


def _key(def_id: str) -> str:
    return def_id.casefold()


class ContentCatalogue:
    def __init__(self) -> None:
        self._tables: Dict[type, Dict[str, CatalogueEntry]] = {}
        self._lock = RLock()

    def add_or_replace(
        self,
        definition: ContentDef,
        source_file: str | None = None,
        mod_id: str | None = None,
    ) -> Optional[CatalogueEntry]:
        """Store under the definition's runtime type; last write wins.

        Returns the replaced entry, if any.
        """
        if source_file is None:
            source_file = definition.source_file
        elif definition.source_file != source_file:
            definition = definition.model_copy(
                update={"source_file": source_file}
            )
        entry = CatalogueEntry(definition, source_file, mod_id)
        def_type = type(definition)
        with self._lock:
            table = self._tables.setdefault(def_type, {})
            previous = table.get(_key(definition.id))
            table[_key(definition.id)] = entry
        metrics.inc_catalogue_write(def_type.__name__, previous is not None)
        return previous

    def try_get_entry(
        self, def_type: Type[ContentDef], def_id: str
    ) -> Optional[CatalogueEntry]:
        with self._lock:
            table = self._tables.get(def_type)
            if table is None:
                return None
            return table.get(_key(def_id))

    def try_get(self, def_type: Type[T], def_id: str) -> Optional[T]:
        entry = self.try_get_entry(def_type, def_id)
        return entry.definition if entry else None  # type: ignore[return-value]

    def get_all(self, def_type: Type[T]) -> List[T]:
        with self._lock:
            table = self._tables.get(def_type, {})
            return [e.definition for e in table.values()]  # type: ignore[misc]

    def entries(self, def_type: Type[ContentDef]) -> List[CatalogueEntry]:
        with self._lock:
            return list(self._tables.get(def_type, {}).values())

    def types(self) -> List[type]:
        with self._lock:
            return [t for t, table in self._tables.items() if table]

    def count(self, def_type: Type[ContentDef] | None = None) -> int:
        with self._lock:
            if def_type is not None:
                return len(self._tables.get(def_type, {}))
            return sum(len(t) for t in self._tables.values())

    def clear(self) -> int:
        """Empty every table (full hot-reload only). Returns entries dropped."""
        with self._lock:
            dropped = sum(len(t) for t in self._tables.values())
            self._tables = {}
        return dropped


__all__ = ["ContentCatalogue", "CatalogueEntry"]
