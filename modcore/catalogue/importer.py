"""JSON content importer.

Reads every `*.json` file in each registered content folder of a package.
A file holds either a single object or an array of objects:

    [ { ...item A... }, { ...item B... } ]

Bad files and bad entries are logged and counted; the rest of the package
still imports.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, Type

from pydantic import ValidationError

from modcore import metrics
from modcore.registry.source import ModHandle
from .catalogue import ContentCatalogue
from .content import ContentDef, ContentTypeRegistry

_log = logging.getLogger(__name__)


class ContentImporter(Protocol):  # pragma: no cover
    def import_package(self, handle: ModHandle, mod_id: str) -> int:
        ...


class JsonContentImporter:
    def __init__(
        self,
        catalogue: ContentCatalogue,
        registry: ContentTypeRegistry,
        file_glob: str = "*.json",
    ) -> None:
        self._catalogue = catalogue
        self._registry = registry
        self._file_glob = file_glob

    @property
    def catalogue(self) -> ContentCatalogue:
        return self._catalogue

    def import_package(self, handle: ModHandle, mod_id: str) -> int:
        """Import one package; returns the number of definitions stored."""
        _log.info("[%s] importing content definitions from %s", mod_id, handle)
        stored = 0
        for folder, def_type in self._registry.items():
            files = handle.list_files(folder, self._file_glob)
            if files:
                _log.debug(
                    "[%s] importing %s definitions from %s/%s",
                    mod_id,
                    def_type.__name__,
                    handle,
                    folder,
                )
            for fp in files:
                stored += self._import_file(fp, def_type, mod_id)
        return stored

    def _import_file(
        self, path: Path, def_type: Type[ContentDef], mod_id: str
    ) -> int:
        try:
            token = json.loads(path.read_text(encoding="utf-8-sig"))
        except json.JSONDecodeError as e:
            metrics.inc_content_file_failed("malformed_json")
            _log.error(
                "[%s] malformed JSON in %s (line %d, col %d): %s",
                mod_id,
                path,
                e.lineno,
                e.colno,
                e.msg,
            )
            return 0
        except (OSError, UnicodeDecodeError) as e:
            metrics.inc_content_file_failed("unreadable")
            _log.error("[%s] cannot read %s: %s", mod_id, path, e)
            return 0
        elements = token if isinstance(token, list) else [token]
        stored = 0
        for element in elements:
            if self._register(element, def_type, path, mod_id):
                stored += 1
        return stored

    def _register(
        self,
        element: Any,
        def_type: Type[ContentDef],
        path: Path,
        mod_id: str,
    ) -> bool:
        if not isinstance(element, dict) or not str(
            element.get("id") or ""
        ).strip():
            metrics.inc_content_file_failed("missing_id")
            _log.warning(
                "[%s] ignored entry in %s: missing \"id\"", mod_id, path
            )
            return False
        try:
            definition = def_type.model_validate(
                {**element, "source_file": str(path)}
            )
        except ValidationError as e:
            metrics.inc_content_file_failed("validation")
            _log.error(
                "[%s] failed to deserialize %s in %s: %s",
                mod_id,
                def_type.__name__,
                path,
                e,
            )
            return False
        previous = self._catalogue.add_or_replace(
            definition, source_file=str(path), mod_id=mod_id
        )
        if previous is not None:
            _log.warning(
                "[%s] duplicate id \"%s\" in %s; replacing definition from %s",
                mod_id,
                definition.id,
                path,
                previous.source_file or "unknown source",
            )
        _log.debug(
            "[%s] registered %s \"%s\" from %s",
            mod_id,
            def_type.__name__,
            definition.id,
            path.name,
        )
        return True


__all__ = ["ContentImporter", "JsonContentImporter"]
