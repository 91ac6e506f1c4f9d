"""Manifest reader: parses one candidate's manifest file (YAML or JSON)."""
from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

import yaml
from pydantic import ValidationError
from yaml import YAMLError

from modcore.errors import ManifestError
from .manifest import ModManifest
from .source import DEFAULT_MANIFEST_NAMES, ModHandle

_log = logging.getLogger(__name__)


def _parse_text(raw_text: str, where: str) -> Any:
    """Parse YAML (JSON is a subset) with a small robustness tweak.

    If the text contains tab characters (common accidental edit), we re-try
    after replacing tabs with two spaces so that a single sloppy manifest
    does not drop the whole package.
    """
    try:
        return yaml.safe_load(raw_text)
    except YAMLError as e:
        if "\t" not in raw_text:
            raise ManifestError(f"Invalid manifest {where}: {e}") from e
        _log.warning("re-parsing manifest tabs->spaces: %s", where)
        try:
            return yaml.safe_load(raw_text.replace("\t", "  "))
        except YAMLError as e2:
            raise ManifestError(f"Invalid manifest {where}: {e2}") from e2


class ManifestReader(Protocol):  # pragma: no cover
    def read_manifest(self, handle: ModHandle) -> ModManifest:
        ...


class YamlManifestReader:
    def __init__(
        self, manifest_names: Sequence[str] = DEFAULT_MANIFEST_NAMES
    ) -> None:
        self._manifest_names = tuple(manifest_names)

    def read_manifest(self, handle: ModHandle) -> ModManifest:
        for name in self._manifest_names:
            stream = handle.open_file(name)
            if stream is None:
                continue
            where = f"{handle}/{name}"
            try:
                with stream:
                    raw_bytes = stream.read()
                raw_text = raw_bytes.decode("utf-8-sig")
            except (OSError, UnicodeDecodeError) as e:
                raise ManifestError(f"Unreadable manifest {where}: {e}") from e
            data = _parse_text(raw_text, where)
            if not isinstance(data, dict):
                raise ManifestError(
                    f"Invalid manifest {where}: top-level mapping expected"
                )
            try:
                return ModManifest.model_validate(data)
            except ValidationError as e:
                raise ManifestError(f"Invalid manifest {where}: {e}") from e
        raise ManifestError(
            f"No manifest ({', '.join(self._manifest_names)}) in {handle}"
        )


def load_manifest(handle: ModHandle) -> ModManifest:
    """Read a handle's manifest with the default file names."""
    return YamlManifestReader().read_manifest(handle)


__all__ = [
    "ManifestReader",
    "YamlManifestReader",
    "load_manifest",
    "DEFAULT_MANIFEST_NAMES",
]
