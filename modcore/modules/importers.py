"""Importer descriptors + default wiring from config.

Importers are looked up in an explicit name → constructor table assembled
at startup; config `mods.importer` picks one. Unknown names fail fast.
"""
from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from modcore.catalogue import (
    ContentCatalogue,
    ContentDef,
    ContentImporter,
    ContentTypeRegistry,
    JsonContentImporter,
)
from modcore.config import AggregatedConfig, ConfigError, get_config
from modcore.registry import FolderModSource, YamlManifestReader
from modcore.state import JsonStateStore
from .mod_loader import ModLoader

ImporterInit = Callable[
    [ContentCatalogue, ContentTypeRegistry, AggregatedConfig], ContentImporter
]


@dataclass(frozen=True)
class ImporterDescriptor:
    name: str
    init: ImporterInit


def _init_json_importer(
    catalogue: ContentCatalogue,
    content_types: ContentTypeRegistry,
    cfg: AggregatedConfig,
) -> ContentImporter:
    return JsonContentImporter(
        catalogue, content_types, file_glob=cfg.content.file_glob
    )


class ImporterRegistry:
    def __init__(
        self, extra: Optional[Dict[str, ImporterDescriptor]] = None
    ) -> None:
        self._descriptors: Dict[str, ImporterDescriptor] = {
            "json": ImporterDescriptor("json", init=_init_json_importer),
        }
        if extra:
            self._descriptors.update(extra)

    def register(self, descriptor: ImporterDescriptor) -> None:
        self._descriptors[descriptor.name] = descriptor

    def names(self) -> list[str]:
        return sorted(self._descriptors)

    def get(self, name: str) -> ImporterDescriptor:
        desc = self._descriptors.get(name)
        if desc is None:
            raise ConfigError(
                f"Unknown importer '{name}' (registered: "
                f"{', '.join(self.names())})"
            )
        return desc


def build_content_types(
    cfg: Optional[AggregatedConfig] = None,
) -> ContentTypeRegistry:
    """Registry filled from `content.types` (folder → "module:Class").

    Unimportable modules, missing classes and non-ContentDef types raise
    ConfigError so a misconfigured host fails at startup.
    """
    cfg = cfg or get_config()
    registry = ContentTypeRegistry()
    for folder, ref in sorted(cfg.content.types.items()):
        module_name, _, class_name = ref.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigError(
                f"content.types.{folder}: cannot import {module_name}: {e}"
            ) from e
        def_type = getattr(module, class_name, None)
        if not isinstance(def_type, type) or not issubclass(
            def_type, ContentDef
        ):
            raise ConfigError(
                f"content.types.{folder}: {ref} is not a ContentDef subclass"
            )
        registry.register(folder, def_type)
    return registry


def build_mod_loader(
    cfg: Optional[AggregatedConfig] = None,
    catalogue: Optional[ContentCatalogue] = None,
    content_types: Optional[ContentTypeRegistry] = None,
    importers: Optional[ImporterRegistry] = None,
) -> ModLoader:
    """Wire folder discovery, YAML manifests and JSON state from config."""
    cfg = cfg or get_config()
    catalogue = catalogue if catalogue is not None else ContentCatalogue()
    if content_types is None:
        content_types = build_content_types(cfg)
    importers = importers or ImporterRegistry()
    importer = importers.get(cfg.mods.importer).init(
        catalogue, content_types, cfg
    )
    names = cfg.mods.manifest_names
    return ModLoader(
        FolderModSource(cfg.mods.root, names),
        YamlManifestReader(names),
        JsonStateStore(cfg.mods.state_file),
        importer,
        catalogue=catalogue,
        auto_reload=cfg.mods.auto_reload,
    )


__all__ = [
    "ImporterDescriptor",
    "ImporterRegistry",
    "build_content_types",
    "build_mod_loader",
]
