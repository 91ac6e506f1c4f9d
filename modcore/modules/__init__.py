"""Mod loading orchestration.

Defines:
 - ModLoader: reload / enable / move / error channel over the collaborators
 - LoadedPackage, ReloadResult: read-side snapshots of one reload
 - ImporterDescriptor / ImporterRegistry: name → importer constructor table
 - build_content_types: content folder table from config
 - build_mod_loader: default folder + YAML + JSON wiring from config
"""
from __future__ import annotations

from .mod_loader import LoadedPackage, ModLoader, ReloadResult  # noqa: F401
from .importers import (  # noqa: F401
    ImporterDescriptor,
    ImporterRegistry,
    build_content_types,
    build_mod_loader,
)

__all__ = [
    "ModLoader",
    "LoadedPackage",
    "ReloadResult",
    "ImporterDescriptor",
    "ImporterRegistry",
    "build_content_types",
    "build_mod_loader",
]
