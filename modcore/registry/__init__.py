"""Mod manifest registry.

Responsibilities:
- Discover candidate packages (one folder per mod)
- Parse manifest.yaml / manifest.json into immutable ModManifest records
- Report unreadable manifests as ManifestError (per candidate, non-fatal)
"""
from .manifest import ModManifest  # noqa: F401
from .source import FolderHandle, FolderModSource, ModHandle, ModSource  # noqa: F401,E501
from .loader import ManifestReader, YamlManifestReader, load_manifest  # noqa: F401,E501

__all__ = [
    "ModManifest",
    "FolderHandle",
    "FolderModSource",
    "ModHandle",
    "ModSource",
    "ManifestReader",
    "YamlManifestReader",
    "load_manifest",
]
