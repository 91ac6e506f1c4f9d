"""Content catalogue: runtime registry of imported content definitions."""
from __future__ import annotations

from .content import ContentDef, ContentTypeRegistry  # noqa: F401
from .catalogue import CatalogueEntry, ContentCatalogue  # noqa: F401
from .importer import ContentImporter, JsonContentImporter  # noqa: F401

__all__ = [
    "ContentDef",
    "ContentTypeRegistry",
    "CatalogueEntry",
    "ContentCatalogue",
    "ContentImporter",
    "JsonContentImporter",
]
