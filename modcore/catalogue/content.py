"""Content definition base + explicit content-type registration table."""
from __future__ import annotations

from threading import RLock
from typing import Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, field_validator


class ContentDef(BaseModel):
    """Common contract for every piece of moddable data.

    `id` is unique per definition type, compared case-insensitively.
    """

    id: str
    source_file: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("id cannot be empty")
        return v.strip()


class ContentTypeRegistry:
    """Folder name → ContentDef subtype, filled explicitly at startup.

    Mods place files for a type in `<mod>/<folder>/`.
    """

    def __init__(self) -> None:
        self._types: Dict[str, Type[ContentDef]] = {}
        self._lock = RLock()

    def register(self, folder: str, def_type: Type[ContentDef]) -> None:
        if not folder or not folder.strip():
            raise ValueError("content folder cannot be empty")
        if not issubclass(def_type, ContentDef):
            raise TypeError(f"{def_type!r} is not a ContentDef")
        with self._lock:
            existing = self._types.get(folder)
            if existing is not None and existing is not def_type:
                raise ValueError(
                    f"folder '{folder}' already bound to {existing.__name__}"
                )
            self._types[folder] = def_type

    def get(self, folder: str) -> Optional[Type[ContentDef]]:
        with self._lock:
            return self._types.get(folder)

    def folder_for(self, def_type: Type[ContentDef]) -> Optional[str]:
        with self._lock:
            for folder, t in self._types.items():
                if t is def_type:
                    return folder
        return None

    def items(self) -> List[Tuple[str, Type[ContentDef]]]:
        with self._lock:
            return sorted(self._types.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._types)


__all__ = ["ContentDef", "ContentTypeRegistry"]
