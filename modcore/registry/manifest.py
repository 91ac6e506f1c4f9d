"""Mod manifest schema."""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModManifest(BaseModel):
    id: str
    name: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    requires: Tuple[str, ...] = ()
    load_before: Tuple[str, ...] = Field(default=(), alias="loadBefore")
    load_after: Tuple[str, ...] = Field(default=(), alias="loadAfter")

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("id cannot be empty")
        return v.strip()

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, v):  # noqa: D401
        # YAML reads `version: 1.0` as a float
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("requires", "load_before", "load_after", mode="before")
    @classmethod
    def _unique_ids(cls, v):  # noqa: D401
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        seen: dict[str, None] = {}
        for item in v:
            ref = str(item).strip()
            if not ref:
                raise ValueError("referenced id cannot be empty")
            seen.setdefault(ref, None)
        return tuple(seen)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def references(self) -> Tuple[str, ...]:
        """Every id this manifest points at, requires first."""
        return self.requires + self.load_before + self.load_after
