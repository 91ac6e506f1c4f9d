"""Mod loader schemas: discovery, state persistence, content import."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModsConfig(BaseModel):
    root: str = "mods"
    state_file: str = "data/modstate.json"
    manifest_names: List[str] = Field(
        default_factory=lambda: [
            "manifest.yaml",
            "manifest.yml",
            "manifest.json",
        ]
    )
    importer: str = Field("json", description="registered importer name")
    auto_reload: bool = Field(
        False, description="enable/move trigger a reload by default"
    )

    model_config = ConfigDict(extra="forbid")


class ContentConfig(BaseModel):
    file_glob: str = "*.json"
    types: Dict[str, str] = Field(
        default_factory=dict,
        description="content folder -> \"package.module:ClassName\"",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("types")
    @classmethod
    def _type_refs(cls, v: Dict[str, str]) -> Dict[str, str]:  # noqa: D401
        for folder, ref in v.items():
            module, _, name = ref.partition(":")
            if not folder.strip() or not module or not name:
                raise ValueError(
                    f"content type for '{folder}' must be 'module:Class'"
                    f", got '{ref}'"
                )
        return v
