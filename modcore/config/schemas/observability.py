"""Observability schema (logging)."""
from __future__ import annotations

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    level: str = Field("info", pattern="^(debug|info|warn|error)$")
    format: str = Field("text", pattern="^(json|text)$")
