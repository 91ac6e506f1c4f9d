"""Central error taxonomy for the mod loader.

Every LoadError delivered on the error channel carries a `kind` from the
closed set below. Exceptions raised inside the core map onto the same codes
so the orchestrator can turn them into channel errors without guessing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

_ALLOWED_ERROR_TYPES = {
    # discovery / parsing
    "manifest-error",
    # resolution (fatal to a reload)
    "missing-dependency",
    "circular-dependency",
    # persistence
    "io-error",
    # import
    "content-error",
    # config
    "config-invalid",
    "config-out-of-range",
    # infra
    "event-handler-error",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


class ErrorKind(str, Enum):
    MANIFEST_ERROR = "manifest-error"
    MISSING_DEPENDENCY = "missing-dependency"
    CIRCULAR_DEPENDENCY = "circular-dependency"
    IO_ERROR = "io-error"
    CONTENT_ERROR = "content-error"

    @property
    def fatal(self) -> bool:
        return self in (
            ErrorKind.MISSING_DEPENDENCY,
            ErrorKind.CIRCULAR_DEPENDENCY,
        )


@dataclass(frozen=True, slots=True)
class LoadError:
    """One problem observed during a reload or a state mutation."""

    kind: ErrorKind
    message: str
    involved_ids: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_error_type(self.kind.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "involved_ids": list(self.involved_ids),
        }


class ModLoaderError(Exception):
    """Base mod loader exception."""

    kind: ErrorKind = ErrorKind.MANIFEST_ERROR

    def __init__(self, message: str, involved_ids: Tuple[str, ...] = ()):
        super().__init__(message)
        self.involved_ids = tuple(involved_ids)

    def to_load_error(self) -> LoadError:
        return LoadError(self.kind, str(self), self.involved_ids)


class ManifestError(ModLoaderError):
    """Raised when a candidate's manifest is missing or malformed."""

    kind = ErrorKind.MANIFEST_ERROR


class StateStoreError(ModLoaderError):
    """Raised when persisted state cannot be read or written."""

    kind = ErrorKind.IO_ERROR


class ResolutionError(ModLoaderError):
    """Raised when no valid load order exists.

    Reasons: a referenced id is missing, or loadBefore/loadAfter form a cycle.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        involved_ids: Tuple[str, ...] = (),
    ):
        super().__init__(message, involved_ids)
        self.kind = kind


__all__ = [
    "validate_error_type",
    "ErrorKind",
    "LoadError",
    "ModLoaderError",
    "ManifestError",
    "StateStoreError",
    "ResolutionError",
]
