"""Configuration loading & validation.

Per-section schemas live in `modcore.config.schemas.*`; AggregatedConfig
holds the validated sub-schemas.

Precedence (last wins): base.yaml → overrides.local.yaml → ENV (MODHOST__*).

Unknown sub-schema keys are rejected.
"""
from __future__ import annotations

import logging
import os
import pathlib
import threading
from functools import lru_cache
from typing import Any, Dict, List, Type

import yaml
from modcore import metrics
from modcore.errors import validate_error_type
from pydantic import BaseModel, ConfigDict

from .schemas.mods import ContentConfig, ModsConfig
from .schemas.observability import LoggingConfig


class AggregatedConfig(BaseModel):
    schema_version: int = 1
    mods: ModsConfig = ModsConfig()
    content: ContentConfig = ContentConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = ConfigDict(extra="forbid")


DEFAULT_CONFIG_DIR = "configs"
ENV_PREFIX = "MODHOST__"

SUB_SCHEMA_CLASSES: Dict[str, Type[BaseModel]] = {
    "mods": ModsConfig,
    "content": ContentConfig,
    "logging": LoggingConfig,
}

_log = logging.getLogger(__name__)


class ConfigError(Exception):
    pass


def _load_yaml_if_exists(path: pathlib.Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name}: top-level mapping expected")
    return data


def _merge_dict(
    base: Dict[str, Any], override: Dict[str, Any]
) -> Dict[str, Any]:
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            base[k] = _merge_dict(base[k], v)
        else:
            base[k] = v
    return base


def _cast_env_value(value: str) -> Any:
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    if "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _apply_env(cfg: Dict[str, Any]) -> None:
    prefix_len = len(ENV_PREFIX)
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        path_parts = env_key[prefix_len:].lower().split("__")
        target = cfg
        for part in path_parts[:-1]:
            if part not in target or not isinstance(target[part], dict):
                target[part] = {}
            target = target[part]
        target[path_parts[-1]] = _cast_env_value(value)
        dotted_path = ".".join(path_parts)
        metrics.inc("env_override_total", {"path": dotted_path})
        _log.info(
            "config-env-override path=%s value=*** source=env", dotted_path
        )


_lock = threading.Lock()


def _resolve_config_dir() -> pathlib.Path:
    """Resolve config directory each call honoring env var changes."""
    return pathlib.Path(os.getenv("MODHOST_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def _migrate_legacy(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply in-place migrations for configs without schema_version."""
    if "schema_version" not in data:
        _log.warning("config-migration: schema_version missing → assuming 1")
        data["schema_version"] = 1
    return data


def _validate_sub_schemas(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Validate each known section via its schema class."""
    validated: Dict[str, Any] = {}
    for name, cls in SUB_SCHEMA_CLASSES.items():
        if name in raw:
            try:
                validated[name] = cls.model_validate(raw[name] or {})
            except Exception as e:  # noqa: BLE001
                raise ConfigError(
                    f"Validation failed for section '{name}': {e}"
                ) from e
    return validated


def _normalize_and_validate(raw: Dict[str, Any]) -> None:
    """Apply cross-field normalizations and bounds validation.

    Normalizations:
      - mods.manifest_names: single string -> one-element list.
    Validations (error → raise):
      - mods.root non-empty
      - mods.state_file non-empty
      - mods.manifest_names non-empty
    """
    errors: List[tuple[str, str, str]] = []  # (path, code, msg)
    mods = raw.get("mods")
    if isinstance(mods, dict):
        names = mods.get("manifest_names")
        if isinstance(names, str):
            mods["manifest_names"] = [names]
        for key in ("root", "state_file"):
            value = mods.get(key)
            if value is not None and not str(value).strip():
                errors.append(
                    (f"mods.{key}", "config-invalid", "must not be empty")
                )
        if "manifest_names" in mods and not mods["manifest_names"]:
            errors.append(
                (
                    "mods.manifest_names",
                    "config-out-of-range",
                    "at least one manifest name required",
                )
            )

    if errors:
        for path, code, _ in errors:
            metrics.inc(
                "config_validation_errors_total",
                {"path": path, "code": code},
            )
        for _, code, _ in errors:
            validate_error_type(code)
        details = ", ".join(f"{p}:{c}:{m}" for p, c, m in errors)
        raise ConfigError(f"config validation failed: {details}")


@lru_cache(maxsize=1)
def get_config() -> AggregatedConfig:  # noqa: D401
    with _lock:
        cfg_dir = _resolve_config_dir()
        base_cfg = _load_yaml_if_exists(cfg_dir / "base.yaml")
        overrides_cfg = _load_yaml_if_exists(cfg_dir / "overrides.local.yaml")
        merged = _merge_dict(base_cfg, overrides_cfg)
        _apply_env(merged)
        migrated = _migrate_legacy(merged)
        _normalize_and_validate(migrated)
        validated_sub = _validate_sub_schemas(migrated)
        try:
            agg = AggregatedConfig.model_validate(
                {**migrated, **validated_sub}
            )
        except Exception as e:  # noqa: BLE001
            raise ConfigError(str(e)) from e
        return agg


def clear_config_cache() -> None:
    """Clear cached config (primarily for tests)."""
    get_config.cache_clear()


def as_dict() -> Dict[str, Any]:
    return get_config().model_dump()
