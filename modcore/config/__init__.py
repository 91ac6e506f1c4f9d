"""Config subsystem public API.

Provides:
    get_config() -> AggregatedConfig (schema_version + section models)
    as_dict()    -> dict representation
    ConfigError  -> raised on validation / unknown key
"""

from .loader import (  # noqa: F401
    AggregatedConfig,
    get_config,
    as_dict,
    ConfigError,
    clear_config_cache,
)


def reset_for_tests() -> None:
    """Delegate to clear_config_cache() for test fixtures."""
    clear_config_cache()


__all__ = [
    "AggregatedConfig",
    "get_config",
    "as_dict",
    "ConfigError",
    "clear_config_cache",
    "reset_for_tests",
]
