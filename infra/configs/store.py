"""
Loaded-once store of the default, override and global configuration tables.

The store is constructed explicitly at startup and is read-only afterwards:
override tables are deep-frozen into read-only mappings and the records
themselves are frozen dataclasses.
"""

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from infra.configs.base import GLOBAL_SCOPE, GlobalSettings, StackConfig
from infra.configs.constants import (
    BASELINE_STACK_CONFIG,
    CONFIG_VERSION,
    DEFAULT_ENVIRONMENT,
    ENVIRONMENT_OVERRIDES,
    GLOBAL_SETTINGS,
)
from infra.errors import ConfigError


def _freeze(value: Any) -> Any:
    """Recursively wrap nested mappings in read-only proxies."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class ConfigStore:
    """
    Versioned configuration tables for every environment.

    Attributes:
        version: Version label of the tables
        defaults: Baseline stack configuration every environment starts from
        overrides: Environment name -> nested override mapping
        global_settings: Environment-independent settings, None until loaded
        default_environment: Fallback for unknown names, None disables fallback
    """
    version: str
    defaults: StackConfig
    overrides: Mapping[str, Mapping[str, Any]]
    global_settings: GlobalSettings | None = None
    default_environment: str | None = DEFAULT_ENVIRONMENT

    def __post_init__(self) -> None:
        if GLOBAL_SCOPE in self.overrides:
            raise ConfigError(
                f"'{GLOBAL_SCOPE}' is reserved and cannot hold a stack override table"
            )
        if self.default_environment is not None and self.default_environment not in self.overrides:
            raise ConfigError(
                f"Fallback environment '{self.default_environment}' has no override table",
                {"available": sorted(self.overrides)},
            )
        object.__setattr__(self, "overrides", _freeze(self.overrides))

    @property
    def environments(self) -> list[str]:
        """Names of every environment with an override table."""
        return list(self.overrides)

    def has_environment(self, environment: str) -> bool:
        """Check whether an override table exists for the environment."""
        return environment in self.overrides

    def overrides_for(self, environment: str) -> Mapping[str, Any]:
        """Get the override table of a known environment."""
        return self.overrides[environment]


@lru_cache
def get_config_store() -> ConfigStore:
    """
    Get the process-wide configuration store.

    Built from the static tables on first use and cached afterwards.

    Returns:
        ConfigStore: The shared, read-only store
    """
    return ConfigStore(
        version=CONFIG_VERSION,
        defaults=BASELINE_STACK_CONFIG,
        overrides=ENVIRONMENT_OVERRIDES,
        global_settings=GLOBAL_SETTINGS,
    )
