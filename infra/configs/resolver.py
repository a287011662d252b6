"""
Environment configuration resolver.

Merges the baseline stack configuration with an environment's override
table. Unknown environment names fall back to the store's default
environment with a warning instead of failing, so a typo in a pipeline
variable never blocks a deployment. That fallback can mask genuine
misconfiguration; construct the store with ``default_environment=None``
to make unknown names fatal.
"""

from infra.configs.base import GLOBAL_SCOPE, GlobalSettings, StackConfig
from infra.configs.merge import deep_merge
from infra.configs.store import ConfigStore, get_config_store
from infra.errors import ConfigError, UnknownEnvironmentError
from infra.utils.logger import get_logger

logger = get_logger(__name__)


class ConfigResolver:
    """Resolves stack and global configuration from a ConfigStore."""

    def __init__(self, store: ConfigStore | None = None) -> None:
        self.store = store or get_config_store()

    def resolve_environment_name(self, environment: str) -> str:
        """
        Map a requested environment name onto one with an override table.

        Args:
            environment: Requested environment name

        Returns:
            The requested name if known, else the default environment

        Raises:
            UnknownEnvironmentError: For the reserved global scope, or an
                unknown name when no fallback is configured
        """
        if environment == GLOBAL_SCOPE:
            raise UnknownEnvironmentError(environment, self.store.environments)

        if self.store.has_environment(environment):
            return environment

        fallback = self.store.default_environment
        if fallback is None:
            raise UnknownEnvironmentError(environment, self.store.environments)

        logger.warning(
            "Unknown environment '%s', falling back to '%s'", environment, fallback
        )
        return fallback

    def resolve(self, environment: str) -> StackConfig:
        """
        Resolve the full stack configuration for an environment.

        Args:
            environment: Environment name (dev, staging, ...)

        Returns:
            StackConfig: Baseline overlaid with the environment's overrides

        Raises:
            UnknownEnvironmentError: See resolve_environment_name
            ConfigError: If the override table does not fit the schema
        """
        name = self.resolve_environment_name(environment)
        config = deep_merge(self.store.defaults, self.store.overrides_for(name))
        logger.debug("Resolved '%s' config (tables v%s)", name, self.store.version)
        return config

    def resolve_global(self) -> GlobalSettings:
        """
        Get the environment-independent settings.

        Raises:
            ConfigError: If the global table has not been loaded
        """
        if self.store.global_settings is None:
            raise ConfigError("Global settings have not been loaded")
        return self.store.global_settings
