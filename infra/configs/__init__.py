"""
Configuration module for the infrastructure program.

Provides typed configuration records, the loaded-once table store,
environment resolution and domain validation.
"""

from infra.configs.base import (
    GLOBAL_SCOPE,
    CiIdentityConfig,
    ComputeConfig,
    DatabaseConfig,
    GlobalSettings,
    InstanceClass,
    InstanceSize,
    NetworkConfig,
    RegistryConfig,
    StackConfig,
    SubnetGroupConfig,
    SubnetTier,
)
from infra.configs.resolver import ConfigResolver
from infra.configs.settings import DeploymentSettings, get_settings
from infra.configs.store import ConfigStore, get_config_store
from infra.configs.validator import (
    collect_stack_violations,
    validate_environment,
    validate_global_settings,
    validate_stack_config,
)

__all__ = [
    "GLOBAL_SCOPE",
    "CiIdentityConfig",
    "ComputeConfig",
    "ConfigResolver",
    "ConfigStore",
    "DatabaseConfig",
    "DeploymentSettings",
    "GlobalSettings",
    "InstanceClass",
    "InstanceSize",
    "NetworkConfig",
    "RegistryConfig",
    "StackConfig",
    "SubnetGroupConfig",
    "SubnetTier",
    "collect_stack_violations",
    "get_config_store",
    "get_settings",
    "validate_environment",
    "validate_global_settings",
    "validate_stack_config",
]
