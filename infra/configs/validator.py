"""
Domain validation for resolved configuration.

One pure predicate per configuration record. Each returns None when the
record is valid and raises ValidationError on the first violated rule.
Independent records (network, database, compute) are validated
independently so every invalid record can be reported in one pass.
"""

import re
from typing import Any, Callable

from infra.configs.base import (
    CiIdentityConfig,
    ComputeConfig,
    DatabaseConfig,
    GlobalSettings,
    InstanceClass,
    InstanceSize,
    NetworkConfig,
    RegistryConfig,
    StackConfig,
    SubnetTier,
)
from infra.configs.resolver import ConfigResolver
from infra.errors import ValidationError, ValidationErrorGroup
from infra.utils.logger import get_logger

logger = get_logger(__name__)

CIDR_PATTERN = re.compile(r"(\d{1,3}\.){3}\d{1,3}/\d{1,2}", re.ASCII)
ECR_REPOSITORY_NAME_PATTERN = re.compile(r"[a-z0-9](?:[a-z0-9\-_.]*[a-z0-9])?", re.ASCII)


def _check_int(field: str, value: Any) -> None:
    # bool is an int subclass but never a valid count
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(field, "int", value)


def _check_range(field: str, value: Any, low: int, high: int | None = None) -> None:
    _check_int(field, value)
    if high is None:
        if value < low:
            raise ValidationError(field, f"min[{low}]", value)
    elif value < low or value > high:
        raise ValidationError(field, f"range[{low},{high}]", value)


def _check_non_empty(field: str, value: Any) -> None:
    if not value:
        raise ValidationError(field, "non-empty", value)


def _check_member(field: str, value: Any, enum_type: type) -> None:
    if not isinstance(value, enum_type):
        raise ValidationError(field, f"enum[{enum_type.__name__}]", value)


def validate_network_config(config: NetworkConfig) -> None:
    """Validate VPC layout: CIDR syntax, AZ count, NAT count, subnet tiers."""
    if not isinstance(config.cidr, str) or not CIDR_PATTERN.fullmatch(config.cidr):
        raise ValidationError("network.cidr", "ipv4-cidr", config.cidr)
    _check_range("network.max_azs", config.max_azs, 1, 6)
    _check_range("network.nat_gateway_count", config.nat_gateway_count, 0)
    for name, group in config.subnet_groups.items():
        _check_member(f"network.subnet_groups.{name}.tier", group.tier, SubnetTier)


def validate_database_config(config: DatabaseConfig) -> None:
    """Validate storage, port, backup retention and database name."""
    _check_range("database.allocated_storage_gib", config.allocated_storage_gib, 20, 65536)
    _check_range("database.port", config.port, 1024, 65535)
    _check_range("database.backup_retention_days", config.backup_retention_days, 0, 35)
    _check_non_empty("database.name", config.name)
    _check_member("database.instance_class", config.instance_class, InstanceClass)
    _check_member("database.instance_size", config.instance_size, InstanceSize)


def validate_compute_config(config: ComputeConfig) -> None:
    """Validate memory, timeout and reserved concurrency."""
    _check_range("compute.memory_mib", config.memory_mib, 128, 10240)
    _check_range("compute.timeout_seconds", config.timeout_seconds, 1, 900)
    if config.reserved_concurrency is not None:
        _check_range("compute.reserved_concurrency", config.reserved_concurrency, 0, 1000)


def validate_ci_identity_config(config: CiIdentityConfig) -> None:
    """Validate GitHub owner, repository and optional branch list."""
    _check_non_empty("ci_identity.owner", config.owner)
    _check_non_empty("ci_identity.repo_name", config.repo_name)
    if config.branches is not None and len(config.branches) == 0:
        raise ValidationError("ci_identity.branches", "non-empty-if-present", config.branches)


def validate_registry_config(config: RegistryConfig) -> None:
    """Validate the ECR repository name."""
    _check_non_empty("registry.repo_name", config.repo_name)
    if not ECR_REPOSITORY_NAME_PATTERN.fullmatch(config.repo_name):
        raise ValidationError("registry.repo_name", "ecr-repository-name", config.repo_name)


def _collect(checks: list[tuple[Callable[[Any], None], Any]]) -> list[ValidationError]:
    violations = []
    for check, record in checks:
        try:
            check(record)
        except ValidationError as exc:
            violations.append(exc)
    return violations


def _raise_violations(violations: list[ValidationError]) -> None:
    if len(violations) == 1:
        raise violations[0]
    if violations:
        raise ValidationErrorGroup(violations)


def collect_stack_violations(config: StackConfig) -> list[ValidationError]:
    """
    Validate every record of a stack config independently.

    Returns:
        One ValidationError per invalid record; empty when all are valid
    """
    return _collect([
        (validate_network_config, config.network),
        (validate_database_config, config.database),
        (validate_compute_config, config.compute),
    ])


def validate_stack_config(config: StackConfig) -> StackConfig:
    """
    Validate a stack config, reporting every invalid record.

    Raises:
        ValidationError: A single invalid record
        ValidationErrorGroup: Several invalid records
    """
    _raise_violations(collect_stack_violations(config))
    return config


def validate_global_settings(settings: GlobalSettings) -> GlobalSettings:
    """Validate the registry and CI identity settings."""
    _raise_violations(_collect([
        (validate_ci_identity_config, settings.ci_identity),
        (validate_registry_config, settings.registry),
    ]))
    return settings


def validate_environment(environment: str, resolver: ConfigResolver | None = None) -> StackConfig:
    """
    Resolve and validate the stack config of an environment.

    Args:
        environment: Requested environment name
        resolver: Resolver to use; defaults to one over the shared store

    Returns:
        StackConfig: The validated configuration

    Raises:
        UnknownEnvironmentError: For 'global', or an unknown name without fallback
        ValidationError: If any record violates its constraints
    """
    resolver = resolver or ConfigResolver()
    config = resolver.resolve(environment)
    validate_stack_config(config)
    logger.info("Validated stack configuration for environment '%s'", environment)
    return config
