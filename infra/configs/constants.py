"""
Infrastructure constants and configuration tables.

Contains the baseline stack configuration, the per-environment override
tables, and the global settings. These tables are the only configuration
surface the program reads.
"""

from typing import Any, Final

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
    SubnetGroupConfig,
    SubnetTier,
)

# Bumped whenever the baseline or an override table changes shape
CONFIG_VERSION: Final[str] = "2024.11"

# Environment used when an unknown name is requested
DEFAULT_ENVIRONMENT: Final[str] = "dev"

PROJECT_NAME: Final[str] = "lambda-app"

# Default tags applied to all resources
DEFAULT_TAGS: Final[dict[str, str]] = {
    "Infra": "LambdaAppStack",
    "ManagedBy": "pulumi",
}

# GitHub Actions OIDC
GITHUB_OIDC_URL: Final[str] = "https://token.actions.githubusercontent.com"
GITHUB_OIDC_HOST: Final[str] = "token.actions.githubusercontent.com"
GITHUB_OIDC_AUDIENCE: Final[str] = "sts.amazonaws.com"
GITHUB_OIDC_THUMBPRINTS: Final[list[str]] = [
    "6938fd4d98bab03faadb97b34396831e3780aea1",
    "1c58a3a8518e8759bf075b76b750d4f2df264fcd",
]

# Namespace prefix CI may publish deployment metrics under
DEPLOYMENT_METRICS_NAMESPACE: Final[str] = "Deployment/*"

DEPLOYMENT_ROLE_MAX_SESSION_SECONDS: Final[int] = 3600

DATABASE_ENGINE_VERSION: Final[str] = "17"
DATABASE_USERNAME: Final[str] = "postgres"

LOG_RETENTION_DAYS: Final[int] = 30

BASELINE_STACK_CONFIG: Final[StackConfig] = StackConfig(
    network=NetworkConfig(
        name="main_vpc",
        cidr="10.0.0.0/16",
        max_azs=2,
        nat_gateway_count=0,
        subnet_groups={
            "frontend": SubnetGroupConfig(cidr_mask=24, tier=SubnetTier.PUBLIC),
            "app": SubnetGroupConfig(cidr_mask=24, tier=SubnetTier.PRIVATE_EGRESS),
            "db": SubnetGroupConfig(cidr_mask=24, tier=SubnetTier.PRIVATE_ISOLATED),
        },
    ),
    database=DatabaseConfig(
        instance_class=InstanceClass.BURSTABLE3,
        instance_size=InstanceSize.MICRO,
        allocated_storage_gib=20,
        name="postgres",
        port=5432,
        backup_retention_days=3,
        deletion_protection=False,
    ),
    compute=ComputeConfig(
        function_name=None,
        memory_mib=512,
        timeout_seconds=60,
        reserved_concurrency=None,
        image_tag="latest",
    ),
)

# Field-level overrides per environment; absent keys keep the baseline
ENVIRONMENT_OVERRIDES: Final[dict[str, dict[str, Any]]] = {
    "dev": {},
    "staging": {
        "network": {
            "max_azs": 3,
            "nat_gateway_count": 1,  # NAT gateway for staging
        },
        "database": {
            "instance_size": InstanceSize.SMALL,
            "allocated_storage_gib": 50,
            "backup_retention_days": 7,
            "deletion_protection": True,
        },
        "compute": {
            "memory_mib": 1024,
            "timeout_seconds": 90,
            "reserved_concurrency": 10,
        },
    },
}

GLOBAL_SETTINGS: Final[GlobalSettings] = GlobalSettings(
    registry=RegistryConfig(repo_name="lambda-app"),
    ci_identity=CiIdentityConfig(
        owner="lambda-app-org",
        repo_name="lambda-app-infra",
        branches=("main", "develop"),
    ),
)
