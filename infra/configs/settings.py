"""
Process settings for the deployment program.

Reads INFRA_* environment variables (and an optional .env file) for the
values that select what gets deployed, as opposed to the configuration
tables that describe how.

Dependencies: pydantic_settings
System role: Entry-point settings (environment selection, logging)
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from infra.configs.constants import DEFAULT_ENVIRONMENT, PROJECT_NAME


class DeploymentSettings(BaseSettings):
    """Settings for a single deployment invocation."""

    model_config = SettingsConfigDict(
        env_prefix="INFRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default=DEFAULT_ENVIRONMENT,
        description="Target environment (dev, staging, ...)",
    )
    project: str = Field(
        default=PROJECT_NAME,
        description="Project prefix for resource names",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    owns_global_resources: bool = Field(
        default=True,
        description="Create the shared registry and CI identity in this stack",
    )


@lru_cache
def get_settings() -> DeploymentSettings:
    """
    Get deployment settings singleton.

    Returns:
        DeploymentSettings: Settings loaded once from the environment
    """
    return DeploymentSettings()
