"""
Pulumi program entry point for the Lambda application stack.

1. Settings and logging
2. Environment resolution and configuration validation
3. Resource graph (network -> database, registry -> compute, identity)
4. Derived security policies
5. Materialization in dependency order
6. Exports
"""

import pulumi
import pulumi_aws as aws

from infra.configs import (
    ConfigResolver,
    get_settings,
    validate_environment,
    validate_global_settings,
)
from infra.graph.builder import COMPUTE, DATABASE, IDENTITY, NETWORK, REGISTRY, ResourceGraphBuilder
from infra.policies.deriver import AccountScope, PolicyDeriver
from infra.provisioning.engine import ProvisioningEngine
from infra.provisioning.materializer import PulumiMaterializer
from infra.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def _account_scope() -> AccountScope:
    """Read region, account and availability zones from the provider."""
    return AccountScope(
        region=aws.get_region().name,
        account=aws.get_caller_identity().account_id,
        partition=aws.get_partition().partition,
        availability_zones=tuple(aws.get_availability_zones(state="available").names),
    )


def main() -> None:
    """Deploy one environment of the Lambda application stack."""
    settings = get_settings()
    configure_logging(settings.log_level)

    # Stack config wins over process settings
    pulumi_config = pulumi.Config()
    requested = pulumi_config.get("env") or settings.environment
    owns_global_resources = pulumi_config.get_bool("owns_global_resources")
    if owns_global_resources is None:
        owns_global_resources = settings.owns_global_resources

    resolver = ConfigResolver()
    environment = resolver.resolve_environment_name(requested)
    pulumi.log.info(f"Deploying environment: {environment}")

    config = validate_environment(environment, resolver)
    global_settings = validate_global_settings(resolver.resolve_global())

    scope = _account_scope()
    deriver = PolicyDeriver(scope)

    graph = ResourceGraphBuilder(settings.project).build(environment, config, global_settings)
    deriver.attach(graph, config, global_settings)

    materializer = PulumiMaterializer(
        project=settings.project,
        environment=environment,
        deriver=deriver,
        owns_global_resources=owns_global_resources,
    )
    applied = ProvisioningEngine(materializer).apply(graph)

    # --- Exports ---
    outputs = {
        "environment": environment,
        "vpc_id": applied[NETWORK]["vpc_id"],
        "private_egress_subnet_ids": applied[NETWORK]["private_egress_subnet_ids"],
        "private_isolated_subnet_ids": applied[NETWORK]["private_isolated_subnet_ids"],
        "db_endpoint": applied[DATABASE]["endpoint"],
        "db_secret_arn": applied[DATABASE]["secret_arn"],
        "repository_url": applied[REGISTRY]["repository_url"],
        "image_tag": applied[COMPUTE]["image_tag"],
        "function_name": applied[COMPUTE]["function_name"],
        "api_endpoint": applied[COMPUTE]["api_endpoint"],
    }
    if "role_arn" in applied[IDENTITY]:
        outputs["deployment_role_arn"] = applied[IDENTITY]["role_arn"]
        outputs["deployment_topic_arn"] = applied[IDENTITY]["topic_arn"]

    for key, value in outputs.items():
        pulumi.export(key, value)

    logger.info("Exported %d stack outputs for '%s'", len(outputs), environment)


# Execute
main()
