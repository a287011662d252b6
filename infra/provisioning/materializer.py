"""
Pulumi materializer: one component resource per resource group.

Maps each descriptor kind to the component that creates it and returns
the component outputs keyed the way other descriptors reference them.
Global-scope groups are named under the "global" scope; a stack that does
not own them looks the registry up instead and skips the CI identity.
"""

from dataclasses import fields
from typing import Any

import pulumi

from infra.components.compute.lambda_function import LambdaFunctionComponent
from infra.components.edge.api_gateway import HttpApiComponent
from infra.components.networking.vpc import VpcComponent
from infra.components.security.ci_identity import CiIdentityComponent
from infra.components.storage.ecr_repository import EcrRepositoryComponent, lookup_repository
from infra.components.storage.rds_postgres import RdsPostgresComponent
from infra.configs.base import GLOBAL_SCOPE
from infra.graph.descriptors import DescriptorScope, ResourceGroupDescriptor, ResourceKind
from infra.graph.subnets import plan_subnets
from infra.policies.deriver import PolicyDeriver
from infra.provisioning.engine import Lookup
from infra.utils.logger import get_logger
from infra.utils.naming import ResourceNamer

logger = get_logger(__name__)


def _as_dict(outputs: Any) -> dict[str, Any]:
    # Shallow on purpose: asdict() would deep-copy the Pulumi Outputs
    return {f.name: getattr(outputs, f.name) for f in fields(outputs)}


class PulumiMaterializer:
    """Creates Pulumi component resources for resource group descriptors."""

    def __init__(
        self,
        project: str,
        environment: str,
        deriver: PolicyDeriver,
        owns_global_resources: bool = True,
    ) -> None:
        self.namers = {
            DescriptorScope.ENVIRONMENT: ResourceNamer(project=project, environment=environment),
            DescriptorScope.GLOBAL: ResourceNamer(project=project, environment=GLOBAL_SCOPE),
        }
        self.environment = environment
        self.deriver = deriver
        self.owns_global_resources = owns_global_resources
        self._handlers = {
            ResourceKind.NETWORK: self._network,
            ResourceKind.DATABASE: self._database,
            ResourceKind.REGISTRY: self._registry,
            ResourceKind.COMPUTE: self._compute,
            ResourceKind.IDENTITY: self._identity,
        }

    def materialize(
        self,
        descriptor: ResourceGroupDescriptor,
        inputs: dict[str, Any],
        resolve: Lookup,
    ) -> dict[str, Any]:
        handler = self._handlers[descriptor.kind]
        namer = self.namers[descriptor.scope]
        return handler(descriptor, namer.name(descriptor.id), inputs, resolve)

    def _scope_name(self, descriptor: ResourceGroupDescriptor) -> str:
        return GLOBAL_SCOPE if descriptor.scope == DescriptorScope.GLOBAL else self.environment

    def _network(self, descriptor, name, inputs, resolve) -> dict[str, Any]:
        subnets = plan_subnets(descriptor.config, self.deriver.scope.availability_zones)
        vpc = VpcComponent(
            name=name,
            environment=self.environment,
            config=descriptor.config,
            subnets=subnets,
        )
        return _as_dict(vpc.get_outputs())

    def _database(self, descriptor, name, inputs, resolve) -> dict[str, Any]:
        rds = RdsPostgresComponent(
            name=name,
            environment=self.environment,
            config=descriptor.config,
            vpc_id=inputs["vpc_id"],
            subnet_ids=inputs["subnet_ids"],
            ingress=descriptor.ingress,
        )
        return _as_dict(rds.get_outputs())

    def _registry(self, descriptor, name, inputs, resolve) -> dict[str, Any]:
        if not self.owns_global_resources:
            logger.info("Referencing existing repository '%s'", descriptor.config.repo_name)
            return _as_dict(lookup_repository(descriptor.config))

        repository = EcrRepositoryComponent(
            name=name,
            environment=self._scope_name(descriptor),
            config=descriptor.config,
        )
        return _as_dict(repository.get_outputs())

    def _compute(self, descriptor, name, inputs, resolve) -> dict[str, Any]:
        config = descriptor.config
        function = LambdaFunctionComponent(
            name=name,
            environment=self.environment,
            config=config,
            vpc_id=inputs["vpc_id"],
            subnet_ids=inputs["subnet_ids"],
            image_uri=pulumi.Output.concat(inputs["repository_url"], ":", config.image_tag),
            db_secret_arn=inputs["db_secret_arn"],
            statements=[statement.resolve(resolve) for statement in descriptor.statements],
        )
        function_outputs = function.get_outputs()

        api = HttpApiComponent(
            name=name,
            environment=self.environment,
            function_arn=function_outputs.function_arn,
            function_name=function_outputs.function_name,
        )
        return {
            **_as_dict(function_outputs),
            **_as_dict(api.get_outputs()),
            "image_tag": config.image_tag,
        }

    def _identity(self, descriptor, name, inputs, resolve) -> dict[str, Any]:
        if not self.owns_global_resources:
            logger.info("CI identity is owned by another stack; nothing to create")
            return {}

        identity = CiIdentityComponent(
            name=name,
            environment=self._scope_name(descriptor),
            trust_policy=descriptor.trust_policy.resolve(resolve),
            statements=[statement.resolve(resolve) for statement in descriptor.statements],
            deriver=self.deriver,
        )
        return _as_dict(identity.get_outputs())
