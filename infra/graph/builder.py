"""
Resource graph builder.

Turns a validated stack configuration plus the global settings into the
resource graph of one environment:

    network  (no deps)
    database (network)
    registry (no deps, global)
    compute  (network, database, registry)
    identity (registry, global; grant wiring only)

Building only describes resources. Materialization is the provisioning
engine's job, applied in the topological order the graph yields.
"""

from dataclasses import replace

from infra.configs.base import GlobalSettings, StackConfig
from infra.graph.descriptors import (
    DescriptorScope,
    ResourceGraph,
    ResourceGroupDescriptor,
    ResourceKind,
)
from infra.refs import OutputRef
from infra.utils.logger import get_logger
from infra.utils.naming import FUNCTION_NAME_SEPARATOR, ResourceNamer

logger = get_logger(__name__)

NETWORK = ResourceKind.NETWORK.value
DATABASE = ResourceKind.DATABASE.value
REGISTRY = ResourceKind.REGISTRY.value
COMPUTE = ResourceKind.COMPUTE.value
IDENTITY = ResourceKind.IDENTITY.value


class ResourceGraphBuilder:
    """Builds the resource graph of one environment."""

    def __init__(self, project: str) -> None:
        self.project = project

    def build(
        self,
        environment: str,
        config: StackConfig,
        global_settings: GlobalSettings,
    ) -> ResourceGraph:
        """
        Describe every resource group of an environment and their edges.

        Args:
            environment: Resolved environment name
            config: Validated stack configuration
            global_settings: Validated global settings

        Returns:
            ResourceGraph: Checked, acyclic graph

        Raises:
            MissingDependencyError: If an input references an undeclared dependency
            CyclicDependencyError: If the edges form a cycle
        """
        namer = ResourceNamer(project=self.project, environment=environment)
        graph = ResourceGraph(environment)

        graph.add(ResourceGroupDescriptor(
            id=NETWORK,
            kind=ResourceKind.NETWORK,
            config=config.network,
        ))

        graph.add(ResourceGroupDescriptor(
            id=DATABASE,
            kind=ResourceKind.DATABASE,
            config=config.database,
            inputs={
                "vpc_id": OutputRef(NETWORK, "vpc_id"),
                "subnet_ids": OutputRef(NETWORK, "private_isolated_subnet_ids"),
            },
            depends_on=frozenset({NETWORK}),
        ))

        graph.add(ResourceGroupDescriptor(
            id=REGISTRY,
            kind=ResourceKind.REGISTRY,
            config=global_settings.registry,
            scope=DescriptorScope.GLOBAL,
        ))

        compute_config = config.compute
        if compute_config.function_name is None:
            compute_config = replace(
                compute_config,
                function_name=namer.function_name(global_settings.registry.repo_name),
            )
        elif not compute_config.function_name.endswith(
            f"{FUNCTION_NAME_SEPARATOR}{global_settings.registry.repo_name}"
        ):
            logger.warning(
                "Function name '%s' does not end with '%s%s'; the deployment role cannot update it",
                compute_config.function_name,
                FUNCTION_NAME_SEPARATOR,
                global_settings.registry.repo_name,
            )

        graph.add(ResourceGroupDescriptor(
            id=COMPUTE,
            kind=ResourceKind.COMPUTE,
            config=compute_config,
            inputs={
                "vpc_id": OutputRef(NETWORK, "vpc_id"),
                "subnet_ids": OutputRef(NETWORK, "private_egress_subnet_ids"),
                "db_secret_arn": OutputRef(DATABASE, "secret_arn"),
                "repository_url": OutputRef(REGISTRY, "repository_url"),
            },
            depends_on=frozenset({NETWORK, DATABASE, REGISTRY}),
        ))

        graph.add(ResourceGroupDescriptor(
            id=IDENTITY,
            kind=ResourceKind.IDENTITY,
            config=global_settings.ci_identity,
            scope=DescriptorScope.GLOBAL,
            inputs={"repository_arn": OutputRef(REGISTRY, "repository_arn")},
            depends_on=frozenset({REGISTRY}),
        ))

        graph.check_references()
        order = graph.topological_order()
        logger.info(
            "Built resource graph for '%s': %s",
            environment,
            " -> ".join(d.id for d in order),
        )
        return graph
