"""
Provisioning engine boundary.

Applies a resource graph one descriptor at a time, strictly in topological
order. Before a descriptor is applied its inputs are resolved against the
outputs of the descriptors it depends on. A failure aborts every
not-yet-applied descriptor and reaches the caller unmodified; there are no
retries at this layer.
"""

from typing import Any, Callable, Protocol

from infra.errors import DependencyError
from infra.graph.descriptors import ResourceGraph, ResourceGroupDescriptor
from infra.refs import OutputRef, resolve_value
from infra.utils.logger import get_logger

logger = get_logger(__name__)

Lookup = Callable[[OutputRef], Any]


class Materializer(Protocol):
    """Turns one descriptor into real resources and returns their outputs."""

    def materialize(
        self,
        descriptor: ResourceGroupDescriptor,
        inputs: dict[str, Any],
        resolve: Lookup,
    ) -> dict[str, Any]:
        ...


class ProvisioningEngine:
    """Applies resource graphs through a Materializer."""

    def __init__(self, materializer: Materializer) -> None:
        self.materializer = materializer

    def apply(self, graph: ResourceGraph) -> dict[str, dict[str, Any]]:
        """
        Materialize every descriptor of the graph.

        Args:
            graph: Built and checked resource graph

        Returns:
            Descriptor id -> outputs, in application order

        Raises:
            CyclicDependencyError: If the graph has a cycle
            Exception: Whatever the materializer raised, unmodified
        """
        order = graph.topological_order()
        lookup = self._lookup(graph)
        applied: dict[str, dict[str, Any]] = {}

        for position, descriptor in enumerate(order):
            inputs = resolve_value(descriptor.inputs, lookup)
            try:
                outputs = self.materializer.materialize(descriptor, inputs, lookup)
            except Exception:
                logger.error(
                    "Materializing '%s' failed; %d resource groups not applied: %s",
                    descriptor.id,
                    len(order) - position - 1,
                    [d.id for d in order[position + 1:]],
                )
                raise
            descriptor.outputs = dict(outputs)
            applied[descriptor.id] = descriptor.outputs
            logger.info("Materialized '%s' (%s)", descriptor.id, descriptor.kind.value)

        return applied

    @staticmethod
    def _lookup(graph: ResourceGraph) -> Lookup:
        def lookup(ref: OutputRef) -> Any:
            outputs = graph[ref.descriptor_id].outputs
            if ref.output not in outputs:
                raise DependencyError(
                    f"Output '{ref}' is not available",
                    {"descriptor": ref.descriptor_id, "output": ref.output},
                )
            return outputs[ref.output]

        return lookup
