"""
Resource group descriptors and the dependency graph between them.

A descriptor is the in-memory description of one resource group before it
is materialized. Every dependency is explicit data on the descriptor;
nothing is inferred from construction order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

from infra.errors import CyclicDependencyError, DependencyError, MissingDependencyError
from infra.policies.models import IngressRuleSet, PolicyStatement
from infra.refs import OutputRef, iter_refs


class ResourceKind(str, Enum):
    """Kinds of resource groups in the deployment topology."""
    NETWORK = "network"
    DATABASE = "database"
    REGISTRY = "registry"
    COMPUTE = "compute"
    IDENTITY = "identity"


class DescriptorScope(str, Enum):
    """Whether a resource group belongs to one environment or to all of them."""
    ENVIRONMENT = "environment"
    GLOBAL = "global"


@dataclass
class ResourceGroupDescriptor:
    """
    Node of the resource graph.

    Attributes:
        id: Unique id within the graph
        kind: Resource group kind
        config: Configuration record the group is built from
        scope: Environment or global scope
        inputs: Parameter name -> reference to a predecessor output
        depends_on: Ids of the descriptors that must be applied first
        ingress: Derived ingress rules, for groups that own a security group
        statements: Derived IAM statements granted to the group's role
        trust_policy: Derived trust statement, for groups that own an assumable role
        outputs: Identifiers filled in by the provisioning engine
    """
    id: str
    kind: ResourceKind
    config: Any
    scope: DescriptorScope = DescriptorScope.ENVIRONMENT
    inputs: dict[str, OutputRef] = field(default_factory=dict)
    depends_on: frozenset[str] = frozenset()
    ingress: IngressRuleSet | None = None
    statements: list[PolicyStatement] = field(default_factory=list)
    trust_policy: PolicyStatement | None = None
    outputs: dict[str, Any] = field(default_factory=dict)

    def references(self) -> Iterator[OutputRef]:
        """Yield every OutputRef consumed by inputs or statements."""
        yield from iter_refs(self.inputs)
        for statement in self.statements:
            yield from statement.references()
        if self.trust_policy is not None:
            yield from self.trust_policy.references()

    @property
    def is_materialized(self) -> bool:
        return bool(self.outputs)


class ResourceGraph:
    """Resource group descriptors of one environment plus their edges."""

    def __init__(self, environment: str, descriptors: Iterable[ResourceGroupDescriptor] = ()) -> None:
        self.environment = environment
        self._descriptors: dict[str, ResourceGroupDescriptor] = {}
        for descriptor in descriptors:
            self.add(descriptor)

    def add(self, descriptor: ResourceGroupDescriptor) -> ResourceGroupDescriptor:
        if descriptor.id in self._descriptors:
            raise DependencyError(
                f"Duplicate descriptor id '{descriptor.id}'",
                {"descriptor": descriptor.id},
            )
        self._descriptors[descriptor.id] = descriptor
        return descriptor

    def __getitem__(self, descriptor_id: str) -> ResourceGroupDescriptor:
        return self._descriptors[descriptor_id]

    def __contains__(self, descriptor_id: object) -> bool:
        return descriptor_id in self._descriptors

    def __iter__(self) -> Iterator[ResourceGroupDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def by_kind(self, kind: ResourceKind) -> ResourceGroupDescriptor:
        """Get the single descriptor of a kind."""
        for descriptor in self._descriptors.values():
            if descriptor.kind == kind:
                return descriptor
        raise KeyError(kind.value)

    def check_references(self) -> None:
        """
        Verify every edge points at a known descriptor and every consumed
        output comes from a declared dependency.

        Raises:
            MissingDependencyError: On the first offending descriptor
        """
        for descriptor in self._descriptors.values():
            for dependency in sorted(descriptor.depends_on):
                if dependency not in self._descriptors:
                    raise MissingDependencyError(descriptor.id, dependency)
            for ref in descriptor.references():
                if ref.descriptor_id not in descriptor.depends_on:
                    raise MissingDependencyError(descriptor.id, ref.descriptor_id)

    def topological_order(self) -> list[ResourceGroupDescriptor]:
        """
        Order descriptors so each comes after all of its dependencies.

        Ties are broken by insertion order, so the result is deterministic.

        Raises:
            CyclicDependencyError: If the graph has a cycle
        """
        remaining = {d.id: set(d.depends_on) & set(self._descriptors) for d in self}
        ordered: list[ResourceGroupDescriptor] = []

        while remaining:
            ready = [d_id for d_id, deps in remaining.items() if not deps]
            if not ready:
                raise CyclicDependencyError(self._find_cycle(remaining))
            for d_id in ready:
                ordered.append(self._descriptors[d_id])
                del remaining[d_id]
            for deps in remaining.values():
                deps.difference_update(ready)

        return ordered

    @staticmethod
    def _find_cycle(remaining: dict[str, set[str]]) -> list[str]:
        """Walk unresolved edges until a node repeats; return that loop."""
        path: list[str] = []
        node = next(iter(remaining))
        while node not in path:
            path.append(node)
            node = sorted(remaining[node])[0]
        return path[path.index(node):] + [node]
