"""
Symbolic references between resource groups.

References are placeholders for values that exist only after a resource
group has been materialized (ARNs, ids). They are resolved by the
provisioning engine right before the consuming group is applied.
"""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class OutputRef:
    """Reference to a named output of another resource group."""
    descriptor_id: str
    output: str

    def __str__(self) -> str:
        return f"${{{self.descriptor_id}.{self.output}}}"


@dataclass(frozen=True)
class SecurityGroupRef:
    """
    Reference to a security group owned by a resource group.

    Attributes:
        owner: Id of the resource group that owns the security group
        id: Concrete security group id once known, else None
    """
    owner: str
    id: Any = None

    def __str__(self) -> str:
        return f"sg:{self.owner}" if self.id is None else str(self.id)


def resolve_value(value: Any, lookup: Callable[[OutputRef], Any]) -> Any:
    """
    Replace OutputRefs inside a value by their materialized outputs.

    Args:
        value: A reference, or a tuple/list/dict possibly containing references
        lookup: Returns the output value for a reference

    Returns:
        The value with every OutputRef substituted
    """
    if isinstance(value, OutputRef):
        return lookup(value)
    if isinstance(value, tuple):
        return tuple(resolve_value(item, lookup) for item in value)
    if isinstance(value, list):
        return [resolve_value(item, lookup) for item in value]
    if isinstance(value, dict):
        return {key: resolve_value(item, lookup) for key, item in value.items()}
    return value


def iter_refs(value: Any):
    """Yield every OutputRef nested inside a value."""
    if isinstance(value, OutputRef):
        yield value
    elif isinstance(value, (tuple, list)):
        for item in value:
            yield from iter_refs(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_refs(item)
