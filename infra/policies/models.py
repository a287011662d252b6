"""
Security artifacts derived from the deployment topology.

SecurityRule and PolicyStatement are never hand-authored in stack code;
the PolicyDeriver computes them and attaches them to resource group
descriptors.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Sequence

from infra.refs import OutputRef, SecurityGroupRef, iter_refs, resolve_value

POLICY_VERSION = "2012-10-17"


@dataclass(frozen=True)
class SecurityRule:
    """
    Ingress rule on a security group.

    Attributes:
        source: CIDR block or security group reference traffic may come from
        protocol: IP protocol ('tcp')
        port: Destination port
        description: Rule description shown in the console
        direction: Always 'ingress'
    """
    source: str | SecurityGroupRef
    protocol: str
    port: int
    description: str = ""
    direction: str = "ingress"

    @property
    def is_group_scoped(self) -> bool:
        return isinstance(self.source, SecurityGroupRef)


@dataclass(frozen=True)
class PolicyStatement:
    """
    IAM policy statement.

    Attributes:
        actions: Ordered action names
        resources: Resource ARNs or selectors; may hold OutputRefs until materialized
        conditions: Optional IAM condition block
        principals: Optional principal block (trust policies only)
        effect: Always 'Allow'
        sid: Optional statement id
    """
    actions: tuple[str, ...]
    resources: tuple[Any, ...] = ()
    conditions: dict[str, dict[str, Any]] | None = None
    principals: dict[str, Any] | None = None
    effect: str = "Allow"
    sid: str | None = None

    def references(self) -> Iterator[OutputRef]:
        """Yield the OutputRefs this statement is waiting on."""
        yield from iter_refs(self.resources)
        yield from iter_refs(self.conditions or {})
        yield from iter_refs(self.principals or {})

    def resolve(self, lookup: Callable[[OutputRef], Any]) -> "PolicyStatement":
        """Return a copy with every OutputRef replaced by its output value."""
        return replace(
            self,
            resources=resolve_value(self.resources, lookup),
            conditions=resolve_value(self.conditions, lookup),
            principals=resolve_value(self.principals, lookup),
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the statement as an IAM JSON statement."""
        statement: dict[str, Any] = {"Effect": self.effect}
        if self.sid:
            statement["Sid"] = self.sid
        if self.principals:
            statement["Principal"] = self.principals
        statement["Action"] = list(self.actions)
        if self.resources:
            statement["Resource"] = list(self.resources)
        if self.conditions:
            statement["Condition"] = self.conditions
        return statement


def policy_document(statements: Sequence[PolicyStatement]) -> dict[str, Any]:
    """Wrap statements in an IAM policy document."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [statement.to_dict() for statement in statements],
    }


class IngressRuleSet:
    """
    Ingress rules of one security group, keyed by port.

    Replacing the rules for a port discards whatever was there before, so
    the last rule source applied for a port is the only one materialized.
    """

    def __init__(self, security_group: SecurityGroupRef) -> None:
        self.security_group = security_group
        self._by_port: dict[int, tuple[SecurityRule, ...]] = {}

    def replace(self, port: int, rules: Sequence[SecurityRule]) -> None:
        """Set the rules for a port, dropping any earlier rules for it."""
        if any(rule.port != port for rule in rules):
            raise ValueError(f"Every rule must target port {port}")
        self._by_port[port] = tuple(rules)

    def rules_for_port(self, port: int) -> list[SecurityRule]:
        return list(self._by_port.get(port, ()))

    @property
    def ports(self) -> list[int]:
        return list(self._by_port)

    @property
    def rules(self) -> list[SecurityRule]:
        return [rule for rules in self._by_port.values() for rule in rules]

    def __len__(self) -> int:
        return len(self.rules)
