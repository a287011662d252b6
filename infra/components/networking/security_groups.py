"""
Security Group Component for Network Access Control.

Architectural Steps & Flow:
1. Create the security group "shell" so it exists and can be referenced by id.
2. Materialize the derived ingress rules, one resource per rule:
   - CIDR-scoped rules become cidr_ipv4 rules.
   - Group-scoped rules reference the source security group id.
3. Egress: open to everything for compute, closed for the database.

Rules are never written here by hand; they come from the PolicyDeriver.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.errors import ConfigError
from infra.policies.models import IngressRuleSet, SecurityRule
from infra.refs import SecurityGroupRef
from infra.utils.tags import create_tags


@dataclass
class SecurityGroupOutputs:
    """Output values from security group component."""
    security_group_id: pulumi.Output[str]


def _source_args(rule: SecurityRule) -> dict:
    if isinstance(rule.source, SecurityGroupRef):
        if rule.source.id is None:
            raise ConfigError(
                f"Security group of '{rule.source.owner}' is not materialized yet",
                {"owner": rule.source.owner, "port": rule.port},
            )
        return {"referenced_security_group_id": rule.source.id}
    return {"cidr_ipv4": rule.source}


class SecurityGroupComponent(pulumi.ComponentResource):
    """
    One security group plus its derived ingress rules.

    Ingress is exactly the content of the rule set at construction time.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        vpc_id: pulumi.Input[str],
        description: str,
        rule_set: IngressRuleSet | None = None,
        allow_all_outbound: bool = False,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:networking:SecurityGroup", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.security_group = aws.ec2.SecurityGroup(
            f"{name}-sg",
            description=description,
            vpc_id=vpc_id,
            tags=create_tags(environment, f"{name}-sg"),
            opts=child_opts,
        )

        self.ingress_rules: list[aws.vpc.SecurityGroupIngressRule] = []
        for index, rule in enumerate(rule_set.rules if rule_set else []):
            self.ingress_rules.append(aws.vpc.SecurityGroupIngressRule(
                f"{name}-ingress-{rule.port}-{index + 1}",
                security_group_id=self.security_group.id,
                ip_protocol=rule.protocol,
                from_port=rule.port,
                to_port=rule.port,
                description=rule.description,
                **_source_args(rule),
                opts=child_opts,
            ))

        if allow_all_outbound:
            aws.vpc.SecurityGroupEgressRule(
                f"{name}-egress-all",
                security_group_id=self.security_group.id,
                ip_protocol="-1",
                cidr_ipv4="0.0.0.0/0",
                description="All outbound traffic",
                opts=child_opts,
            )

        self.register_outputs({
            "security_group_id": self.security_group.id,
        })

    def get_outputs(self) -> SecurityGroupOutputs:
        """Get security group output values."""
        return SecurityGroupOutputs(security_group_id=self.security_group.id)
