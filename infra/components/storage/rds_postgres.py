"""
RDS PostgreSQL Component for Relational Database.

Access Control - Who Can Connect:
1. Compute in private-egress subnets -> database port, one rule per subnet CIDR
2. Anyone else -> DENIED

How the Connection Works:
1. Routing: compute in private-egress subnets reaches the database in the
   isolated subnets over the implicit local VPC route.
2. Security Group: ingress rules are derived from the private-egress subnet
   CIDRs (not from compute's security group, which does not exist yet).
3. Credentials: manage_master_user_password=True means AWS generates the
   password and stores it in Secrets Manager. Only the secret ARN leaves
   this component.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.components.networking.security_groups import SecurityGroupComponent
from infra.configs.base import DatabaseConfig
from infra.configs.constants import DATABASE_ENGINE_VERSION, DATABASE_USERNAME
from infra.policies.models import IngressRuleSet
from infra.utils.tags import create_tags


@dataclass
class RdsOutputs:
    """Output values from RDS component."""
    endpoint: pulumi.Output[str]
    port: pulumi.Output[int]
    database_name: pulumi.Output[str]
    secret_arn: pulumi.Output[str]
    security_group_id: pulumi.Output[str]


class RdsPostgresComponent(pulumi.ComponentResource):
    """
    Single-AZ RDS PostgreSQL instance in the isolated subnets.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: DatabaseConfig,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        ingress: IngressRuleSet | None,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:RdsPostgres", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        self.config = config

        # No outbound rules: the database never initiates connections
        self.security_group = SecurityGroupComponent(
            f"{name}-database",
            environment=environment,
            vpc_id=vpc_id,
            description="Security group for RDS PostgreSQL instance",
            rule_set=ingress,
            allow_all_outbound=False,
            opts=child_opts,
        )

        self.subnet_group = aws.rds.SubnetGroup(
            f"{name}-subnet-group",
            subnet_ids=subnet_ids,
            description="Subnet group for RDS in isolated subnets",
            tags=create_tags(environment, f"{name}-subnet-group"),
            opts=child_opts,
        )

        self.instance = aws.rds.Instance(
            f"{name}-postgres",
            identifier=f"{name}-postgres",
            engine="postgres",
            engine_version=DATABASE_ENGINE_VERSION,
            instance_class=config.instance_type,
            allocated_storage=config.allocated_storage_gib,
            storage_type="gp2",
            storage_encrypted=True,
            db_name=config.name,
            port=config.port,
            username=DATABASE_USERNAME,
            manage_master_user_password=True,  # AWS manages password in Secrets Manager
            db_subnet_group_name=self.subnet_group.name,
            vpc_security_group_ids=[self.security_group.security_group.id],
            multi_az=False,
            auto_minor_version_upgrade=True,
            deletion_protection=config.deletion_protection,
            skip_final_snapshot=not config.deletion_protection,
            final_snapshot_identifier=f"{name}-final-snapshot" if config.deletion_protection else None,
            backup_retention_period=config.backup_retention_days,
            tags=create_tags(environment, f"{name}-postgres"),
            opts=child_opts,
        )

        outputs = self.get_outputs()
        self.register_outputs({
            "endpoint": outputs.endpoint,
            "port": outputs.port,
            "secret_arn": outputs.secret_arn,
        })

    def get_outputs(self) -> RdsOutputs:
        """Get RDS output values."""
        return RdsOutputs(
            endpoint=self.instance.endpoint,
            port=self.instance.port,
            database_name=pulumi.Output.from_input(self.config.name),
            secret_arn=self.instance.master_user_secrets.apply(lambda secrets: secrets[0].secret_arn),
            security_group_id=self.security_group.security_group.id,
        )
