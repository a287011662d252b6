"""
Lambda function component for the application container.

Creates:
- Security group (all outbound, no inbound)
- CloudWatch log group for function logs
- Execution role with read access to the database secret
- Lambda function (container image from the shared registry) in the
  private-egress subnets

The function receives the database secret ARN as DB_SECRET_NAME and reads
the credentials at runtime; the password never passes through here.
"""

from dataclasses import dataclass
from typing import Sequence

import pulumi
import pulumi_aws as aws

from infra.components.networking.security_groups import SecurityGroupComponent
from infra.components.security.iam_roles import LambdaRoleComponent
from infra.configs.base import ComputeConfig
from infra.configs.constants import LOG_RETENTION_DAYS
from infra.policies.models import PolicyStatement
from infra.utils.tags import create_tags


@dataclass
class LambdaOutputs:
    """Output values from Lambda component."""
    function_arn: pulumi.Output[str]
    function_name: pulumi.Output[str]
    security_group_id: pulumi.Output[str]
    role_arn: pulumi.Output[str]


class LambdaFunctionComponent(pulumi.ComponentResource):
    """
    Container-image Lambda function attached to the VPC.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: ComputeConfig,
        vpc_id: pulumi.Input[str],
        subnet_ids: list[pulumi.Input[str]],
        image_uri: pulumi.Input[str],
        db_secret_arn: pulumi.Input[str],
        statements: Sequence[PolicyStatement] = (),
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:compute:LambdaFunction", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.security_group = SecurityGroupComponent(
            f"{name}-lambda",
            environment=environment,
            vpc_id=vpc_id,
            description="Security group for Lambda function",
            allow_all_outbound=True,
            opts=child_opts,
        )

        # CloudWatch Log Group
        self.log_group = aws.cloudwatch.LogGroup(
            f"{name}-logs",
            name=f"/aws/lambda/{config.function_name}",
            retention_in_days=LOG_RETENTION_DAYS,
            tags=create_tags(environment, f"{name}-logs"),
            opts=child_opts,
        )

        self.role = LambdaRoleComponent(
            name,
            environment=environment,
            statements=statements,
            opts=child_opts,
        )

        # Lambda Function (Docker image from ECR)
        self.function = aws.lambda_.Function(
            f"{name}-function",
            name=config.function_name,
            role=self.role.role.arn,
            package_type="Image",
            image_uri=image_uri,
            memory_size=config.memory_mib,
            timeout=config.timeout_seconds,
            reserved_concurrent_executions=config.reserved_concurrency,
            vpc_config=aws.lambda_.FunctionVpcConfigArgs(
                subnet_ids=subnet_ids,
                security_group_ids=[self.security_group.security_group.id],
            ),
            environment=aws.lambda_.FunctionEnvironmentArgs(
                variables={
                    "ENVIRONMENT": environment,
                    "DB_SECRET_NAME": db_secret_arn,
                },
            ),
            tags=create_tags(environment, f"{name}-function"),
            opts=pulumi.ResourceOptions(
                parent=self,
                depends_on=[self.log_group, self.role],
            ),
        )

        self.register_outputs({
            "function_arn": self.function.arn,
            "function_name": self.function.name,
        })

    def get_outputs(self) -> LambdaOutputs:
        """Get Lambda output values."""
        return LambdaOutputs(
            function_arn=self.function.arn,
            function_name=self.function.name,
            security_group_id=self.security_group.security_group.id,
            role_arn=self.role.role.arn,
        )
