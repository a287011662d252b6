"""
IAM execution role for the compute function.

Creates:
- Lambda execution role (assumed by lambda.amazonaws.com)
- AWS managed policies for logging and VPC network interfaces
- Inline policy built from derived statements (secret read access)
"""

import json
from dataclasses import dataclass
from typing import Sequence

import pulumi
import pulumi_aws as aws

from infra.policies.models import PolicyStatement, policy_document
from infra.utils.tags import create_tags

LAMBDA_MANAGED_POLICIES = {
    "basic-execution": "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole",
    "vpc-access": "arn:aws:iam::aws:policy/service-role/AWSLambdaVPCAccessExecutionRole",
}


@dataclass
class IamRoleOutputs:
    """Output values from IAM role component."""
    role_arn: pulumi.Output[str]
    role_name: pulumi.Output[str]


class LambdaRoleComponent(pulumi.ComponentResource):
    """
    Execution role for the Lambda function.

    Only the derived statements are granted beyond the managed policies.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        statements: Sequence[PolicyStatement] = (),
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:security:LambdaRole", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        lambda_assume_policy = json.dumps(policy_document([
            PolicyStatement(
                actions=("sts:AssumeRole",),
                principals={"Service": "lambda.amazonaws.com"},
            ),
        ]))

        self.role = aws.iam.Role(
            f"{name}-lambda-role",
            assume_role_policy=lambda_assume_policy,
            tags=create_tags(environment, f"{name}-lambda-role"),
            opts=child_opts,
        )

        self.attachments = [
            aws.iam.RolePolicyAttachment(
                f"{name}-lambda-{suffix}",
                role=self.role.name,
                policy_arn=policy_arn,
                opts=child_opts,
            )
            for suffix, policy_arn in LAMBDA_MANAGED_POLICIES.items()
        ]

        self.policy = None
        if statements:
            # Resources may still be Outputs (e.g. the database secret ARN)
            self.policy = aws.iam.RolePolicy(
                f"{name}-lambda-policy",
                role=self.role.id,
                policy=pulumi.Output.json_dumps(policy_document(statements)),
                opts=child_opts,
            )

        self.register_outputs({
            "role_arn": self.role.arn,
        })

    def get_outputs(self) -> IamRoleOutputs:
        """Get IAM role output values."""
        return IamRoleOutputs(
            role_arn=self.role.arn,
            role_name=self.role.name,
        )
