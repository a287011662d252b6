"""
CI deployment identity for GitHub Actions.

Creates:
- GitHub OIDC identity provider
- Deployment role assumable through web identity from one repository
- Inline policy from the derived least-privilege statements
- SNS topic for deployment notifications, publishable by the role

The trust statement arrives without a principal; the provider ARN is only
known here, so it is filled in before the document is rendered.
"""

from dataclasses import dataclass, replace
from typing import Sequence

import pulumi
import pulumi_aws as aws

from infra.configs.constants import (
    DEPLOYMENT_ROLE_MAX_SESSION_SECONDS,
    GITHUB_OIDC_AUDIENCE,
    GITHUB_OIDC_THUMBPRINTS,
    GITHUB_OIDC_URL,
)
from infra.policies.deriver import PolicyDeriver
from infra.policies.models import PolicyStatement, policy_document
from infra.utils.tags import create_tags


@dataclass
class CiIdentityOutputs:
    """Output values from CI identity component."""
    role_arn: pulumi.Output[str]
    provider_arn: pulumi.Output[str]
    topic_arn: pulumi.Output[str]


class CiIdentityComponent(pulumi.ComponentResource):
    """
    OIDC provider, deployment role and notification topic.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        trust_policy: PolicyStatement,
        statements: Sequence[PolicyStatement],
        deriver: PolicyDeriver,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:security:CiIdentity", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.provider = aws.iam.OpenIdConnectProvider(
            f"{name}-github-oidc",
            url=GITHUB_OIDC_URL,
            client_id_lists=[GITHUB_OIDC_AUDIENCE],
            thumbprint_lists=list(GITHUB_OIDC_THUMBPRINTS),
            tags=create_tags(environment, f"{name}-github-oidc"),
            opts=child_opts,
        )

        trust = replace(trust_policy, principals={"Federated": self.provider.arn})
        self.role = aws.iam.Role(
            f"{name}-deployment-role",
            assume_role_policy=pulumi.Output.json_dumps(policy_document([trust])),
            description="Role for GitHub Actions deployments",
            max_session_duration=DEPLOYMENT_ROLE_MAX_SESSION_SECONDS,
            tags=create_tags(environment, f"{name}-deployment-role"),
            opts=child_opts,
        )

        self.topic = aws.sns.Topic(
            f"{name}-deployment-notifications",
            display_name=f"{environment} Deployment Notifications",
            tags=create_tags(environment, f"{name}-deployment-notifications"),
            opts=child_opts,
        )

        self.policy = aws.iam.RolePolicy(
            f"{name}-deployment-policy",
            role=self.role.id,
            policy=pulumi.Output.json_dumps(policy_document([
                *statements,
                deriver.derive_publish_statement(self.topic.arn),
            ])),
            opts=child_opts,
        )

        self.register_outputs({
            "role_arn": self.role.arn,
            "provider_arn": self.provider.arn,
            "topic_arn": self.topic.arn,
        })

    def get_outputs(self) -> CiIdentityOutputs:
        """Get CI identity output values."""
        return CiIdentityOutputs(
            role_arn=self.role.arn,
            provider_arn=self.provider.arn,
            topic_arn=self.topic.arn,
        )
