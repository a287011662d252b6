"""
Policy deriver: security artifacts computed from topology facts.

Ingress rules come from subnet membership, IAM statements from resource
ARNs and naming conventions, trust conditions from the CI identity. No
stack hand-writes a CIDR, an ARN pattern or an action list.

Database ingress is two-phase:
1. derive_ingress_rules scopes the database port to each private-egress
   subnet CIDR. Compute's security group does not exist before the
   database, so a group-scoped rule at this point would be a cycle.
2. allow_from_security_group replaces those rules with a single
   group-scoped rule, for call sites that run after both groups exist.
Whichever phase is applied last for a port is the only one kept.
"""

from dataclasses import dataclass

from infra.configs.base import CiIdentityConfig, GlobalSettings, NetworkConfig, StackConfig, SubnetTier
from infra.configs.constants import (
    DEPLOYMENT_METRICS_NAMESPACE,
    GITHUB_OIDC_AUDIENCE,
    GITHUB_OIDC_HOST,
)
from infra.graph.builder import COMPUTE, DATABASE, IDENTITY, REGISTRY
from infra.graph.descriptors import ResourceGraph, ResourceKind
from infra.graph.subnets import plan_subnets, subnets_in_tier
from infra.policies.models import IngressRuleSet, PolicyStatement, SecurityRule
from infra.refs import OutputRef, SecurityGroupRef
from infra.utils.logger import get_logger
from infra.utils.naming import FUNCTION_NAME_SEPARATOR

logger = get_logger(__name__)

REGISTRY_PUSH_PULL_ACTIONS = (
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
    "ecr:PutImage",
    "ecr:InitiateLayerUpload",
    "ecr:UploadLayerPart",
    "ecr:CompleteLayerUpload",
)

# Only grantable on "*" by the provider
REGISTRY_AUTH_ACTIONS = ("ecr:GetAuthorizationToken",)

LOGGING_ACTIONS = (
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
)

FUNCTION_DEPLOY_ACTIONS = (
    "lambda:UpdateFunctionCode",
    "lambda:GetFunction",
    "lambda:GetFunctionConfiguration",
    "lambda:InvokeFunction",
)

SECRET_READ_ACTIONS = (
    "secretsmanager:GetSecretValue",
    "secretsmanager:DescribeSecret",
)

LOG_GROUP_PREFIXES = ("/aws/lambda/*", "/aws/apigateway/*")


@dataclass(frozen=True)
class AccountScope:
    """
    Account-level facts ARNs are built from.

    Attributes:
        region: AWS region
        account: AWS account id
        partition: ARN partition
        availability_zones: AZ names available to the network
    """
    region: str
    account: str
    partition: str = "aws"
    availability_zones: tuple[str, ...] = ()

    def arn(self, service: str, resource: str) -> str:
        return f"arn:{self.partition}:{service}:{self.region}:{self.account}:{resource}"


class PolicyDeriver:
    """Derives ingress rules and IAM statements for resource groups."""

    def __init__(self, scope: AccountScope) -> None:
        self.scope = scope

    def derive_ingress_rules(
        self,
        network: NetworkConfig,
        consumer_sg_ref: SecurityGroupRef,
        port: int,
    ) -> list[SecurityRule]:
        """
        One TCP rule per private-egress subnet, scoped to that subnet's CIDR.

        Args:
            network: VPC layout the subnets are planned from
            consumer_sg_ref: Security group the rules are attached to
            port: Port to open

        Returns:
            Subnet-scoped ingress rules, never a wildcard
        """
        plans = subnets_in_tier(
            plan_subnets(network, self.scope.availability_zones),
            SubnetTier.PRIVATE_EGRESS,
        )
        return [
            SecurityRule(
                source=plan.cidr,
                protocol="tcp",
                port=port,
                description=f"Allow {port} into {consumer_sg_ref.owner} from {plan.group} subnet {plan.az_index + 1}",
            )
            for plan in plans
        ]

    def allow_from_security_group(
        self,
        sg_ref: SecurityGroupRef,
        port: int,
        rule_set: IngressRuleSet | None = None,
    ) -> SecurityRule:
        """
        Group-scoped ingress rule for the given port.

        When a rule set is given, the rule replaces every earlier rule for
        that port in it.
        """
        rule = SecurityRule(
            source=sg_ref,
            protocol="tcp",
            port=port,
            description=f"Allow {port} from {sg_ref.owner} security group",
        )
        if rule_set is not None:
            rule_set.replace(port, [rule])
        return rule

    def derive_trust_policy(self, ci_identity: CiIdentityConfig) -> PolicyStatement:
        """
        Web-identity trust statement for GitHub Actions.

        Any ref of the repository may assume the role; ``branches`` is not
        applied to the subject condition.
        """
        if ci_identity.branches:
            logger.debug(
                "Trust policy for %s/%s covers all refs; branches %s are not applied",
                ci_identity.owner,
                ci_identity.repo_name,
                list(ci_identity.branches),
            )
        return PolicyStatement(
            actions=("sts:AssumeRoleWithWebIdentity",),
            conditions={
                "StringLike": {
                    f"{GITHUB_OIDC_HOST}:sub": f"repo:{ci_identity.owner}/{ci_identity.repo_name}:*",
                },
                "StringEquals": {
                    f"{GITHUB_OIDC_HOST}:aud": GITHUB_OIDC_AUDIENCE,
                },
            },
        )

    def derive_least_privilege_statements(
        self,
        kind: ResourceKind,
        resource_ref: str | OutputRef,
    ) -> list[PolicyStatement]:
        """
        Statements the deployment identity needs for one resource kind.

        Args:
            kind: REGISTRY (resource_ref is the repository ARN) or COMPUTE
                (resource_ref is the function name suffix shared by all
                environments)

        Raises:
            ValueError: For kinds the deployment identity is not granted on
        """
        if kind == ResourceKind.REGISTRY:
            return [
                PolicyStatement(actions=REGISTRY_PUSH_PULL_ACTIONS, resources=(resource_ref,)),
                PolicyStatement(actions=REGISTRY_AUTH_ACTIONS, resources=("*",)),
            ]

        if kind == ResourceKind.COMPUTE:
            return [
                PolicyStatement(
                    actions=LOGGING_ACTIONS,
                    resources=tuple(
                        self.scope.arn("logs", f"log-group:{prefix}") for prefix in LOG_GROUP_PREFIXES
                    ),
                ),
                PolicyStatement(
                    actions=FUNCTION_DEPLOY_ACTIONS,
                    resources=(
                        self.scope.arn("lambda", f"function:*{FUNCTION_NAME_SEPARATOR}{resource_ref}"),
                    ),
                ),
            ]

        raise ValueError(f"No least-privilege statements defined for '{kind.value}'")

    def derive_metrics_statement(self) -> PolicyStatement:
        """CloudWatch metric publishing, limited to the deployment namespace."""
        return PolicyStatement(
            actions=("cloudwatch:PutMetricData",),
            resources=("*",),
            conditions={"StringLike": {"cloudwatch:namespace": DEPLOYMENT_METRICS_NAMESPACE}},
        )

    def derive_publish_statement(self, topic_arn: str | OutputRef) -> PolicyStatement:
        """Permission to publish to a notification topic."""
        return PolicyStatement(actions=("sns:Publish",), resources=(topic_arn,))

    def derive_secret_read_statements(self, secret_arn: str | OutputRef) -> list[PolicyStatement]:
        """Read access to a single secret."""
        return [PolicyStatement(actions=SECRET_READ_ACTIONS, resources=(secret_arn,))]

    def attach(
        self,
        graph: ResourceGraph,
        config: StackConfig,
        global_settings: GlobalSettings,
    ) -> ResourceGraph:
        """
        Attach derived security artifacts to the descriptors that need them.

        - database: subnet-scoped ingress on the database port
        - compute: read access to the database secret
        - identity: trust policy plus registry, function, logging and
          metric statements for the deployment role
        """
        database = graph[DATABASE]
        database_sg = SecurityGroupRef(DATABASE)
        database.ingress = IngressRuleSet(database_sg)
        database.ingress.replace(
            config.database.port,
            self.derive_ingress_rules(config.network, database_sg, config.database.port),
        )

        compute = graph[COMPUTE]
        compute.statements = self.derive_secret_read_statements(OutputRef(DATABASE, "secret_arn"))

        identity = graph[IDENTITY]
        identity.trust_policy = self.derive_trust_policy(global_settings.ci_identity)
        identity.statements = [
            self.derive_metrics_statement(),
            *self.derive_least_privilege_statements(
                ResourceKind.REGISTRY, OutputRef(REGISTRY, "repository_arn")
            ),
            *self.derive_least_privilege_statements(
                ResourceKind.COMPUTE, global_settings.registry.repo_name
            ),
        ]

        graph.check_references()
        logger.info(
            "Attached %d ingress rules and %d statements",
            len(database.ingress),
            len(compute.statements) + len(identity.statements),
        )
        return graph
