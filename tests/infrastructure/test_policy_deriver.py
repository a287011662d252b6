"""
Tests for derived security artifacts.

Validates:
1. Database ingress is scoped to private-egress subnet CIDRs, never a wildcard
2. The last rule source applied for a port is the only one kept
3. The CI trust policy is limited to one repository
4. Deployment statements are scoped to concrete resources
"""

import pytest

from infra.configs.base import CiIdentityConfig, SubnetTier
from infra.graph.builder import COMPUTE, DATABASE, IDENTITY, REGISTRY
from infra.graph.descriptors import ResourceKind
from infra.graph.subnets import plan_subnets, subnets_in_tier
from infra.policies.deriver import REGISTRY_PUSH_PULL_ACTIONS
from infra.policies.models import IngressRuleSet, PolicyStatement, SecurityRule, policy_document
from infra.refs import OutputRef, SecurityGroupRef

REPOSITORY_ARN = "arn:aws:ecr:us-east-1:123456789012:repository/lambda-app"


class TestIngressDerivation:
    """Tests for subnet-scoped ingress rules."""

    def test_one_rule_per_egress_subnet(self, deriver, staging_config, account_scope):
        """Three private-egress subnets give three rules with distinct CIDRs."""
        rules = deriver.derive_ingress_rules(staging_config.network, SecurityGroupRef(DATABASE), 5432)
        expected = subnets_in_tier(
            plan_subnets(staging_config.network, account_scope.availability_zones),
            SubnetTier.PRIVATE_EGRESS,
        )

        assert len(rules) == 3
        assert [r.source for r in rules] == [p.cidr for p in expected]
        assert len({r.source for r in rules}) == 3
        assert all(r.port == 5432 and r.protocol == "tcp" for r in rules)
        assert "0.0.0.0/0" not in {r.source for r in rules}

    def test_rules_are_cidr_scoped(self, deriver, dev_config):
        rules = deriver.derive_ingress_rules(dev_config.network, SecurityGroupRef(DATABASE), 5432)

        assert not any(r.is_group_scoped for r in rules)

    def test_group_scoped_rule_replaces_cidr_rules(self, deriver, staging_config):
        """Applying the group-scoped rule last leaves only that rule."""
        rule_set = IngressRuleSet(SecurityGroupRef(DATABASE))
        rule_set.replace(
            5432,
            deriver.derive_ingress_rules(staging_config.network, rule_set.security_group, 5432),
        )

        rule = deriver.allow_from_security_group(SecurityGroupRef(COMPUTE, id="sg-123"), 5432, rule_set)

        assert rule_set.rules_for_port(5432) == [rule]
        assert rule.is_group_scoped

    def test_cidr_rules_replace_group_scoped_rule(self, deriver, staging_config):
        """Applying the CIDR rules last leaves only those rules."""
        rule_set = IngressRuleSet(SecurityGroupRef(DATABASE))
        deriver.allow_from_security_group(SecurityGroupRef(COMPUTE), 5432, rule_set)
        rule_set.replace(
            5432,
            deriver.derive_ingress_rules(staging_config.network, rule_set.security_group, 5432),
        )

        assert len(rule_set) == 3
        assert not any(r.is_group_scoped for r in rule_set.rules)

    def test_replace_keeps_other_ports(self):
        rule_set = IngressRuleSet(SecurityGroupRef(DATABASE))
        rule_set.replace(5432, [SecurityRule("10.0.2.0/24", "tcp", 5432)])
        rule_set.replace(6379, [SecurityRule("10.0.2.0/24", "tcp", 6379)])

        assert rule_set.ports == [5432, 6379]

    def test_replace_rejects_rules_for_other_ports(self):
        rule_set = IngressRuleSet(SecurityGroupRef(DATABASE))

        with pytest.raises(ValueError):
            rule_set.replace(5432, [SecurityRule("10.0.2.0/24", "tcp", 3306)])


class TestTrustPolicy:
    """Tests for the CI web-identity trust statement."""

    def test_subject_is_limited_to_repository(self, deriver):
        statement = deriver.derive_trust_policy(CiIdentityConfig(owner="acme", repo_name="infra"))

        assert statement.actions == ("sts:AssumeRoleWithWebIdentity",)
        assert statement.conditions["StringLike"] == {
            "token.actions.githubusercontent.com:sub": "repo:acme/infra:*",
        }
        assert statement.conditions["StringEquals"] == {
            "token.actions.githubusercontent.com:aud": "sts.amazonaws.com",
        }

    def test_branches_do_not_narrow_subject(self, deriver):
        with_branches = deriver.derive_trust_policy(
            CiIdentityConfig(owner="acme", repo_name="infra", branches=("main",))
        )
        without = deriver.derive_trust_policy(CiIdentityConfig(owner="acme", repo_name="infra"))

        assert with_branches == without


class TestLeastPrivilegeStatements:
    """Tests for deployment identity statements."""

    def test_registry_statements(self, deriver):
        push_pull, auth = deriver.derive_least_privilege_statements(ResourceKind.REGISTRY, REPOSITORY_ARN)

        assert push_pull.actions == REGISTRY_PUSH_PULL_ACTIONS
        assert push_pull.resources == (REPOSITORY_ARN,)
        assert auth.actions == ("ecr:GetAuthorizationToken",)
        assert auth.resources == ("*",)

    def test_compute_statements(self, deriver):
        logs, functions = deriver.derive_least_privilege_statements(ResourceKind.COMPUTE, "lambda-app")

        assert logs.resources == (
            "arn:aws:logs:us-east-1:123456789012:log-group:/aws/lambda/*",
            "arn:aws:logs:us-east-1:123456789012:log-group:/aws/apigateway/*",
        )
        assert functions.resources == ("arn:aws:lambda:us-east-1:123456789012:function:*__lambda-app",)
        assert "lambda:UpdateFunctionCode" in functions.actions

    def test_unsupported_kind_is_rejected(self, deriver):
        with pytest.raises(ValueError):
            deriver.derive_least_privilege_statements(ResourceKind.NETWORK, "anything")

    def test_metrics_statement_is_namespace_scoped(self, deriver):
        statement = deriver.derive_metrics_statement()

        assert statement.conditions == {"StringLike": {"cloudwatch:namespace": "Deployment/*"}}


class TestAttach:
    """Tests for attaching derived artifacts to the graph."""

    def test_database_ingress_attached(self, dev_graph):
        ingress = dev_graph[DATABASE].ingress

        assert ingress.ports == [5432]
        assert [r.source for r in ingress.rules] == ["10.0.2.0/24", "10.0.3.0/24"]

    def test_compute_reads_database_secret(self, dev_graph):
        (statement,) = dev_graph[COMPUTE].statements

        assert statement.resources == (OutputRef(DATABASE, "secret_arn"),)
        assert statement.actions == ("secretsmanager:GetSecretValue", "secretsmanager:DescribeSecret")

    def test_identity_statements_reference_registry(self, dev_graph):
        identity = dev_graph[IDENTITY]
        references = {ref for statement in identity.statements for ref in statement.references()}

        assert references == {OutputRef(REGISTRY, "repository_arn")}
        assert identity.trust_policy.conditions["StringLike"] == {
            "token.actions.githubusercontent.com:sub": "repo:acme/infra:*",
        }

    def test_attached_graph_passes_reference_checks(self, dev_graph):
        dev_graph.check_references()


class TestPolicyRendering:
    """Tests for IAM JSON rendering."""

    def test_statement_resolves_references(self):
        statement = PolicyStatement(actions=("ecr:PutImage",), resources=(OutputRef(REGISTRY, "repository_arn"),))

        resolved = statement.resolve({OutputRef(REGISTRY, "repository_arn"): REPOSITORY_ARN}.__getitem__)

        assert resolved.resources == (REPOSITORY_ARN,)
        assert list(resolved.references()) == []

    def test_policy_document(self):
        statement = PolicyStatement(
            actions=("sts:AssumeRoleWithWebIdentity",),
            principals={"Federated": "arn:aws:iam::123456789012:oidc-provider/x"},
            conditions={"StringEquals": {"aud": "sts.amazonaws.com"}},
        )

        document = policy_document([statement])

        assert document["Version"] == "2012-10-17"
        assert document["Statement"] == [{
            "Effect": "Allow",
            "Principal": {"Federated": "arn:aws:iam::123456789012:oidc-provider/x"},
            "Action": ["sts:AssumeRoleWithWebIdentity"],
            "Condition": {"StringEquals": {"aud": "sts.amazonaws.com"}},
        }]
