"""Pytest fixtures for infrastructure tests."""

from pathlib import Path

import pytest

from infra.configs.base import CiIdentityConfig, GlobalSettings, RegistryConfig
from infra.configs.constants import BASELINE_STACK_CONFIG, ENVIRONMENT_OVERRIDES, GLOBAL_SETTINGS
from infra.configs.resolver import ConfigResolver
from infra.configs.store import ConfigStore
from infra.graph.builder import ResourceGraphBuilder
from infra.graph.descriptors import ResourceKind
from infra.policies.deriver import AccountScope, PolicyDeriver

# Outputs the fake materializer reports for each kind
FAKE_OUTPUTS = {
    ResourceKind.NETWORK: (
        "vpc_id",
        "public_subnet_ids",
        "private_egress_subnet_ids",
        "private_isolated_subnet_ids",
    ),
    ResourceKind.DATABASE: ("endpoint", "secret_arn", "security_group_id"),
    ResourceKind.REGISTRY: ("repository_url", "repository_arn", "repository_name"),
    ResourceKind.COMPUTE: ("function_arn", "function_name", "api_endpoint"),
    ResourceKind.IDENTITY: ("role_arn", "provider_arn", "topic_arn"),
}


class FakeMaterializer:
    """Records materialize calls and returns '<id>-<output>' strings."""

    def __init__(self, fail_on: str | None = None, empty: frozenset[str] = frozenset()) -> None:
        self.fail_on = fail_on
        self.empty = empty
        self.calls: list[tuple[str, dict]] = []
        self.error = RuntimeError(f"materialization of '{fail_on}' failed")

    @property
    def applied_ids(self) -> list[str]:
        return [descriptor_id for descriptor_id, _ in self.calls]

    def materialize(self, descriptor, inputs, resolve):
        self.calls.append((descriptor.id, inputs))
        if descriptor.id == self.fail_on:
            raise self.error
        if descriptor.id in self.empty:
            return {}
        return {name: f"{descriptor.id}-{name}" for name in FAKE_OUTPUTS[descriptor.kind]}


@pytest.fixture
def infra_package_root():
    """Return the infra package directory."""
    return Path(__file__).parent.parent.parent / "infra"


@pytest.fixture
def python_files_in_infra(infra_package_root):
    """Return all Python files in the infra package."""
    return [f for f in infra_package_root.rglob("*.py") if "__pycache__" not in str(f)]


@pytest.fixture
def store():
    """Store over the shipped tables."""
    return ConfigStore(
        version="test",
        defaults=BASELINE_STACK_CONFIG,
        overrides=ENVIRONMENT_OVERRIDES,
        global_settings=GLOBAL_SETTINGS,
    )


@pytest.fixture
def resolver(store):
    return ConfigResolver(store)


@pytest.fixture
def dev_config(resolver):
    return resolver.resolve("dev")


@pytest.fixture
def staging_config(resolver):
    return resolver.resolve("staging")


@pytest.fixture
def global_settings():
    return GlobalSettings(
        registry=RegistryConfig(repo_name="lambda-app"),
        ci_identity=CiIdentityConfig(owner="acme", repo_name="infra", branches=("main",)),
    )


@pytest.fixture
def account_scope():
    """Account with three availability zones."""
    return AccountScope(
        region="us-east-1",
        account="123456789012",
        availability_zones=("us-east-1a", "us-east-1b", "us-east-1c"),
    )


@pytest.fixture
def deriver(account_scope):
    return PolicyDeriver(account_scope)


@pytest.fixture
def dev_graph(dev_config, global_settings, deriver):
    """Dev graph with derived policies attached."""
    graph = ResourceGraphBuilder("lambda-app").build("dev", dev_config, global_settings)
    return deriver.attach(graph, dev_config, global_settings)


@pytest.fixture
def fake_materializer_factory():
    return FakeMaterializer
