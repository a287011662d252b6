"""
Tests for the provisioning engine.

Validates:
1. Descriptors are applied in topological order
2. Inputs are resolved from predecessor outputs before each apply
3. A failure aborts the remaining descriptors and propagates unmodified
"""

import pytest

from infra.errors import DependencyError
from infra.graph.builder import COMPUTE, DATABASE, IDENTITY, NETWORK, REGISTRY
from infra.provisioning import ProvisioningEngine


class TestProvisioningEngine:
    """Tests for ProvisioningEngine.apply."""

    def test_applies_in_topological_order(self, dev_graph, fake_materializer_factory):
        materializer = fake_materializer_factory()

        ProvisioningEngine(materializer).apply(dev_graph)

        assert materializer.applied_ids == [d.id for d in dev_graph.topological_order()]

    def test_inputs_resolved_from_predecessor_outputs(self, dev_graph, fake_materializer_factory):
        materializer = fake_materializer_factory()

        ProvisioningEngine(materializer).apply(dev_graph)
        inputs = dict(materializer.calls)

        assert inputs[DATABASE] == {
            "vpc_id": "network-vpc_id",
            "subnet_ids": "network-private_isolated_subnet_ids",
        }
        assert inputs[COMPUTE]["db_secret_arn"] == "database-secret_arn"
        assert inputs[COMPUTE]["repository_url"] == "registry-repository_url"
        assert inputs[IDENTITY] == {"repository_arn": "registry-repository_arn"}

    def test_outputs_recorded_on_descriptors(self, dev_graph, fake_materializer_factory):
        applied = ProvisioningEngine(fake_materializer_factory()).apply(dev_graph)

        assert applied[COMPUTE]["function_name"] == "compute-function_name"
        assert dev_graph[NETWORK].is_materialized
        assert dev_graph[REGISTRY].outputs["repository_arn"] == "registry-repository_arn"

    def test_failure_aborts_remaining_and_propagates(self, dev_graph, fake_materializer_factory):
        """The materializer's own exception reaches the caller; nothing after it runs."""
        materializer = fake_materializer_factory(fail_on=DATABASE)

        with pytest.raises(RuntimeError) as excinfo:
            ProvisioningEngine(materializer).apply(dev_graph)

        assert excinfo.value is materializer.error
        assert materializer.applied_ids == [NETWORK, REGISTRY, DATABASE]
        assert not dev_graph[DATABASE].is_materialized
        assert not dev_graph[COMPUTE].is_materialized

    def test_failure_is_not_retried(self, dev_graph, fake_materializer_factory):
        materializer = fake_materializer_factory(fail_on=NETWORK)

        with pytest.raises(RuntimeError):
            ProvisioningEngine(materializer).apply(dev_graph)

        assert materializer.applied_ids == [NETWORK]

    def test_missing_output_is_reported(self, dev_graph, fake_materializer_factory):
        """A consumer cannot run when its predecessor produced no such output."""
        materializer = fake_materializer_factory(empty=frozenset({NETWORK}))

        with pytest.raises(DependencyError) as excinfo:
            ProvisioningEngine(materializer).apply(dev_graph)

        assert excinfo.value.details == {"descriptor": NETWORK, "output": "vpc_id"}

    def test_empty_outputs_for_leaf_are_allowed(self, dev_graph, fake_materializer_factory):
        """The identity group may be owned elsewhere and report nothing."""
        applied = ProvisioningEngine(
            fake_materializer_factory(empty=frozenset({IDENTITY}))
        ).apply(dev_graph)

        assert applied[IDENTITY] == {}
        assert not dev_graph[IDENTITY].is_materialized
