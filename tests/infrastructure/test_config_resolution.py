"""
Tests for configuration merging and environment resolution.

Validates:
1. Overrides replace leaves and merge nested records key-by-key
2. Unknown override fields are rejected
3. Unknown environments fall back to the default with a warning
4. The reserved global scope never resolves to a stack config
"""

import logging
from dataclasses import replace

import pytest

from infra.configs.base import InstanceSize, SubnetGroupConfig, SubnetTier
from infra.configs.constants import BASELINE_STACK_CONFIG, GLOBAL_SETTINGS
from infra.configs.merge import deep_merge
from infra.configs.resolver import ConfigResolver
from infra.configs.store import ConfigStore, get_config_store
from infra.errors import ConfigError, UnknownEnvironmentError


class TestDeepMerge:
    """Tests for deep_merge over frozen records."""

    def test_leaf_override_replaces_only_that_field(self):
        """A leaf override changes one field and keeps its siblings."""
        merged = deep_merge(BASELINE_STACK_CONFIG, {"database": {"allocated_storage_gib": 100}})

        assert merged.database.allocated_storage_gib == 100
        assert merged.database.port == BASELINE_STACK_CONFIG.database.port
        assert merged.network == BASELINE_STACK_CONFIG.network

    def test_base_is_not_mutated(self):
        """Merging returns a new record and leaves the baseline untouched."""
        deep_merge(BASELINE_STACK_CONFIG, {"compute": {"memory_mib": 2048}})

        assert BASELINE_STACK_CONFIG.compute.memory_mib == 512

    def test_subnet_group_merges_key_by_key(self):
        """Overriding one subnet group field keeps its tier and the other groups."""
        merged = deep_merge(
            BASELINE_STACK_CONFIG,
            {"network": {"subnet_groups": {"app": {"cidr_mask": 26}}}},
        )

        groups = merged.network.subnet_groups
        assert groups["app"] == SubnetGroupConfig(cidr_mask=26, tier=SubnetTier.PRIVATE_EGRESS)
        assert list(groups) == ["frontend", "app", "db"]
        assert groups["frontend"].cidr_mask == 24

    def test_new_subnet_group_is_constructed(self):
        """A new subnet group key builds a complete record with an enum tier."""
        merged = deep_merge(
            BASELINE_STACK_CONFIG,
            {"network": {"subnet_groups": {"cache": {"cidr_mask": 28, "tier": "private-isolated"}}}},
        )

        cache = merged.network.subnet_groups["cache"]
        assert cache.tier is SubnetTier.PRIVATE_ISOLATED
        assert list(merged.network.subnet_groups)[-1] == "cache"

    def test_incomplete_new_subnet_group_is_rejected(self):
        """A new subnet group missing a field cannot be built."""
        with pytest.raises(ConfigError):
            deep_merge(
                BASELINE_STACK_CONFIG,
                {"network": {"subnet_groups": {"cache": {"cidr_mask": 28}}}},
            )

    def test_enum_strings_are_coerced(self):
        """String overrides for enum fields become enum members."""
        merged = deep_merge(BASELINE_STACK_CONFIG, {"database": {"instance_size": "small"}})

        assert merged.database.instance_size is InstanceSize.SMALL

    def test_unknown_field_is_rejected(self):
        """An override naming a field the record lacks raises ConfigError."""
        with pytest.raises(ConfigError) as excinfo:
            deep_merge(BASELINE_STACK_CONFIG, {"database": {"storage": 30}})

        assert excinfo.value.details["path"] == "database"
        assert excinfo.value.details["fields"] == ["storage"]

    def test_non_mapping_override_for_record_is_rejected(self):
        """A nested record cannot be overridden by a scalar."""
        with pytest.raises(ConfigError):
            deep_merge(BASELINE_STACK_CONFIG, {"database": 5})


class TestConfigStore:
    """Tests for the loaded-once table store."""

    def test_global_key_is_reserved(self):
        with pytest.raises(ConfigError):
            ConfigStore(
                version="test",
                defaults=BASELINE_STACK_CONFIG,
                overrides={"dev": {}, "global": {}},
            )

    def test_fallback_needs_an_override_table(self):
        with pytest.raises(ConfigError):
            ConfigStore(version="test", defaults=BASELINE_STACK_CONFIG, overrides={"prod": {}})

    def test_overrides_are_read_only(self, store):
        with pytest.raises(TypeError):
            store.overrides["staging"]["database"]["allocated_storage_gib"] = 10

    def test_shared_store_is_cached(self):
        assert get_config_store() is get_config_store()
        assert "staging" in get_config_store().environments


class TestConfigResolver:
    """Tests for environment resolution."""

    def test_dev_uses_baseline(self, resolver):
        """Dev has an empty override table and resolves to the baseline."""
        config = resolver.resolve("dev")

        assert config.database.instance_size is InstanceSize.MICRO
        assert config.database.deletion_protection is False
        assert config.network.nat_gateway_count == 0

    def test_staging_overrides_apply(self, resolver):
        config = resolver.resolve("staging")

        assert config.database.instance_size is InstanceSize.SMALL
        assert config.database.deletion_protection is True
        assert config.database.allocated_storage_gib == 50
        assert config.network.max_azs == 3
        assert config.network.nat_gateway_count == 1
        assert config.compute.reserved_concurrency == 10
        # Untouched fields keep baseline values
        assert config.network.cidr == "10.0.0.0/16"
        assert config.database.port == 5432

    def test_resolution_is_idempotent(self, resolver):
        assert resolver.resolve("staging") == resolver.resolve("staging")

    def test_unknown_environment_falls_back_with_warning(self, resolver, caplog):
        """A typo resolves to dev and logs a warning instead of failing."""
        with caplog.at_level(logging.WARNING, logger="infra.configs.resolver"):
            config = resolver.resolve("prod-typo")

        assert config == resolver.resolve("dev")
        assert "prod-typo" in caplog.text
        assert "falling back to 'dev'" in caplog.text

    def test_unknown_environment_without_fallback_fails(self):
        strict = ConfigResolver(ConfigStore(
            version="test",
            defaults=BASELINE_STACK_CONFIG,
            overrides={"dev": {}},
            default_environment=None,
        ))

        with pytest.raises(UnknownEnvironmentError) as excinfo:
            strict.resolve("prod")

        assert excinfo.value.environment == "prod"

    def test_global_scope_is_not_an_environment(self, resolver):
        with pytest.raises(UnknownEnvironmentError):
            resolver.resolve("global")

    def test_resolve_global(self, resolver):
        assert resolver.resolve_global() == GLOBAL_SETTINGS

    def test_resolve_global_when_not_loaded(self):
        unloaded = ConfigResolver(ConfigStore(
            version="test",
            defaults=BASELINE_STACK_CONFIG,
            overrides={"dev": {}},
        ))

        with pytest.raises(ConfigError):
            unloaded.resolve_global()

    def test_invalid_override_table_fails_resolution(self):
        broken = ConfigResolver(ConfigStore(
            version="test",
            defaults=BASELINE_STACK_CONFIG,
            overrides={"dev": {"compute": {"memory": 1024}}},
        ))

        with pytest.raises(ConfigError):
            broken.resolve("dev")

    def test_replace_keeps_subnet_groups_read_only(self, dev_config):
        network = replace(dev_config.network, max_azs=3)

        with pytest.raises(TypeError):
            network.subnet_groups["extra"] = network.subnet_groups["app"]
