"""
Security artifacts derived from topology.

Models live here; the derivation logic is in infra.policies.deriver.
"""

from infra.policies.models import (
    IngressRuleSet,
    PolicyStatement,
    SecurityRule,
    policy_document,
)

__all__ = [
    "IngressRuleSet",
    "PolicyStatement",
    "SecurityRule",
    "policy_document",
]
