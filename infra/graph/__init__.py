"""
Resource graph: descriptors, dependency edges and subnet planning.

Components:
- ResourceGraphBuilder: describes the resource groups of one environment
- ResourceGraph: descriptors plus topological ordering and cycle checks
- plan_subnets: sequential CIDR allocation for the VPC layout
"""

from infra.graph.builder import ResourceGraphBuilder
from infra.graph.descriptors import (
    DescriptorScope,
    ResourceGraph,
    ResourceGroupDescriptor,
    ResourceKind,
)
from infra.graph.subnets import SubnetPlan, plan_subnets, subnets_in_tier

__all__ = [
    "DescriptorScope",
    "ResourceGraph",
    "ResourceGraphBuilder",
    "ResourceGroupDescriptor",
    "ResourceKind",
    "SubnetPlan",
    "plan_subnets",
    "subnets_in_tier",
]
