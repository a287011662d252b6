"""
Networking components for VPC and security groups.

Components:
- VpcComponent: VPC, tiered subnets, gateways and route tables
- SecurityGroupComponent: Security group plus derived ingress rules
"""

from infra.components.networking.vpc import VpcComponent, VpcOutputs
from infra.components.networking.security_groups import SecurityGroupComponent, SecurityGroupOutputs

__all__ = [
    "VpcComponent",
    "VpcOutputs",
    "SecurityGroupComponent",
    "SecurityGroupOutputs",
]
