"""
Subnet planning for a VPC layout.

Subnets are carved sequentially out of the VPC CIDR: for each subnet group,
in declaration order, one subnet per availability zone. The same plan feeds
both the network component (which creates the subnets) and the policy
deriver (which scopes ingress rules to subnet CIDRs), so the two always
agree on which CIDR belongs to which tier.

Example (10.0.0.0/16, two AZs, three /24 groups):
    frontend -> 10.0.0.0/24, 10.0.1.0/24
    app      -> 10.0.2.0/24, 10.0.3.0/24
    db       -> 10.0.4.0/24, 10.0.5.0/24
"""

import ipaddress
from dataclasses import dataclass
from typing import Sequence

from infra.configs.base import NetworkConfig, SubnetTier
from infra.errors import ConfigError


@dataclass(frozen=True)
class SubnetPlan:
    """
    A single planned subnet.

    Attributes:
        group: Subnet group name
        tier: Accessibility tier of the group
        az_index: Index of the availability zone (0-based)
        availability_zone: AZ name when known, else None
        cidr: Subnet CIDR block
    """
    group: str
    tier: SubnetTier
    az_index: int
    availability_zone: str | None
    cidr: str

    @property
    def name(self) -> str:
        return f"{self.group}-{self.az_index + 1}"


def az_count(network: NetworkConfig, availability_zones: Sequence[str] = ()) -> int:
    """Number of AZs the network spans: max_azs, capped by the AZs available."""
    if availability_zones:
        return min(network.max_azs, len(availability_zones))
    return network.max_azs


def plan_subnets(
    network: NetworkConfig,
    availability_zones: Sequence[str] = (),
) -> tuple[SubnetPlan, ...]:
    """
    Allocate subnet CIDRs for every group in every availability zone.

    Args:
        network: VPC layout
        availability_zones: AZ names available in the region; when empty,
            max_azs zones are planned without names

    Returns:
        Planned subnets ordered by group, then AZ

    Raises:
        ConfigError: If the groups do not fit in the VPC CIDR
    """
    try:
        vpc = ipaddress.IPv4Network(network.cidr, strict=True)
    except ValueError as exc:
        raise ConfigError(f"Invalid VPC CIDR '{network.cidr}': {exc}") from exc

    zones = az_count(network, availability_zones)
    cursor = int(vpc.network_address)
    end = int(vpc.broadcast_address) + 1
    plans: list[SubnetPlan] = []

    for group_name, group in network.subnet_groups.items():
        if group.cidr_mask < vpc.prefixlen or group.cidr_mask > 32:
            raise ConfigError(
                f"Subnet group '{group_name}' mask /{group.cidr_mask} does not fit in {vpc}",
                {"group": group_name, "cidr_mask": group.cidr_mask},
            )
        size = 2 ** (32 - group.cidr_mask)
        for index in range(zones):
            # Align to the subnet boundary
            cursor = -(-cursor // size) * size
            if cursor + size > end:
                raise ConfigError(
                    f"VPC {vpc} has no room for subnet group '{group_name}'",
                    {"group": group_name, "az_index": index},
                )
            subnet = ipaddress.IPv4Network((cursor, group.cidr_mask))
            plans.append(SubnetPlan(
                group=group_name,
                tier=group.tier,
                az_index=index,
                availability_zone=availability_zones[index] if availability_zones else None,
                cidr=str(subnet),
            ))
            cursor += size

    return tuple(plans)


def subnets_in_tier(plans: Sequence[SubnetPlan], tier: SubnetTier) -> list[SubnetPlan]:
    """Filter planned subnets down to one accessibility tier."""
    return [plan for plan in plans if plan.tier == tier]
