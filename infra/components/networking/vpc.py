"""
VPC Component Resource for Network Infrastructure.

Steps & Architecture:
1. VPC: the isolated network container (CIDR from the environment config).
2. Subnets: one per subnet group per availability zone, CIDRs taken from
   the subnet plan so ingress rules and subnets always agree.
3. Internet Gateway: created when the layout has a public tier.
4. NAT Gateways: nat_gateway_count of them, one per public subnet.
5. Route Tables:
   - Public RT: 0.0.0.0/0 -> IGW.
   - Private-egress RT (one per subnet): 0.0.0.0/0 -> NAT when NAT exists.
   - Isolated RT: no internet route, only the implicit local route.
"""

from dataclasses import dataclass
from typing import Sequence

import pulumi
import pulumi_aws as aws

from infra.configs.base import NetworkConfig, SubnetTier
from infra.errors import ConfigError
from infra.graph.subnets import SubnetPlan
from infra.utils.tags import create_tags


@dataclass
class VpcOutputs:
    """Output values from VPC component."""
    vpc_id: pulumi.Output[str]
    public_subnet_ids: list[pulumi.Output[str]]
    private_egress_subnet_ids: list[pulumi.Output[str]]
    private_isolated_subnet_ids: list[pulumi.Output[str]]
    nat_gateway_ids: list[pulumi.Output[str]]


class VpcComponent(pulumi.ComponentResource):
    """
    VPC with tiered subnets across availability zones.

    Public subnets route to the internet gateway, private-egress subnets
    route through NAT when configured, isolated subnets stay local.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: NetworkConfig,
        subnets: Sequence[SubnetPlan],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:networking:Vpc", name, None, opts)
        self.environment = environment

        child_opts = pulumi.ResourceOptions(parent=self)

        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=config.cidr,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags=create_tags(environment, f"{name}-{config.name}"),
            opts=child_opts,
        )

        self.subnets: dict[SubnetTier, list[aws.ec2.Subnet]] = {tier: [] for tier in SubnetTier}
        for plan in subnets:
            subnet_name = f"{name}-{plan.name}"
            self.subnets[plan.tier].append(aws.ec2.Subnet(
                subnet_name,
                vpc_id=self.vpc.id,
                cidr_block=plan.cidr,
                availability_zone=plan.availability_zone,
                map_public_ip_on_launch=plan.tier == SubnetTier.PUBLIC,
                tags=create_tags(environment, subnet_name, Tier=plan.tier.value),
                opts=child_opts,
            ))

        self.nat_gateways: list[aws.ec2.NatGateway] = []
        self._create_route_tables(name, config.nat_gateway_count, child_opts)

        outputs = self.get_outputs()
        self.register_outputs({
            "vpc_id": outputs.vpc_id,
            "public_subnet_ids": outputs.public_subnet_ids,
            "private_egress_subnet_ids": outputs.private_egress_subnet_ids,
            "private_isolated_subnet_ids": outputs.private_isolated_subnet_ids,
        })

    def _create_route_tables(
        self,
        name: str,
        nat_gateway_count: int,
        opts: pulumi.ResourceOptions,
    ) -> None:
        """Create gateways and route tables for every tier."""
        public = self.subnets[SubnetTier.PUBLIC]

        if nat_gateway_count and not public:
            raise ConfigError(
                "NAT gateways require a public subnet group",
                {"nat_gateway_count": nat_gateway_count},
            )

        if public:
            self.igw = aws.ec2.InternetGateway(
                f"{name}-igw",
                vpc_id=self.vpc.id,
                tags=create_tags(self.environment, f"{name}-igw"),
                opts=opts,
            )
            public_rt = aws.ec2.RouteTable(
                f"{name}-public-rt",
                vpc_id=self.vpc.id,
                routes=[
                    aws.ec2.RouteTableRouteArgs(
                        cidr_block="0.0.0.0/0",
                        gateway_id=self.igw.id,
                    ),
                ],
                tags=create_tags(self.environment, f"{name}-public-rt"),
                opts=opts,
            )
            for index, subnet in enumerate(public):
                aws.ec2.RouteTableAssociation(
                    f"{name}-public-rt-assoc-{index + 1}",
                    subnet_id=subnet.id,
                    route_table_id=public_rt.id,
                    opts=opts,
                )

        for index in range(min(nat_gateway_count, len(public))):
            eip = aws.ec2.Eip(
                f"{name}-nat-eip-{index + 1}",
                domain="vpc",
                tags=create_tags(self.environment, f"{name}-nat-eip-{index + 1}"),
                opts=opts,
            )
            self.nat_gateways.append(aws.ec2.NatGateway(
                f"{name}-nat-{index + 1}",
                allocation_id=eip.id,
                subnet_id=public[index].id,
                tags=create_tags(self.environment, f"{name}-nat-{index + 1}"),
                opts=opts,
            ))

        # Private-egress: one table per subnet so each AZ can use its own NAT
        for index, subnet in enumerate(self.subnets[SubnetTier.PRIVATE_EGRESS]):
            routes = []
            if self.nat_gateways:
                nat = self.nat_gateways[index % len(self.nat_gateways)]
                routes.append(aws.ec2.RouteTableRouteArgs(
                    cidr_block="0.0.0.0/0",
                    nat_gateway_id=nat.id,
                ))
            route_table = aws.ec2.RouteTable(
                f"{name}-egress-rt-{index + 1}",
                vpc_id=self.vpc.id,
                routes=routes,
                tags=create_tags(self.environment, f"{name}-egress-rt-{index + 1}"),
                opts=opts,
            )
            aws.ec2.RouteTableAssociation(
                f"{name}-egress-rt-assoc-{index + 1}",
                subnet_id=subnet.id,
                route_table_id=route_table.id,
                opts=opts,
            )

        isolated = self.subnets[SubnetTier.PRIVATE_ISOLATED]
        if isolated:
            isolated_rt = aws.ec2.RouteTable(
                f"{name}-isolated-rt",
                vpc_id=self.vpc.id,
                routes=[],  # Local route only
                tags=create_tags(self.environment, f"{name}-isolated-rt"),
                opts=opts,
            )
            for index, subnet in enumerate(isolated):
                aws.ec2.RouteTableAssociation(
                    f"{name}-isolated-rt-assoc-{index + 1}",
                    subnet_id=subnet.id,
                    route_table_id=isolated_rt.id,
                    opts=opts,
                )

    def get_outputs(self) -> VpcOutputs:
        """Get VPC output values."""
        return VpcOutputs(
            vpc_id=self.vpc.id,
            public_subnet_ids=[s.id for s in self.subnets[SubnetTier.PUBLIC]],
            private_egress_subnet_ids=[s.id for s in self.subnets[SubnetTier.PRIVATE_EGRESS]],
            private_isolated_subnet_ids=[s.id for s in self.subnets[SubnetTier.PRIVATE_ISOLATED]],
            nat_gateway_ids=[n.id for n in self.nat_gateways],
        )
