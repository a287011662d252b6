"""
Configuration dataclasses for environment and global settings.

Every record is frozen: tables are resolved and validated once per
deployment run and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

GLOBAL_SCOPE = "global"


class SubnetTier(str, Enum):
    """Accessibility tier of a subnet group."""
    PUBLIC = "public"
    PRIVATE_EGRESS = "private-egress"
    PRIVATE_ISOLATED = "private-isolated"


class InstanceClass(str, Enum):
    """RDS instance families used by the stacks."""
    BURSTABLE3 = "t3"
    BURSTABLE4_GRAVITON = "t4g"
    MEMORY6_GRAVITON = "r6g"
    STANDARD6_GRAVITON = "m6g"


class InstanceSize(str, Enum):
    """RDS instance sizes used by the stacks."""
    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"


@dataclass(frozen=True)
class SubnetGroupConfig:
    """
    One subnet group, replicated across every availability zone.

    Attributes:
        cidr_mask: Prefix length of each subnet in the group
        tier: Accessibility tier of the group
    """
    cidr_mask: int
    tier: SubnetTier


@dataclass(frozen=True)
class NetworkConfig:
    """
    VPC layout for one environment.

    Attributes:
        name: Logical VPC name
        cidr: VPC CIDR block (e.g. '10.0.0.0/16')
        max_azs: Number of availability zones to spread subnets over
        nat_gateway_count: NAT gateways placed in public subnets
        subnet_groups: Ordered mapping of group name to subnet group
    """
    name: str
    cidr: str
    max_azs: int
    nat_gateway_count: int
    subnet_groups: Mapping[str, SubnetGroupConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "subnet_groups", MappingProxyType(dict(self.subnet_groups)))

    def groups_in_tier(self, tier: SubnetTier) -> list[str]:
        """Names of the subnet groups in the given tier, in declaration order."""
        return [name for name, group in self.subnet_groups.items() if group.tier == tier]


@dataclass(frozen=True)
class DatabaseConfig:
    """
    PostgreSQL instance settings.

    Attributes:
        instance_class: RDS instance family
        instance_size: RDS instance size
        allocated_storage_gib: Storage in GiB
        name: Initial database name
        port: Listener port
        backup_retention_days: Automated backup retention
        deletion_protection: Block accidental deletion
    """
    instance_class: InstanceClass
    instance_size: InstanceSize
    allocated_storage_gib: int
    name: str
    port: int
    backup_retention_days: int
    deletion_protection: bool

    @property
    def instance_type(self) -> str:
        """RDS instance type string, e.g. 'db.t3.micro'."""
        return f"db.{self.instance_class.value}.{self.instance_size.value}"


@dataclass(frozen=True)
class ComputeConfig:
    """
    Container-image Lambda settings.

    Attributes:
        function_name: Explicit function name; derived from the environment when None
        memory_mib: Function memory in MiB
        timeout_seconds: Function timeout in seconds
        reserved_concurrency: Reserved concurrent executions, unreserved when None
        image_tag: Registry tag the function runs
    """
    function_name: str | None
    memory_mib: int
    timeout_seconds: int
    reserved_concurrency: int | None
    image_tag: str


@dataclass(frozen=True)
class CiIdentityConfig:
    """GitHub repository allowed to assume the deployment role."""
    owner: str
    repo_name: str
    branches: tuple[str, ...] | None = None


@dataclass(frozen=True)
class RegistryConfig:
    """Container image repository shared by every environment."""
    repo_name: str


@dataclass(frozen=True)
class StackConfig:
    """Per-environment configuration of the network, database and compute stacks."""
    network: NetworkConfig
    database: DatabaseConfig
    compute: ComputeConfig


@dataclass(frozen=True)
class GlobalSettings:
    """Environment-independent settings; exists exactly once per process."""
    registry: RegistryConfig
    ci_identity: CiIdentityConfig
