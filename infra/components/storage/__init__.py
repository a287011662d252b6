"""
Storage components for RDS and ECR.

Components:
- RdsPostgresComponent: RDS PostgreSQL database
- EcrRepositoryComponent: Container image repository
"""

from infra.components.storage.rds_postgres import RdsPostgresComponent, RdsOutputs
from infra.components.storage.ecr_repository import EcrRepositoryComponent, EcrRepositoryOutputs

__all__ = [
    "RdsPostgresComponent",
    "RdsOutputs",
    "EcrRepositoryComponent",
    "EcrRepositoryOutputs",
]
