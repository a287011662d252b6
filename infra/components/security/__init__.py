"""
Security components for IAM.

Components:
- LambdaRoleComponent: Function execution role
- CiIdentityComponent: GitHub OIDC provider and deployment role
"""

from infra.components.security.iam_roles import IamRoleOutputs, LambdaRoleComponent
from infra.components.security.ci_identity import CiIdentityComponent, CiIdentityOutputs

__all__ = [
    "LambdaRoleComponent",
    "IamRoleOutputs",
    "CiIdentityComponent",
    "CiIdentityOutputs",
]
