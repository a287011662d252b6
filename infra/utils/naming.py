"""
Resource naming conventions for consistent AWS resource names.

Follows pattern: {project}-{environment}-{resource}
"""

from dataclasses import dataclass

# Separator between environment and application in function names.
# The deployment role's Lambda grant matches on "*__<app>".
FUNCTION_NAME_SEPARATOR = "__"


@dataclass
class ResourceNamer:
    """
    Generates consistent resource names for AWS resources.

    Attributes:
        project: Project identifier
        environment: Deployment environment (dev, staging, global)
    """
    project: str
    environment: str

    def name(self, resource: str) -> str:
        """
        Generate a resource name.

        Args:
            resource: Resource identifier (e.g., 'vpc', 'database-sg')

        Returns:
            Formatted resource name
        """
        return f"{self.project}-{self.environment}-{resource}"

    def function_name(self, app_name: str) -> str:
        """
        Generate a Lambda function name scoped to this environment.

        Args:
            app_name: Application name shared by every environment

        Returns:
            Function name such as 'dev__lambda-app'
        """
        return f"{self.environment}{FUNCTION_NAME_SEPARATOR}{app_name}"
