"""
ECR Repository Component for Lambda Container Images.

Shared by every environment: each environment's function runs a tag of
the same repository. The repository is global-scoped, so only one stack
creates it; the others look it up by name.

Key Features:
- scan_on_push=True: Every image is scanned for CVEs on upload.
- retain_on_delete: Destroying a stack never deletes pushed images.
- Tag mutability: MUTABLE (allows overwriting 'latest' on each push).

Outputs (passed to the compute resource group):
  - repository_url: <ACCOUNT>.dkr.ecr.<REGION>.amazonaws.com/<REPO>
  - repository_arn: arn:aws:ecr:<REGION>:<ACCOUNT>:repository/<REPO>
  - repository_name: <REPO>
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.base import RegistryConfig
from infra.utils.tags import create_tags


@dataclass
class EcrRepositoryOutputs:
    """Output values from ECR repository component."""
    repository_url: pulumi.Output[str]
    repository_arn: pulumi.Output[str]
    repository_name: pulumi.Output[str]


class EcrRepositoryComponent(pulumi.ComponentResource):
    """
    ECR repository for the function's container images.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: RegistryConfig,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:EcrRepository", name, None, opts)

        self.repository = aws.ecr.Repository(
            f"{name}-image-repo",
            name=config.repo_name,
            image_scanning_configuration=aws.ecr.RepositoryImageScanningConfigurationArgs(
                scan_on_push=True,
            ),
            image_tag_mutability="MUTABLE",
            tags=create_tags(environment, config.repo_name),
            opts=pulumi.ResourceOptions(parent=self, retain_on_delete=True),
        )

        self.register_outputs({
            "repository_url": self.repository.repository_url,
            "repository_arn": self.repository.arn,
            "repository_name": self.repository.name,
        })

    def get_outputs(self) -> EcrRepositoryOutputs:
        """Get ECR repository output values."""
        return EcrRepositoryOutputs(
            repository_url=self.repository.repository_url,
            repository_arn=self.repository.arn,
            repository_name=self.repository.name,
        )


def lookup_repository(config: RegistryConfig) -> EcrRepositoryOutputs:
    """Reference a repository created by another stack."""
    repository = aws.ecr.get_repository_output(name=config.repo_name)
    return EcrRepositoryOutputs(
        repository_url=repository.repository_url,
        repository_arn=repository.arn,
        repository_name=repository.name,
    )
