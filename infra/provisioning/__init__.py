"""
Provisioning: applies resource graphs.

- ProvisioningEngine: ordered application with output wiring
- Materializer: the protocol a backend implements
"""

from infra.provisioning.engine import Materializer, ProvisioningEngine

__all__ = [
    "Materializer",
    "ProvisioningEngine",
]
