"""
Utility functions for the infrastructure program.

Provides naming conventions, tag factories, and logging setup.
"""

from infra.utils.logger import configure_logging, get_logger
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags

__all__ = [
    "ResourceNamer",
    "configure_logging",
    "create_tags",
    "get_logger",
]
