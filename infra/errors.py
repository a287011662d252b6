"""
Exception hierarchy for infrastructure configuration and graph building.

Every error carries a human-readable message plus a details dict so the
entry point can log structured context before aborting the deployment.

Dependencies: None (pure domain layer)
System role: Centralized error taxonomy for resolve, validate and build
"""

from typing import Any


class InfraError(Exception):
    """Base exception for all infrastructure errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(InfraError):
    """Raised when settings are missing, unloaded or structurally malformed."""


class ValidationError(InfraError):
    """Raised when a configuration field violates its domain constraint."""

    def __init__(
        self,
        field: str,
        constraint: str,
        actual_value: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            field: Dotted path of the offending field (e.g. 'network.cidr')
            constraint: The violated constraint (e.g. 'range[1,6]')
            actual_value: The value that failed validation
            details: Additional context
        """
        self.field = field
        self.constraint = constraint
        self.actual_value = actual_value
        details = details or {}
        details.update({"field": field, "constraint": constraint})
        super().__init__(
            f"{field} violates {constraint}, got: {actual_value!r}",
            details,
        )


class ValidationErrorGroup(ValidationError):
    """Raised when more than one independent config object is invalid."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = list(errors)
        first = self.errors[0]
        super().__init__(
            first.field,
            first.constraint,
            first.actual_value,
            {"violations": [str(error) for error in self.errors]},
        )
        self.message = f"{len(self.errors)} configuration objects are invalid"


class UnknownEnvironmentError(ConfigError):
    """Raised when an environment has no stack config and no fallback."""

    def __init__(self, environment: str, available: list[str] | None = None) -> None:
        details: dict[str, Any] = {"environment": environment}
        if available is not None:
            details["available"] = available
        super().__init__(f"Unknown environment: {environment}", details)
        self.environment = environment


class DependencyError(InfraError):
    """Base exception for resource graph wiring errors."""


class MissingDependencyError(DependencyError):
    """Raised when a descriptor consumes an output it does not depend on."""

    def __init__(self, descriptor_id: str, missing: str) -> None:
        super().__init__(
            f"Descriptor '{descriptor_id}' references undeclared dependency '{missing}'",
            {"descriptor": descriptor_id, "missing": missing},
        )


class CyclicDependencyError(DependencyError):
    """Raised when the resource graph contains a dependency cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(
            "Cyclic dependency between resource groups: " + " -> ".join(cycle),
            {"cycle": cycle},
        )
