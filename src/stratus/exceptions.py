from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas.instance import Instance


class StratusError(Exception):
    """Base exception for instance reconciliation errors."""


class ConfigurationError(StratusError):
    """Raised when required input is missing or cannot be satisfied."""


class ProviderError(StratusError):
    """Raised when a cloud provider API call fails."""

    def __init__(
        self, message: str, *, operation: str = "", code: str | None = None
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.code = code


class InstanceNotFoundError(ProviderError):
    """Raised when the provider reports that an instance does not exist."""


class InstanceCreationError(ProviderError):
    """Raised when running a new instance fails. Carries the attempted instance."""

    def __init__(
        self,
        message: str,
        *,
        instance: Instance,
        operation: str = "RunInstances",
        code: str | None = None,
    ) -> None:
        super().__init__(message, operation=operation, code=code)
        self.instance = instance


class ProtocolViolation(StratusError):
    """Raised when a provider response lacks a field the API guarantees."""
