"""Domain and infrastructure exceptions for settings-sync."""

from __future__ import annotations


class SettingsSyncError(Exception):
    """Root exception for the whole service.

    ``status_code`` is the conventional HTTP status an API boundary would map
    the error onto.
    """

    status_code: int = 500


class DomainError(SettingsSyncError):
    """Base class for all domain-related errors."""


class ConcurrencyError(DomainError):
    """Base class for version conflicts."""

    status_code = 409


class NotFoundError(DomainError):
    """Raised when a resource is not found."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a resource already exists."""

    status_code = 409


class ValidationError(SettingsSyncError):
    """Raised when an inbound message fails validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    status_code = 400

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class InfrastructureError(SettingsSyncError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""
