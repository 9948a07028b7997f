from .exceptions import (
    ConcurrencyError,
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    PersistenceError,
    SettingsSyncError,
    ValidationError,
)

__all__ = [
    "ConcurrencyError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "NotFoundError",
    "PersistenceError",
    "SettingsSyncError",
    "ValidationError",
]
