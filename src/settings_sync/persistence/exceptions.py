"""Exceptions for the SQLAlchemy persistence layer."""

from __future__ import annotations

from ..primitives.exceptions import PersistenceError


class SQLAlchemyPersistenceError(PersistenceError):
    """Base exception for all SQLAlchemy-specific persistence errors."""


class SettingsStoreError(SQLAlchemyPersistenceError):
    """Raised when a settings store operation fails in the database."""


__all__: list[str] = [
    "SQLAlchemyPersistenceError",
    "SettingsStoreError",
]
