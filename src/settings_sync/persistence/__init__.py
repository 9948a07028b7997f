from .exceptions import SettingsStoreError, SQLAlchemyPersistenceError
from .memory import InMemorySettingsStore
from .models import Base, JSONType, UserSettingsModel
from .store import SQLAlchemySettingsStore, create_schema

__all__ = [
    "Base",
    "InMemorySettingsStore",
    "JSONType",
    "SQLAlchemyPersistenceError",
    "SQLAlchemySettingsStore",
    "SettingsStoreError",
    "UserSettingsModel",
    "create_schema",
]
