"""User settings: schemas, records and the reconciliation engine."""

from __future__ import annotations

from .engine import (
    SETTINGS_NOTIFICATION_SOURCE,
    SettingsReconciliationEngine,
    SyncReport,
)
from .exceptions import AlreadyExists, InvalidPayload, RecordNotFound, StaleVersion
from .records import EDITABLE_USER_SETTINGS, SettingsRecord
from .schemas import (
    CreateSettingsMessage,
    PartialUserSettings,
    UpdateSettingsMessage,
    UserSettings,
    is_valid_nickname,
)
from .validation import SettingsSchemaValidator, ValidationResult

__all__ = [
    "EDITABLE_USER_SETTINGS",
    "SETTINGS_NOTIFICATION_SOURCE",
    "AlreadyExists",
    "CreateSettingsMessage",
    "InvalidPayload",
    "PartialUserSettings",
    "RecordNotFound",
    "SettingsReconciliationEngine",
    "SettingsRecord",
    "SettingsSchemaValidator",
    "StaleVersion",
    "SyncReport",
    "UpdateSettingsMessage",
    "UserSettings",
    "ValidationResult",
    "is_valid_nickname",
]
