"""settings-sync — propagate versioned user settings over RabbitMQ."""

from __future__ import annotations

from .messaging import RetryPolicy, SettingsEnvelope
from .primitives.exceptions import SettingsSyncError
from .settings import SettingsReconciliationEngine, SettingsRecord, SyncReport

__version__ = "0.1.0"

__all__ = [
    "RetryPolicy",
    "SettingsEnvelope",
    "SettingsReconciliationEngine",
    "SettingsRecord",
    "SettingsSyncError",
    "SyncReport",
    "__version__",
]
