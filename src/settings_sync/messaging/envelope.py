"""SettingsEnvelope — standard immutable wrapper for settings messages."""

from __future__ import annotations

import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class SettingsEnvelope(BaseModel):
    """Immutable wrapper for settings messages over the wire.

    ``timestamp`` is the producer-side emission time in epoch milliseconds.
    It is informational only and never used for ordering; ``version`` is.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    nickname: str = Field(..., description="Key of the settings record")
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: int = Field(default_factory=now_ms, gt=0)
    version: int = Field(..., ge=1)
    payload: dict[str, Any] = Field(default_factory=dict)
