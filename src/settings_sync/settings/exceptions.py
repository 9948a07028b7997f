"""Reconciliation errors raised by the settings engine and stores."""

from __future__ import annotations

from ..primitives.exceptions import (
    ConcurrencyError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


class RecordNotFound(NotFoundError):
    """Raised when no settings record exists for a nickname."""

    def __init__(self, nickname: str) -> None:
        self.nickname = nickname
        super().__init__(f"Settings for {nickname!r} not found")


class StaleVersion(ConcurrencyError):
    """Raised when a proposed version is not strictly newer than the stored one."""

    status_code = 400

    def __init__(
        self, nickname: str, version: int, current_version: int | None = None
    ) -> None:
        self.nickname = nickname
        self.version = version
        self.current_version = current_version
        msg = f"Outdated settings version {version} for {nickname!r}"
        if current_version is not None:
            msg += f" (current={current_version})"
        super().__init__(msg)


class AlreadyExists(ConflictError):
    """Raised when provisioning a nickname that already has settings."""

    def __init__(self, nickname: str) -> None:
        self.nickname = nickname
        super().__init__(f"Settings for {nickname!r} already exist")


class InvalidPayload(ValidationError):
    """Raised when a settings message fails schema validation."""
