"""SettingsSchemaValidator — turns raw messages into validated envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidPayload
from .schemas import CreateSettingsMessage, UpdateSettingsMessage

if TYPE_CHECKING:
    from collections.abc import Mapping

M = TypeVar("M", bound=BaseModel)


def default_errors_factory() -> dict[str, list[str]]:
    return {}


@dataclass
class ValidationResult(Generic[M]):
    """Either a validated message or field-level errors.

    Usage::

        result = validator.check_update(raw)
        if not result.is_valid:
            log(result.errors)
    """

    value: M | None = None
    errors: dict[str, list[str]] = field(default_factory=default_errors_factory)

    @property
    def is_valid(self) -> bool:
        return self.value is not None and len(self.errors) == 0

    def unwrap(self) -> M:
        """Return the validated message or raise :class:`InvalidPayload`."""
        if self.value is None or self.errors:
            raise InvalidPayload(self.errors)
        return self.value

    def __bool__(self) -> bool:
        return self.is_valid


def _collect_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors


class SettingsSchemaValidator:
    """Validates raw settings messages through their pydantic schemas.

    Any pydantic ``ValidationError`` is converted into ``{loc: [messages]}``
    so callers never depend on pydantic's error shape.
    """

    def _check(self, model: type[M], raw: Mapping[str, Any]) -> ValidationResult[M]:
        try:
            return ValidationResult(value=model.model_validate(raw))
        except PydanticValidationError as exc:
            return ValidationResult(errors=_collect_errors(exc))

    def check_update(self, raw: Mapping[str, Any]) -> ValidationResult[UpdateSettingsMessage]:
        return self._check(UpdateSettingsMessage, raw)

    def check_create(self, raw: Mapping[str, Any]) -> ValidationResult[CreateSettingsMessage]:
        return self._check(CreateSettingsMessage, raw)

    def validate_update(self, raw: Mapping[str, Any]) -> UpdateSettingsMessage:
        """Return the validated update message or raise :class:`InvalidPayload`."""
        return self.check_update(raw).unwrap()

    def validate_create(self, raw: Mapping[str, Any]) -> CreateSettingsMessage:
        """Return the validated create message or raise :class:`InvalidPayload`."""
        return self.check_create(raw).unwrap()
