"""Pydantic schemas for inbound settings messages."""

from __future__ import annotations

import re
from typing import Annotated

import phonenumbers
from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..messaging.envelope import SettingsEnvelope

_NICKNAME_RE = re.compile(r"^(?!.*\.{2,})[a-zA-Z0-9][a-zA-Z0-9.]{1,28}[a-zA-Z0-9]$")
_PHONE_RE = re.compile(r"^\+[1-9][0-9]{10,14}$")
_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def is_valid_nickname(value: str) -> bool:
    """Return True for 3-30 chars of letters, digits and single inner periods.

    Purely numeric nicknames are rejected.
    """
    return bool(_NICKNAME_RE.match(value)) and not value.isdigit()


def _check_nickname(value: str) -> str:
    if not is_valid_nickname(value):
        raise ValueError("invalid nickname")
    return value


_MOBILE_TYPES = frozenset(
    {
        phonenumbers.PhoneNumberType.MOBILE,
        phonenumbers.PhoneNumberType.FIXED_LINE_OR_MOBILE,
    }
)


def is_valid_phone(value: str) -> bool:
    """Return True for an E.164 number that can reach a mobile phone."""
    if not _PHONE_RE.match(value):
        return False
    try:
        number = phonenumbers.parse(value, None)
    except phonenumbers.NumberParseException:
        return False
    return phonenumbers.is_valid_number(number) and (
        phonenumbers.number_type(number) in _MOBILE_TYPES
    )


def _check_phone(value: str) -> str:
    if not is_valid_phone(value):
        raise ValueError("phone number must be a mobile number in E.164 format")
    return value


def _check_url(value: str) -> str:
    # keep the caller's spelling; AnyUrl would normalise it
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError as e:
        raise ValueError("invalid URL") from e
    return value


Nickname = Annotated[str, AfterValidator(_check_nickname)]
Phone = Annotated[str, AfterValidator(_check_phone)]
Url = Annotated[str, AfterValidator(_check_url)]


class UserSettings(BaseModel):
    """Complete attribute set required to provision a user."""

    language: str = "en"
    timezone: str
    avatar: Url
    last_name: str
    first_name: str
    email: EmailStr
    phone: Phone
    matrix_id: str | None = None
    display_name: str


class PartialUserSettings(BaseModel):
    """Attribute subset carried by an update message.

    Unknown keys are dropped. Fields may be omitted but, apart from
    ``matrix_id``, not sent as null. At least one field is required.
    """

    model_config = ConfigDict(extra="ignore")

    language: str | None = None
    timezone: str | None = None
    avatar: Url | None = None
    last_name: str | None = None
    first_name: str | None = None
    email: EmailStr | None = None
    phone: Phone | None = None
    matrix_id: str | None = None
    display_name: str | None = None

    @field_validator(
        "language",
        "timezone",
        "avatar",
        "last_name",
        "first_name",
        "email",
        "phone",
        "display_name",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("may not be null")
        return value

    @model_validator(mode="after")
    def _at_least_one(self) -> PartialUserSettings:
        if not self.model_fields_set:
            raise ValueError("At least one setting must be provided")
        return self


class CreateSettingsMessage(SettingsEnvelope):
    """Provisioning message: full attribute set for a new record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    nickname: Nickname
    request_id: str
    timestamp: int = Field(..., gt=0)
    version: int = Field(default=1, ge=1)
    payload: UserSettings  # type: ignore[assignment]


class UpdateSettingsMessage(SettingsEnvelope):
    """Partial update proposed at ``version``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    nickname: Nickname
    request_id: str
    timestamp: int = Field(..., gt=0)
    payload: PartialUserSettings  # type: ignore[assignment]
