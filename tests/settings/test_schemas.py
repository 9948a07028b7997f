"""Tests for the settings message schemas."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from settings_sync.settings.schemas import (
    CreateSettingsMessage,
    PartialUserSettings,
    UpdateSettingsMessage,
    UserSettings,
    is_valid_nickname,
)


def update_message(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "source": "profile",
        "nickname": "alice",
        "request_id": "r-1",
        "timestamp": 1700000000000,
        "version": 2,
        "payload": {"timezone": "CET"},
    }
    base.update(overrides)
    return base


@pytest.mark.parametrize(
    "nickname",
    ["abc", "alice", "alice.smith", "a1b", "A" * 30, "user.42"],
)
def test_valid_nicknames(nickname: str) -> None:
    assert is_valid_nickname(nickname)


@pytest.mark.parametrize(
    "nickname",
    [
        "ab",  # too short
        "A" * 31,  # too long
        ".alice",
        "alice.",
        "al..ice",
        "alice_smith",
        "12345",  # purely numeric
        "",
    ],
)
def test_invalid_nicknames(nickname: str) -> None:
    assert not is_valid_nickname(nickname)


def test_user_settings_defaults_language(full_settings: dict[str, Any]) -> None:
    data = dict(full_settings)
    del data["language"]
    del data["matrix_id"]
    settings = UserSettings.model_validate(data)
    assert settings.language == "en"
    assert settings.matrix_id is None


def test_user_settings_keeps_avatar_spelling(full_settings: dict[str, Any]) -> None:
    data = dict(full_settings, avatar="https://cdn.example.com/A.png")
    assert UserSettings.model_validate(data).avatar == "https://cdn.example.com/A.png"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("email", "not-an-email"),
        ("phone", "12025550123"),
        ("phone", "+0123456789012"),
        ("phone", "+1202"),
        ("phone", "+441212345678"),
        ("avatar", "not a url"),
    ],
)
def test_user_settings_rejects_bad_values(
    full_settings: dict[str, Any], field: str, value: str
) -> None:
    with pytest.raises(ValidationError):
        UserSettings.model_validate(dict(full_settings, **{field: value}))


@pytest.mark.parametrize("phone", ["+447400123456", "+12015550123"])
def test_user_settings_accepts_mobile_numbers(
    full_settings: dict[str, Any], phone: str
) -> None:
    assert UserSettings.model_validate(dict(full_settings, phone=phone)).phone == phone


def test_user_settings_rejects_landline(full_settings: dict[str, Any]) -> None:
    with pytest.raises(ValidationError, match="mobile number"):
        UserSettings.model_validate(dict(full_settings, phone="+441212345678"))


def test_partial_requires_at_least_one_field() -> None:
    with pytest.raises(ValidationError, match="At least one setting must be provided"):
        PartialUserSettings.model_validate({})


def test_partial_drops_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        PartialUserSettings.model_validate({"favourite_colour": "blue"})
    partial = PartialUserSettings.model_validate({"timezone": "CET", "extra": 1})
    assert partial.model_fields_set == {"timezone"}


def test_partial_rejects_null_except_matrix_id() -> None:
    with pytest.raises(ValidationError):
        PartialUserSettings.model_validate({"timezone": None})
    partial = PartialUserSettings.model_validate({"matrix_id": None})
    assert partial.model_fields_set == {"matrix_id"}


def test_update_message_valid() -> None:
    message = UpdateSettingsMessage.model_validate(update_message())
    assert message.nickname == "alice"
    assert message.version == 2
    assert message.payload.timezone == "CET"


@pytest.mark.parametrize(
    "overrides",
    [
        {"nickname": "a"},
        {"version": 0},
        {"timestamp": 0},
        {"payload": {}},
        {"unexpected": True},
    ],
)
def test_update_message_rejects(overrides: dict[str, Any]) -> None:
    with pytest.raises(ValidationError):
        UpdateSettingsMessage.model_validate(update_message(**overrides))


@pytest.mark.parametrize("missing", ["source", "request_id", "timestamp", "version"])
def test_update_message_requires_envelope_fields(missing: str) -> None:
    data = update_message()
    del data[missing]
    with pytest.raises(ValidationError):
        UpdateSettingsMessage.model_validate(data)


def test_create_message_defaults_version(full_settings: dict[str, Any]) -> None:
    message = CreateSettingsMessage.model_validate(
        {
            "source": "registration",
            "nickname": "alice",
            "request_id": "r-1",
            "timestamp": 1700000000000,
            "payload": full_settings,
        }
    )
    assert message.version == 1
    assert message.payload.email == "alice@example.com"
