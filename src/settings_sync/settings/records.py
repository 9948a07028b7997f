"""SettingsRecord — the versioned per-user settings entry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schemas import PartialUserSettings

# Fields a user (or an upstream producer) may change through an update
# message. Everything else is owned by provisioning.
EDITABLE_USER_SETTINGS: tuple[str, ...] = (
    "language",
    "timezone",
    "avatar",
    "display_name",
)


def default_attributes_factory() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class SettingsRecord:
    """Stored settings for one user.

    ``nickname`` is the immutable key, ``version`` never decreases and
    ``attributes`` holds the (possibly partial) attribute set.
    """

    nickname: str
    version: int = 1
    attributes: dict[str, Any] = field(default_factory=default_attributes_factory)

    def merge(self, payload: PartialUserSettings) -> dict[str, Any]:
        """Return the attributes resulting from applying *payload*.

        Only allow-listed fields explicitly present in the payload overwrite
        the stored value; every other stored attribute is kept as is.
        """
        merged = dict(self.attributes)
        provided = payload.model_fields_set
        for name in EDITABLE_USER_SETTINGS:
            if name in provided:
                merged[name] = getattr(payload, name)
        return merged

    def to_response(self) -> dict[str, Any]:
        """Flat representation: ``{"nickname", "version", **attributes}``."""
        return {**self.attributes, "nickname": self.nickname, "version": self.version}
