"""EnvelopeSerializer — JSON bytes to and from the wire."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from .exceptions import MessagingSerializationError


def _json_serializer(obj: Any) -> Any:
    """Serialize datetime and other non-JSON types."""
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class EnvelopeSerializer:
    """Serialize envelopes to JSON bytes and decode bodies back to mappings.

    Decoding stops at a plain mapping: schema validation belongs to the
    consumer of the message, not to the transport.
    """

    def serialize(self, message: BaseModel | Mapping[str, Any]) -> bytes:
        """Encode an envelope (pydantic model or mapping) to JSON bytes."""
        try:
            if isinstance(message, BaseModel):
                data: Any = message.model_dump(mode="json")
            else:
                data = dict(message)
            return json.dumps(data, default=_json_serializer).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise MessagingSerializationError(str(e)) from e

    def deserialize(self, raw: bytes) -> dict[str, Any]:
        """Decode JSON bytes into a mapping."""
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MessagingSerializationError(str(e)) from e
        if not isinstance(data, dict):
            raise MessagingSerializationError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        return data
