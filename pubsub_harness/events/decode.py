"""
Decoding of subscription status events.

Clients report subscription lifecycle changes on their success stream in one
of two shapes:

- the legacy positional array ``[timestamp, message, entity_name, ...]``,
  e.g. ``[1, "Subscription to channel 'ch' connected", "ch"]``; the entity
  kind is derived once from the message text ("channel group" before
  "channel").
- a tagged object ``{"kind": "channel" | "group", "name": ..., ...}``.

Both decode to the same ``SubscriptionEvent``.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import EventDecodeError
from ..datastructures.type_aliases import PayloadText, RawPayload
from .channel import payload_text

GROUP_MARKER = "channel group"
CHANNEL_MARKER = "channel"

LEGACY_MIN_LENGTH = 3


class EntityKind(Enum):
    """Which subscription unit an event refers to."""

    CHANNEL = "channel"
    GROUP = "group"


class SubscriptionEvent(BaseModel):
    """A decoded subscription status event."""

    model_config = ConfigDict(frozen=True)

    timestamp: Any = Field(
        None, description="Leading status/timetoken element, kept as sent."
    )
    message: str = Field("", description="Human readable status text.")
    entity_name: str = Field(description="Channel or group name the event is for.")
    kind: EntityKind | None = Field(
        None, description="Entity kind; None when the event names neither."
    )
    raw: PayloadText = Field(description="Undecoded payload text.")


def classify_text(text: str) -> EntityKind | None:
    """Derive the entity kind from free-form event text."""
    if GROUP_MARKER in text:
        return EntityKind.GROUP
    if CHANNEL_MARKER in text:
        return EntityKind.CHANNEL
    return None


def _legacy_fields(document: list[Any], text: str) -> dict[str, Any]:
    if len(document) < LEGACY_MIN_LENGTH:
        raise EventDecodeError(
            text, f"expected at least {LEGACY_MIN_LENGTH} elements, got {len(document)}"
        )
    timestamp, message, entity_name = document[:LEGACY_MIN_LENGTH]
    return {
        "timestamp": timestamp,
        "message": message if isinstance(message, str) else json.dumps(message),
        "entity_name": entity_name,
        "kind": classify_text(text),
        "raw": text,
    }


def _tagged_fields(document: dict[str, Any], text: str) -> dict[str, Any]:
    name = document.get("name", document.get("entity_name"))
    if name is None:
        raise EventDecodeError(text, "missing 'name'")
    return {
        "timestamp": document.get("timestamp"),
        "message": document.get("message", ""),
        "entity_name": name,
        "kind": document.get("kind"),
        "raw": text,
    }


def decode_event(payload: RawPayload) -> SubscriptionEvent:
    """Decode one success-stream payload.

    Raises EventDecodeError when the payload is not JSON, or not one of the
    two supported shapes.
    """
    text = payload_text(payload)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise EventDecodeError(text, str(e)) from e

    if isinstance(document, list):
        values = _legacy_fields(document, text)
    elif isinstance(document, dict):
        values = _tagged_fields(document, text)
    else:
        raise EventDecodeError(text, f"unsupported JSON type {type(document).__name__}")

    try:
        return SubscriptionEvent.model_validate(values)
    except ValidationError as e:
        raise EventDecodeError(text, str(e)) from e
