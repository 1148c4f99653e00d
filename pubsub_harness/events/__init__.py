"""Event sources, sinks and status-event decoding."""

from .channel import EventChannel, EventSink, EventSource, payload_text
from .decode import EntityKind, SubscriptionEvent, classify_text, decode_event

__all__ = [
    "EntityKind",
    "EventChannel",
    "EventSink",
    "EventSource",
    "SubscriptionEvent",
    "classify_text",
    "decode_event",
    "payload_text",
]
