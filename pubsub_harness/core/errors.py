"""Exception hierarchy for pubsub-harness."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..sync.aggregator import AggregationResult


class HarnessError(Exception):
    """Base exception for harness errors."""

    pass


class InteractionNotFoundError(HarnessError, LookupError):
    """Raised when no recorded interaction matches an incoming request."""

    def __init__(self, method: str, url: str) -> None:
        self.method = method
        self.url = url
        super().__init__(f"Interaction not found: {method} {url}")


class ChannelClosedError(HarnessError):
    """Raised by an event source that will never yield another value."""

    pass


class ActionMismatchError(HarnessError):
    """Raised when a success event does not carry the expected action tag."""

    def __init__(self, action: str, payload: str) -> None:
        self.action = action
        self.payload = payload
        super().__init__(f"Expected action {action!r} in event: {payload}")


class UnexpectedErrorEvent(HarnessError):
    """Raised when the error source yields a payload during aggregation."""

    def __init__(self, payload: str) -> None:
        self.payload = payload
        super().__init__(payload)


class EventDecodeError(HarnessError, ValueError):
    """Raised when an event payload does not have the expected shape."""

    def __init__(self, payload: str, detail: str) -> None:
        self.payload = payload
        self.detail = detail
        super().__init__(f"Cannot decode event {payload!r}: {detail}")


class AggregationFailedError(AssertionError):
    """Test-facing failure raised by the aggregation entry points.

    Subclasses AssertionError so pytest reports it as a plain test failure.
    """

    def __init__(self, result: AggregationResult) -> None:
        self.result = result
        super().__init__(result.reason)
