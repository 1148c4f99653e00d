"""
Closeable async event channels.

The harness consumes client events through two narrow protocols:

- ``EventSource``: ``await source.get()`` yields the next payload and raises
  ``ChannelClosedError`` once the producer has closed it and every buffered
  payload was read. A plain ``asyncio.Queue`` satisfies the protocol (it
  simply never closes).
- ``EventSink``: ``await sink.put(value)``.

``EventChannel`` implements both for tests and client adapters.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from ..core.errors import ChannelClosedError
from ..datastructures.type_aliases import PayloadText, RawPayload


class EventSource(Protocol):
    """Single-consumer source of raw event payloads."""

    async def get(self) -> RawPayload: ...


class EventSink(Protocol):
    """Destination for relayed payload text."""

    async def put(self, value: PayloadText) -> None: ...


_CLOSED = object()


@dataclass(slots=True)
class EventChannel:
    """Unbounded single-producer/single-consumer channel with a closed state."""

    name: str = "events"
    _queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    _closed: bool = False

    async def put(self, value: RawPayload) -> None:
        self.put_nowait(value)

    def put_nowait(self, value: RawPayload) -> None:
        if self._closed:
            raise ChannelClosedError(f"Channel {self.name!r} is closed")
        self._queue.put_nowait(value)

    async def get(self) -> RawPayload:
        if self._closed and self._queue.empty():
            raise ChannelClosedError(f"Channel {self.name!r} is closed")
        value = await self._queue.get()
        if value is _CLOSED:
            # keep the marker for any later reader
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosedError(f"Channel {self.name!r} is closed")
        return value

    def get_nowait(self) -> RawPayload:
        value = self._queue.get_nowait()
        if value is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosedError(f"Channel {self.name!r} is closed")
        return value

    def close(self) -> None:
        """Close the channel; buffered payloads stay readable."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        size = self._queue.qsize()
        return size - 1 if self._closed else size


def payload_text(value: RawPayload) -> PayloadText:
    """Decode a raw payload to text."""
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)
