"""
Single-source drain adapters.

Each adapter reads a source until its first meaningful value (anything other
than the ``"[]"`` no-event sentinel) and then does one small thing with it.
All of them return quietly when the source closes first.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from loguru import logger

from ..core.errors import ChannelClosedError
from ..datastructures.type_aliases import DurationSeconds, PayloadText
from ..events.channel import EventSink, EventSource, payload_text
from .race import EMPTY_SENTINEL

PASS_MARKER = "passed"
FAIL_MARKER = "failed"
TRANSIENT_MARKER = "aborted"


async def _next_meaningful(
    source: EventSource,
    *,
    empty_sentinel: str = EMPTY_SENTINEL,
    transient: Callable[[PayloadText], bool] | None = None,
) -> PayloadText | None:
    while True:
        try:
            value = await source.get()
        except ChannelClosedError:
            return None
        text = payload_text(value)
        if text == empty_sentinel:
            continue
        if transient is not None and transient(text):
            logger.debug(f"Skipping transient value {text!r}")
            continue
        return text


async def take_first_meaningful(
    source: EventSource,
    *,
    timeout: DurationSeconds | None = None,
    empty_sentinel: str = EMPTY_SENTINEL,
) -> PayloadText | None:
    """Return the first non-sentinel value, or None if the source closed.

    With ``timeout`` set, raises TimeoutError when nothing meaningful arrives
    in time.
    """
    async with asyncio.timeout(timeout):
        return await _next_meaningful(source, empty_sentinel=empty_sentinel)


async def drain(source: EventSource) -> None:
    """Consume and discard the first meaningful value."""
    await _next_meaningful(source)


async def assert_contains(
    source: EventSource, test_name: str, required: str = PASS_MARKER
) -> None:
    """Fail the calling test unless the first meaningful value has ``required``."""
    value = await _next_meaningful(source)
    if value is None:
        return
    if required not in value:
        logger.error(f"Test '{test_name}': failed. Message: {value}")
        raise AssertionError(f"Test '{test_name}': failed.")


async def relay_on_match(source: EventSource, sink: EventSink) -> None:
    """Forward the first meaningful value of an error-style source."""
    value = await _next_meaningful(source)
    if value is not None:
        await sink.put(value)


async def relay_with_pass_fail(
    target: str, source: EventSource, sink: EventSink
) -> None:
    """Forward "passed" if the first meaningful value contains ``target``."""
    value = await _next_meaningful(source)
    if value is None:
        return
    await sink.put(PASS_MARKER if target in value else FAIL_MARKER)


async def skip_transient(
    source: EventSource, sink: EventSink, transient: str = TRANSIENT_MARKER
) -> None:
    """Forward the first settled value; values containing ``transient`` wait."""
    value = await _next_meaningful(source, transient=lambda text: transient in text)
    if value is not None:
        await sink.put(value)
