"""
First-of (value, timeout) forwarding.

``race_forward`` waits for the next meaningful value of a source and relays
it to a sink, unless a one-shot timer fires first, in which case a fixed
timeout message is relayed instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum

from loguru import logger

from ..core.config import HarnessSettings
from ..core.errors import ChannelClosedError
from ..core.task_manager import TaskManager
from ..datastructures.type_aliases import DurationSeconds, PayloadText
from ..events.channel import EventSink, EventSource, payload_text

DEFAULT_RACE_TIMEOUT: DurationSeconds = 30.0
TIMEOUT_MESSAGE = "Test timed out."
EMPTY_SENTINEL = "[]"


class RaceOutcome(Enum):
    """How a race_forward call ended."""

    FORWARDED = "forwarded"
    TIMED_OUT = "timed_out"
    CLOSED = "closed"


async def race_forward(
    source: EventSource,
    sink: EventSink,
    bound_seconds: DurationSeconds = DEFAULT_RACE_TIMEOUT,
    *,
    keep_racing: Callable[[PayloadText], bool] | None = None,
    timeout_message: str = TIMEOUT_MESSAGE,
    empty_sentinel: str = EMPTY_SENTINEL,
) -> RaceOutcome:
    """Relay the first meaningful value of ``source`` to ``sink``.

    Values equal to ``empty_sentinel`` mean "no event yet" and are skipped.
    A forwarded value cancels the timer for good. After a forward the call
    returns FORWARDED, unless ``keep_racing(value)`` is true, in which case
    later values keep being forwarded until the source closes.

    If the timer fires first, ``timeout_message`` is relayed and the call
    returns TIMED_OUT. A closed source returns CLOSED.
    """
    tasks = TaskManager("race_forward")
    timer = tasks.create_task(asyncio.sleep(bound_seconds), name="race-timer")
    timer_cancelled = False
    read: asyncio.Task | None = None

    try:
        while True:
            if read is None:
                read = tasks.create_task(source.get(), name="race-read")

            waiters = {read} if timer_cancelled else {read, timer}
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

            if read in done:
                try:
                    value = read.result()
                except ChannelClosedError:
                    return RaceOutcome.CLOSED
                read = None

                text = payload_text(value)
                if text == empty_sentinel:
                    continue

                await sink.put(text)
                if not timer_cancelled:
                    timer_cancelled = True
                    timer.cancel()
                logger.debug(f"Forwarded {text!r}")

                if keep_racing is None or not keep_racing(text):
                    return RaceOutcome.FORWARDED
                continue

            logger.warning(f"No value within {bound_seconds}s, relaying timeout")
            await sink.put(timeout_message)
            return RaceOutcome.TIMED_OUT
    finally:
        await tasks.shutdown()


async def race_with_settings(
    source: EventSource,
    sink: EventSink,
    settings: HarnessSettings,
    *,
    keep_racing: Callable[[PayloadText], bool] | None = None,
) -> RaceOutcome:
    """race_forward with bound, timeout message and sentinel from settings."""
    return await race_forward(
        source,
        sink,
        settings.race_timeout,
        keep_racing=keep_racing,
        timeout_message=settings.timeout_message,
        empty_sentinel=settings.empty_sentinel,
    )
