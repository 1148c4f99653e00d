"""
Multi-entity completion aggregation.

A client reports one status event per channel and per channel group when it
connects or unsubscribes, in no particular order. ``await_action`` listens to
the client's success and error streams and decides whether the full expected
set of entities was reported before a global timeout:

- every success event must carry the action tag (e.g. "connected"); its
  entity name is recorded as a channel or a group,
- after each event the recorded names are compared with the expected ones
  (order-independent, duplicates counted); equality is a pass,
- anything on the error stream is an immediate failure,
- the timeout fails with what was expected, seen and still missing.

Note the comparison runs only after an event, so even a call expecting no
entities at all needs one success event before it can pass.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from ..core.config import HarnessSettings
from ..core.errors import (
    ActionMismatchError,
    AggregationFailedError,
    ChannelClosedError,
    EventDecodeError,
    UnexpectedErrorEvent,
)
from ..core.task_manager import TaskManager
from ..datastructures.entity_sets import ExpectedSet, ObservedSet
from ..datastructures.type_aliases import ActionTag, DurationSeconds, RawPayload
from ..events.channel import EventSource, payload_text
from ..events.decode import EntityKind, decode_event

DEFAULT_AGGREGATION_TIMEOUT: DurationSeconds = 20.0

CONNECTED_ACTION: ActionTag = "connected"
UNSUBSCRIBED_ACTION: ActionTag = "unsubscribed"


class FailureKind(Enum):
    """Why an aggregation call failed."""

    ACTION_MISMATCH = "action_mismatch"
    UNEXPECTED_ERROR = "unexpected_error"
    TIMEOUT = "timeout"
    DECODE_ERROR = "decode_error"


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Outcome of one aggregation call."""

    passed: bool
    expected: ExpectedSet
    observed_channels: tuple[str, ...] = ()
    observed_groups: tuple[str, ...] = ()
    failure: FailureKind | None = None
    reason: str = ""
    elapsed: DurationSeconds = 0.0

    def __bool__(self) -> bool:
        return self.passed


@dataclass(slots=True)
class CompletionAggregator:
    """Single-use listener deciding pass/fail for one ExpectedSet."""

    expected: ExpectedSet
    success_source: EventSource
    error_source: EventSource
    bound_seconds: DurationSeconds = DEFAULT_AGGREGATION_TIMEOUT
    observed: ObservedSet = field(default_factory=ObservedSet)
    events_processed: int = 0

    def _record(self, payload: RawPayload) -> bool:
        """Record one success event; True once the expected set is complete."""
        text = payload_text(payload)
        if self.expected.action not in text:
            raise ActionMismatchError(self.expected.action, text)

        event = decode_event(text)
        if event.kind is EntityKind.GROUP:
            self.observed.add_group(event.entity_name)
        elif event.kind is EntityKind.CHANNEL:
            self.observed.add_channel(event.entity_name)
        else:
            logger.debug(f"Event names neither a channel nor a group: {text}")
        self.events_processed += 1

        return self.observed.satisfies(self.expected)

    async def _listen(self) -> None:
        tasks = TaskManager(f"aggregate:{self.expected.action}")
        success_read: asyncio.Task | None = None
        error_read: asyncio.Task | None = None
        success_open = error_open = True
        try:
            while success_open or error_open:
                if success_open and success_read is None:
                    success_read = tasks.create_task(
                        self.success_source.get(), name="aggregate-success"
                    )
                if error_open and error_read is None:
                    error_read = tasks.create_task(
                        self.error_source.get(), name="aggregate-error"
                    )

                waiters = {task for task in (success_read, error_read) if task}
                done, _ = await asyncio.wait(
                    waiters, return_when=asyncio.FIRST_COMPLETED
                )

                # an error read in the same round wins over a completing event
                if error_read in done:
                    read, error_read = error_read, None
                    try:
                        payload = read.result()
                    except ChannelClosedError:
                        error_open = False
                    else:
                        raise UnexpectedErrorEvent(payload_text(payload))

                if success_read in done:
                    read, success_read = success_read, None
                    try:
                        payload = read.result()
                    except ChannelClosedError:
                        success_open = False
                    else:
                        if self._record(payload):
                            return

            # both sources closed: nothing can arrive, leave it to the timer
            logger.debug("Both event sources closed before completion")
            await asyncio.Event().wait()
        finally:
            await tasks.shutdown()

    def _result(
        self,
        started: float,
        failure: FailureKind | None = None,
        reason: str = "",
    ) -> AggregationResult:
        channels, groups = self.observed.snapshot()
        return AggregationResult(
            passed=failure is None,
            expected=self.expected,
            observed_channels=tuple(channels),
            observed_groups=tuple(groups),
            failure=failure,
            reason=reason,
            elapsed=time.perf_counter() - started,
        )

    def _timeout_reason(self) -> str:
        expected = self.expected
        observed = self.observed
        missing_channels, missing_groups = observed.missing(expected)
        return (
            f"Timeout occurred for {expected.action} event. "
            f"Expected channels/groups: "
            f"{list(expected.channels)}/{list(expected.groups)}. "
            f"Received channels/groups: {observed.channels}/{observed.groups}. "
            f"Missing channels/groups: {missing_channels}/{missing_groups}"
        )

    async def run(self) -> AggregationResult:
        """Listen until pass, failure or timeout."""
        started = time.perf_counter()
        action = self.expected.action
        try:
            async with asyncio.timeout(self.bound_seconds):
                await self._listen()
        except TimeoutError:
            reason = self._timeout_reason()
            logger.warning(reason)
            return self._result(started, FailureKind.TIMEOUT, reason)
        except ActionMismatchError as e:
            logger.warning(str(e))
            return self._result(started, FailureKind.ACTION_MISMATCH, str(e))
        except EventDecodeError as e:
            logger.warning(str(e))
            return self._result(started, FailureKind.DECODE_ERROR, str(e))
        except UnexpectedErrorEvent as e:
            logger.warning(f"Error event while waiting for {action}: {e.payload}")
            return self._result(started, FailureKind.UNEXPECTED_ERROR, e.payload)

        result = self._result(started)
        logger.info(
            f"All {action} events received after {self.events_processed} "
            f"event(s) in {result.elapsed:.3f}s"
        )
        return result


async def await_action(
    action: ActionTag,
    expected_channels: list[str] | tuple[str, ...],
    expected_groups: list[str] | tuple[str, ...],
    success_source: EventSource,
    error_source: EventSource,
    bound_seconds: DurationSeconds = DEFAULT_AGGREGATION_TIMEOUT,
) -> AggregationResult:
    """Wait for ``action`` events covering exactly the expected entities."""
    aggregator = CompletionAggregator(
        expected=ExpectedSet.of(action, expected_channels, expected_groups),
        success_source=success_source,
        error_source=error_source,
        bound_seconds=bound_seconds,
    )
    return await aggregator.run()


async def _expect_action(
    action: ActionTag,
    channels: str,
    groups: str,
    success_source: EventSource,
    error_source: EventSource,
    bound_seconds: DurationSeconds | None,
    settings: HarnessSettings | None,
) -> None:
    if bound_seconds is None:
        bound_seconds = (
            settings.aggregation_timeout if settings else DEFAULT_AGGREGATION_TIMEOUT
        )
    expected = ExpectedSet.from_csv(action, channels, groups)
    result = await await_action(
        action,
        expected.channels,
        expected.groups,
        success_source,
        error_source,
        bound_seconds,
    )
    if not result.passed:
        raise AggregationFailedError(result)


async def expect_connected(
    channels: str,
    groups: str,
    success_source: EventSource,
    error_source: EventSource,
    *,
    bound_seconds: DurationSeconds | None = None,
    settings: HarnessSettings | None = None,
) -> None:
    """Assert every channel/group in the comma-separated lists connects.

    The bound is ``bound_seconds`` when given, else the settings'
    ``aggregation_timeout``, else 20 seconds.
    """
    await _expect_action(
        CONNECTED_ACTION,
        channels,
        groups,
        success_source,
        error_source,
        bound_seconds,
        settings,
    )


async def expect_unsubscribed(
    channels: str,
    groups: str,
    success_source: EventSource,
    error_source: EventSource,
    *,
    bound_seconds: DurationSeconds | None = None,
    settings: HarnessSettings | None = None,
) -> None:
    """Assert every channel/group in the comma-separated lists unsubscribes."""
    await _expect_action(
        UNSUBSCRIBED_ACTION,
        channels,
        groups,
        success_source,
        error_source,
        bound_seconds,
        settings,
    )
