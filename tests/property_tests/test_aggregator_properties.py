"""
Property-based tests for the completion aggregator.

For any expected set of channels and groups:
- the status events for exactly that set, in any order, pass
- an error event arriving before the set is complete fails the call
- a strict subset of the events never passes, the call times out naming
  what is missing
"""

import asyncio

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from pubsub_harness.events.channel import EventChannel
from pubsub_harness.sync.aggregator import FailureKind, await_action
from tests.test_helpers import channel_event, group_event

names = st.text(
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")),
    min_size=1,
    max_size=8,
)
name_lists = st.lists(names, max_size=5)

PROPERTY_SETTINGS = settings(max_examples=30, deadline=None)


def _events(channels: list[str], groups: list[str]) -> list[bytes]:
    return [channel_event("connected", name) for name in channels] + [
        group_event("connected", name) for name in groups
    ]


async def _publish(
    steps: list[tuple[EventChannel, bytes | str]], delay: float = 0.001
) -> None:
    """Publish each (channel, payload) step in order with a gap between."""
    for channel, payload in steps:
        await asyncio.sleep(delay)
        await channel.put(payload)


@pytest.mark.asyncio
@given(channels=name_lists, groups=name_lists, rnd=st.randoms(use_true_random=False))
@PROPERTY_SETTINGS
async def test_any_permutation_passes(channels, groups, rnd) -> None:
    assume(channels or groups)
    success, errors = EventChannel("success"), EventChannel("errors")
    events = _events(channels, groups)
    rnd.shuffle(events)
    for payload in events:
        success.put_nowait(payload)

    result = await await_action("connected", channels, groups, success, errors, 1.0)

    assert result.passed, result.reason
    assert sorted(result.observed_channels) == sorted(channels)
    assert sorted(result.observed_groups) == sorted(groups)


@pytest.mark.asyncio
@given(
    channels=name_lists,
    groups=name_lists,
    rnd=st.randoms(use_true_random=False),
    data=st.data(),
)
@PROPERTY_SETTINGS
async def test_error_before_completion_fails(channels, groups, rnd, data) -> None:
    success, errors = EventChannel("success"), EventChannel("errors")
    events = _events(channels, groups)
    rnd.shuffle(events)
    # the error lands before the event that would complete the set
    position = data.draw(st.integers(min_value=0, max_value=max(len(events) - 1, 0)))
    steps: list[tuple[EventChannel, bytes | str]] = [
        (success, payload) for payload in events
    ]
    steps.insert(position, (errors, "403 denied"))

    publisher = asyncio.create_task(_publish(steps))
    try:
        result = await await_action(
            "connected", channels, groups, success, errors, 2.0
        )
    finally:
        publisher.cancel()
        await asyncio.gather(publisher, return_exceptions=True)

    assert result.failure is FailureKind.UNEXPECTED_ERROR
    assert result.reason == "403 denied"


@pytest.mark.asyncio
@given(channels=name_lists, groups=name_lists, rnd=st.randoms(use_true_random=False))
@PROPERTY_SETTINGS
async def test_missing_event_times_out(channels, groups, rnd) -> None:
    assume(channels or groups)
    success, errors = EventChannel("success"), EventChannel("errors")
    events = _events(channels, groups)
    rnd.shuffle(events)
    for payload in events[:-1]:
        success.put_nowait(payload)

    result = await await_action("connected", channels, groups, success, errors, 0.02)

    assert result.failure is FailureKind.TIMEOUT
    assert "Missing channels/groups" in result.reason
