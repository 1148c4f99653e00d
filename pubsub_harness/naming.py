"""Channel-name fixtures and error-stream diagnostics for client tests."""

from __future__ import annotations

import random

from loguru import logger

from .events.channel import EventSource, payload_text

CHANNEL_NAME_PREFIX = "testChannel_sub_"
CHANNEL_NAME_SPACE = 99999


def generate_two_random_channel_strings(
    length: int, *, rng: random.Random | None = None
) -> tuple[str, str]:
    """Two comma-separated lists of ``length`` channel names each.

    All ``2 * length`` names are distinct, so the lists never overlap.
    """
    if length < 0:
        raise ValueError("length must be non-negative")
    if 2 * length > CHANNEL_NAME_SPACE:
        raise ValueError(f"cannot draw {2 * length} distinct channel names")

    rng = rng or random.Random()
    names: list[str] = []
    seen: set[str] = set()
    while len(names) < length * 2:
        name = f"{CHANNEL_NAME_PREFIX}{rng.randrange(CHANNEL_NAME_SPACE)}"
        if name not in seen:
            seen.add(name)
            names.append(name)

    return ",".join(names[:length]), ",".join(names[length:])


def random_channel(*, rng: random.Random | None = None) -> str:
    channel, _ = generate_two_random_channel_strings(1, rng=rng)
    return channel


def random_channels(length: int, *, rng: random.Random | None = None) -> str:
    channels, _ = generate_two_random_channel_strings(length, rng=rng)
    return channels


async def log_errors(source: EventSource) -> str:
    """Wait for one error payload and log it."""
    text = payload_text(await source.get())
    logger.error(f"ERROR: {text}")
    return text
