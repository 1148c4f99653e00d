"""
pubsub-harness - deterministic test harness for real-time pub/sub clients

## Architecture

- **replay**: recorded HTTP interactions, ignore-list-aware request matching,
  an httpx interceptor and an aiohttp replay server
- **sync**: timeout races, drain adapters and the multi-entity completion
  aggregator that checks a client reported every expected channel/group
- **events**: closeable event channels and status-event decoding
- **core**: settings, loguru configuration, errors, task tracking

## Quick Start

```python
from pubsub_harness import EventChannel, expect_connected

success, errors = EventChannel("success"), EventChannel("errors")
client.subscribe(["a", "b"], success, errors)

await expect_connected("a,b", "", success, errors)
```
"""

from .core import (
    AggregationFailedError,
    HarnessError,
    HarnessSettings,
    InteractionNotFoundError,
    configure_from_settings,
    configure_logging,
)
from .events import EventChannel, decode_event
from .naming import random_channel, random_channels
from .replay import (
    Cassette,
    IncomingRequest,
    InteractionMatcher,
    Interceptor,
    RecordedInteraction,
    ReplayServer,
    Stub,
    resolve,
)
from .sync import (
    AggregationResult,
    CompletionAggregator,
    await_action,
    expect_connected,
    expect_unsubscribed,
    race_forward,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "AggregationFailedError",
    "AggregationResult",
    "Cassette",
    "CompletionAggregator",
    "EventChannel",
    "HarnessError",
    "HarnessSettings",
    "IncomingRequest",
    "InteractionMatcher",
    "InteractionNotFoundError",
    "Interceptor",
    "RecordedInteraction",
    "ReplayServer",
    "Stub",
    "await_action",
    "configure_from_settings",
    "configure_logging",
    "decode_event",
    "expect_connected",
    "expect_unsubscribed",
    "race_forward",
    "random_channel",
    "random_channels",
    "resolve",
]
