"""Timeout races, drain adapters and completion aggregation."""

from .aggregator import (
    CONNECTED_ACTION,
    UNSUBSCRIBED_ACTION,
    AggregationResult,
    CompletionAggregator,
    FailureKind,
    await_action,
    expect_connected,
    expect_unsubscribed,
)
from .drain import (
    assert_contains,
    drain,
    relay_on_match,
    relay_with_pass_fail,
    skip_transient,
    take_first_meaningful,
)
from .race import RaceOutcome, race_forward, race_with_settings

__all__ = [
    "CONNECTED_ACTION",
    "UNSUBSCRIBED_ACTION",
    "AggregationResult",
    "CompletionAggregator",
    "FailureKind",
    "RaceOutcome",
    "assert_contains",
    "await_action",
    "drain",
    "expect_connected",
    "expect_unsubscribed",
    "race_forward",
    "race_with_settings",
    "relay_on_match",
    "relay_with_pass_fail",
    "skip_transient",
    "take_first_meaningful",
]
