"""Ambient configuration, logging, errors and task tracking."""

from .config import HarnessSettings
from .errors import (
    ActionMismatchError,
    AggregationFailedError,
    ChannelClosedError,
    EventDecodeError,
    HarnessError,
    InteractionNotFoundError,
    UnexpectedErrorEvent,
)
from .logging import configure_from_settings, configure_logging
from .task_manager import TaskManager

__all__ = [
    "ActionMismatchError",
    "AggregationFailedError",
    "ChannelClosedError",
    "EventDecodeError",
    "HarnessError",
    "HarnessSettings",
    "InteractionNotFoundError",
    "TaskManager",
    "UnexpectedErrorEvent",
    "configure_from_settings",
    "configure_logging",
]
