"""
loguru setup for harness runs.

Harness modules log per-event decisions at DEBUG, passes at INFO and
failures at WARNING. A run usually wants INFO on stderr and DEBUG only for
the part under investigation, e.g. ``log_debug_scopes=("sync.aggregator",)``
to watch which entities an aggregation call has seen.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable

from loguru import logger

from .config import HarnessSettings

LOG_FORMAT = (
    "{time:HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
)

PACKAGE_NAME = "pubsub_harness"


def _qualified_scopes(scopes: Iterable[str]) -> tuple[str, ...]:
    """``"sync"`` and ``"pubsub_harness.sync"`` name the same scope."""
    qualified = []
    for scope in scopes:
        scope = scope.strip()
        if not scope:
            continue
        if scope != PACKAGE_NAME and not scope.startswith(f"{PACKAGE_NAME}."):
            scope = f"{PACKAGE_NAME}.{scope}"
        qualified.append(scope)
    return tuple(qualified)


def _debug_scope_filter(scopes: tuple[str, ...]) -> Callable[[dict], bool]:
    def _filter(record: dict) -> bool:
        return record["level"].name == "DEBUG" and record["name"].startswith(scopes)

    return _filter


def configure_logging(
    level: str, *, debug_scopes: Iterable[str] = ()
) -> tuple[int, ...]:
    """Replace loguru's sinks with a stderr sink at ``level``.

    When ``level`` is above DEBUG, DEBUG records of modules under
    ``debug_scopes`` still reach stderr through a second, filtered sink.
    Returns the loguru handler ids.
    """
    logger.remove()
    handler_ids = [logger.add(sys.stderr, level=level, format=LOG_FORMAT)]

    scopes = _qualified_scopes(debug_scopes)
    if scopes and level.upper() != "DEBUG":
        handler_ids.append(
            logger.add(
                sys.stderr,
                level="DEBUG",
                format=LOG_FORMAT,
                filter=_debug_scope_filter(scopes),
            )
        )
    return tuple(handler_ids)


def configure_from_settings(settings: HarnessSettings) -> tuple[int, ...]:
    """Apply ``log_level`` and ``log_debug_scopes`` from HarnessSettings."""
    return configure_logging(
        settings.log_level, debug_scopes=settings.log_debug_scopes
    )
