"""
Request -> recorded interaction resolution.

A candidate matches a request when method, host and path are equal and every
query key the candidate was *recorded* with (minus the ignored ones) is on the
request with the same value. Keys only the request carries are never checked,
so tests can stub responses for requests whose client-generated parameters
(uuids, sdk versions, nonces) vary per run.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from ..core.config import HarnessSettings
from ..core.errors import InteractionNotFoundError
from ..datastructures.type_aliases import QueryKey
from .cassette import IncomingRequest, RecordedInteraction


def interaction_matches(
    candidate: RecordedInteraction,
    request: IncomingRequest,
    ignore_keys: frozenset[QueryKey] | set[QueryKey] = frozenset(),
) -> bool:
    """Single-candidate match predicate."""
    if candidate.method != request.method:
        return False
    if candidate.host != request.host:
        return False
    if candidate.path != request.path:
        return False

    for key, expected in candidate.query.items():
        if key in ignore_keys:
            continue
        if key not in request.query or request.query[key] != expected:
            return False
    return True


def resolve(
    cassette: Iterable[RecordedInteraction],
    request: IncomingRequest,
    ignore_keys: frozenset[QueryKey] | set[QueryKey] = frozenset(),
) -> RecordedInteraction:
    """Return the first interaction in ``cassette`` matching ``request``.

    Raises InteractionNotFoundError when no candidate survives.
    """
    for candidate in cassette:
        if interaction_matches(candidate, request, ignore_keys):
            return candidate
    raise InteractionNotFoundError(request.method, request.url)


@dataclass(frozen=True, slots=True)
class InteractionMatcher:
    """Resolver carrying its default ignore list as explicit configuration."""

    ignore_query_keys: frozenset[QueryKey] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "ignore_query_keys", frozenset(self.ignore_query_keys)
        )

    @classmethod
    def from_settings(cls, settings: HarnessSettings) -> InteractionMatcher:
        return cls(ignore_query_keys=settings.default_ignore_query_keys)

    def effective_ignore_keys(
        self, extra_ignore: Iterable[QueryKey] = ()
    ) -> frozenset[QueryKey]:
        return self.ignore_query_keys | frozenset(extra_ignore)

    def matches(
        self,
        candidate: RecordedInteraction,
        request: IncomingRequest,
        extra_ignore: Iterable[QueryKey] = (),
    ) -> bool:
        return interaction_matches(
            candidate, request, self.effective_ignore_keys(extra_ignore)
        )

    def match(
        self,
        cassette: Iterable[RecordedInteraction],
        request: IncomingRequest,
        extra_ignore: Iterable[QueryKey] = (),
    ) -> RecordedInteraction:
        ignore_keys = self.effective_ignore_keys(extra_ignore)
        try:
            interaction = resolve(cassette, request, ignore_keys)
        except InteractionNotFoundError:
            logger.warning(
                f"No recorded interaction for {request.method} {request.url} "
                f"(ignoring {sorted(ignore_keys)})"
            )
            raise
        logger.debug(
            f"Matched {request.method} {request.host}{request.path} -> "
            f"{interaction.response_status}"
        )
        return interaction
