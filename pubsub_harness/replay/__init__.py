"""Deterministic replay of recorded HTTP interactions."""

from .cassette import (
    Cassette,
    IncomingRequest,
    RecordedInteraction,
    Stub,
    query_from_string,
)
from .interceptor import Interceptor
from .matcher import InteractionMatcher, interaction_matches, resolve
from .replay_server import ReplayServer

__all__ = [
    "Cassette",
    "IncomingRequest",
    "InteractionMatcher",
    "Interceptor",
    "RecordedInteraction",
    "ReplayServer",
    "Stub",
    "interaction_matches",
    "query_from_string",
    "resolve",
]
