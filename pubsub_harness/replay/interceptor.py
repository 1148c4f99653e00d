"""
Stub registration and an httpx transport that replays the stubs.

Usage:
    interceptor = Interceptor()
    interceptor.add_stub(
        Stub(
            method="GET",
            path="/v2/presence/sub-key/demo/channel/ch/uuid/me/data",
            query="state=%7B%22age%22%3A%2220%22%7D",
            response_body='{"status": 200, "message": "OK"}',
            ignore_query_keys={"uuid", "pnsdk"},
        )
    )
    async with interceptor.get_client() as client:
        response = await client.get("https://ps.pndsn.com/v2/presence/...")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger

from ..core.config import HarnessSettings
from ..core.errors import InteractionNotFoundError
from .cassette import Cassette, IncomingRequest, RecordedInteraction, Stub
from .matcher import InteractionMatcher

JSON_HEADERS = {"content-type": "application/json"}


@dataclass(slots=True)
class Interceptor:
    """Resolves outgoing requests against registered stubs, in order."""

    settings: HarnessSettings = field(default_factory=HarnessSettings)
    matcher: InteractionMatcher | None = None
    _stubs: list[tuple[Stub, RecordedInteraction]] = field(default_factory=list)
    requests: list[IncomingRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.matcher is None:
            self.matcher = InteractionMatcher.from_settings(self.settings)

    def add_stub(self, stub: Stub) -> None:
        self._stubs.append((stub, stub.to_interaction(self.settings.origin)))

    @property
    def stubs(self) -> tuple[Stub, ...]:
        return tuple(stub for stub, _ in self._stubs)

    @property
    def cassette(self) -> Cassette:
        return Cassette(tuple(interaction for _, interaction in self._stubs))

    def lookup(self, request: IncomingRequest) -> RecordedInteraction:
        """First stub matching ``request`` under its own ignore keys."""
        assert self.matcher is not None
        for stub, interaction in self._stubs:
            if self.matcher.matches(interaction, request, stub.ignore_query_keys):
                return interaction
        logger.warning(
            f"Unstubbed request {request.method} {request.url} "
            f"({len(self._stubs)} stubs registered)"
        )
        raise InteractionNotFoundError(request.method, request.url)

    def handle(self, request: httpx.Request) -> httpx.Response:
        incoming = IncomingRequest.from_httpx(request)
        self.requests.append(incoming)
        interaction = self.lookup(incoming)
        return httpx.Response(
            interaction.response_status,
            headers=JSON_HEADERS,
            content=interaction.response_body.encode("utf-8"),
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def get_client(self, **kwargs: Any) -> httpx.AsyncClient:
        """An async client whose requests never leave the process."""
        return httpx.AsyncClient(transport=self.transport(), **kwargs)

    def get_sync_client(self, **kwargs: Any) -> httpx.Client:
        return httpx.Client(transport=self.transport(), **kwargs)
