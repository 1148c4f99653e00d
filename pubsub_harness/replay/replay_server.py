"""
HTTP replay server for clients that cannot take an injected transport.

Every request, on any path and method, is resolved against the cassette.
The request's ``Host`` header is what gets compared with the recorded host,
so a client pointed at the replay server must keep sending the original
service host (most clients do when configured with a proxy-style origin).
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field

from aiohttp import web
from loguru import logger

from ..core.config import HarnessSettings
from ..core.errors import InteractionNotFoundError
from .cassette import Cassette, IncomingRequest
from .matcher import InteractionMatcher


@dataclass(slots=True)
class ReplayServer:
    """aiohttp application serving recorded responses."""

    cassette: Cassette
    matcher: InteractionMatcher = field(default_factory=InteractionMatcher)
    host: str = "127.0.0.1"
    port: int = 0

    app: web.Application = field(init=False)
    runner: web.AppRunner | None = field(default=None, init=False)
    site: web.TCPSite | None = field(default=None, init=False)
    served: list[IncomingRequest] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self._replay)

    @classmethod
    def from_settings(
        cls, cassette: Cassette, settings: HarnessSettings
    ) -> ReplayServer:
        return cls(cassette=cassette, matcher=InteractionMatcher.from_settings(settings))

    async def _replay(self, request: web.Request) -> web.Response:
        incoming = IncomingRequest.from_aiohttp(request)
        self.served.append(incoming)
        try:
            interaction = self.matcher.match(self.cassette, incoming)
        except InteractionNotFoundError as e:
            return web.json_response(
                {"error": "interaction not found", "method": e.method, "url": e.url},
                status=404,
            )
        return web.Response(
            status=interaction.response_status,
            text=interaction.response_body,
            content_type="application/json",
        )

    async def start(self) -> None:
        """Start serving on ``host:port`` (port 0 picks a free one)."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, host=self.host, port=self.port)
        await self.site.start()

        if self.port == 0 and self.site._server and self.site._server.sockets:
            self.port = self.site._server.sockets[0].getsockname()[1]
        logger.info(f"Replay server listening on http://{self.host}:{self.port}")

    async def stop(self) -> None:
        if self.site:
            await self.site.stop()
            self.site = None
        if self.runner:
            with contextlib.suppress(AttributeError):
                await self.runner.cleanup()
            self.runner = None
        logger.debug("Replay server stopped")

    async def __aenter__(self) -> ReplayServer:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"
