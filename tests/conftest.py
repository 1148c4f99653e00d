"""Pytest configuration and fixtures for pubsub-harness testing.

This module provides async fixtures for event channels, stub interceptors and
replay servers. All fixtures ensure proper cleanup so a failing test never
leaves listening tasks or open sockets behind.
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from loguru import logger

from pubsub_harness.core.config import HarnessSettings
from pubsub_harness.events.channel import EventChannel
from pubsub_harness.replay.interceptor import Interceptor
from pubsub_harness.replay.replay_server import ReplayServer


class AsyncTestContext:
    """Context manager for async test operations with automatic cleanup."""

    def __init__(self) -> None:
        self.channels: list[EventChannel] = []
        self.servers: list[ReplayServer] = []
        self.tasks: list[asyncio.Task[Any]] = []

    def channel(self, name: str) -> EventChannel:
        channel = EventChannel(name)
        self.channels.append(channel)
        return channel

    def spawn(self, coro: Any, name: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self.tasks.append(task)
        return task

    async def __aenter__(self) -> "AsyncTestContext":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Ensure all resources are cleaned up properly."""
        for task in self.tasks:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        for channel in self.channels:
            channel.close()

        for server in self.servers:
            try:
                await server.stop()
            except Exception as e:
                logger.warning(f"Error stopping replay server: {e}")

        self.channels.clear()
        self.servers.clear()
        self.tasks.clear()


@pytest_asyncio.fixture
async def test_context() -> AsyncGenerator[AsyncTestContext, None]:
    """Provides a clean async test context with automatic resource cleanup."""
    async with AsyncTestContext() as ctx:
        yield ctx


@pytest_asyncio.fixture
async def event_channels(
    test_context: AsyncTestContext,
) -> AsyncGenerator[tuple[EventChannel, EventChannel], None]:
    """A (success, error) channel pair standing in for a client's streams.

    Example Usage:
        async def test_connect(event_channels):
            success, errors = event_channels
            success.put_nowait(channel_event("connected", "ch"))
            await expect_connected("ch", "", success, errors)
    """
    yield test_context.channel("success"), test_context.channel("errors")


@pytest.fixture
def harness_settings() -> HarnessSettings:
    return HarnessSettings(aggregation_timeout=1.0, race_timeout=1.0)


@pytest.fixture
def interceptor(harness_settings: HarnessSettings) -> Interceptor:
    return Interceptor(settings=harness_settings)


@pytest_asyncio.fixture
async def replay_server_factory(test_context: AsyncTestContext) -> Any:
    """Factory for started replay servers with automatic cleanup.

    Example Usage:
        async def test_replay(replay_server_factory):
            server = await replay_server_factory(cassette)
            # server.base_url is live until the test ends
    """

    async def _create(cassette: Any, **kwargs: Any) -> ReplayServer:
        server = ReplayServer(cassette=cassette, **kwargs)
        test_context.servers.append(server)
        await server.start()
        return server

    return _create
