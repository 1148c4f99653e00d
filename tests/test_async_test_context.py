"""
Unit tests for AsyncTestContext cleanup.

A test that fails halfway must not leave listening tasks, open channels or
replay servers behind for the next test.
"""

import asyncio

import pytest

from pubsub_harness.replay.cassette import Cassette
from pubsub_harness.replay.replay_server import ReplayServer
from tests.conftest import AsyncTestContext


class TestAsyncTestContextCleanup:
    """Test AsyncTestContext resource cleanup."""

    @pytest.mark.asyncio
    async def test_spawned_tasks_are_cancelled(self):
        """Tasks started through the context are cancelled on exit."""
        async with AsyncTestContext() as ctx:
            tasks = [ctx.spawn(asyncio.sleep(10), name=f"sleeper_{i}") for i in range(3)]

        for task in tasks:
            assert task.cancelled()

    @pytest.mark.asyncio
    async def test_finished_tasks_are_left_alone(self):
        async with AsyncTestContext() as ctx:
            task = ctx.spawn(asyncio.sleep(0))
            await task

        assert task.done() and not task.cancelled()

    @pytest.mark.asyncio
    async def test_channels_are_closed(self):
        """Readers blocked on a context channel are released on exit."""
        async with AsyncTestContext() as ctx:
            channel = ctx.channel("events")

        assert channel.closed

    @pytest.mark.asyncio
    async def test_servers_are_stopped(self):
        async with AsyncTestContext() as ctx:
            server = ReplayServer(cassette=Cassette())
            ctx.servers.append(server)
            await server.start()

        assert server.runner is None
        assert server.site is None

    @pytest.mark.asyncio
    async def test_cleanup_runs_after_failure(self):
        """Cleanup still happens when the test body raises."""
        context = AsyncTestContext()
        with pytest.raises(RuntimeError):
            async with context as ctx:
                task = ctx.spawn(asyncio.sleep(10))
                raise RuntimeError("test body failed")

        assert task.cancelled()
        assert context.tasks == []
