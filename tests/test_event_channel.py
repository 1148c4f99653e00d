import asyncio

import pytest

from pubsub_harness.core.errors import ChannelClosedError
from pubsub_harness.events.channel import EventChannel, payload_text


class TestEventChannel:
    @pytest.mark.asyncio
    async def test_fifo_order(self) -> None:
        channel = EventChannel("fifo")
        for value in ("a", "b", "c"):
            await channel.put(value)

        assert channel.qsize() == 3
        assert [await channel.get() for _ in range(3)] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_buffered_values_survive_close(self) -> None:
        channel = EventChannel()
        channel.put_nowait(b"kept")
        channel.close()

        assert channel.closed
        assert channel.qsize() == 1
        assert await channel.get() == b"kept"
        with pytest.raises(ChannelClosedError):
            await channel.get()
        # every later read keeps failing
        with pytest.raises(ChannelClosedError):
            await channel.get()

    @pytest.mark.asyncio
    async def test_close_wakes_pending_reader(self) -> None:
        channel = EventChannel()
        reader = asyncio.create_task(channel.get())
        await asyncio.sleep(0)

        channel.close()

        with pytest.raises(ChannelClosedError):
            await reader

    @pytest.mark.asyncio
    async def test_put_after_close_fails(self) -> None:
        channel = EventChannel("done")
        channel.close()
        channel.close()

        with pytest.raises(ChannelClosedError, match="'done' is closed"):
            await channel.put("late")

    def test_get_nowait_on_closed_channel(self) -> None:
        channel = EventChannel()
        channel.close()

        with pytest.raises(ChannelClosedError):
            channel.get_nowait()

    def test_get_nowait_on_empty_channel(self) -> None:
        with pytest.raises(asyncio.QueueEmpty):
            EventChannel().get_nowait()


def test_payload_text() -> None:
    assert payload_text(b"abc") == "abc"
    assert payload_text(bytearray(b"xy")) == "xy"
    assert payload_text("text") == "text"
    assert payload_text(b"\xff") == "�"
