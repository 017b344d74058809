"""Tests for locks module."""

import asyncio

import pytest

from chat_bridge.locks import ReadWriteLock


class TestReadWriteLock:
    @pytest.mark.asyncio
    async def test_readers_share(self) -> None:
        lock = ReadWriteLock()
        inside = 0
        peak = 0

        async def reader() -> None:
            nonlocal inside, peak
            async with lock.read():
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(*(reader() for _ in range(3)))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_writer_excludes_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []

        async def writer() -> None:
            async with lock.write():
                events.append("write-start")
                await asyncio.sleep(0.02)
                events.append("write-end")

        async def reader() -> None:
            await asyncio.sleep(0.005)
            async with lock.read():
                events.append("read")

        await asyncio.gather(writer(), reader())
        assert events == ["write-start", "write-end", "read"]

    @pytest.mark.asyncio
    async def test_waiting_writer_blocks_new_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []
        release = asyncio.Event()

        async def first_reader() -> None:
            async with lock.read():
                await release.wait()
                events.append("reader-1")

        async def writer() -> None:
            await asyncio.sleep(0.005)
            async with lock.write():
                events.append("writer")

        async def late_reader() -> None:
            await asyncio.sleep(0.01)
            async with lock.read():
                events.append("reader-2")

        tasks = [asyncio.create_task(c()) for c in (first_reader, writer, late_reader)]
        await asyncio.sleep(0.02)
        release.set()
        await asyncio.gather(*tasks)
        assert events == ["reader-1", "writer", "reader-2"]

    @pytest.mark.asyncio
    async def test_cancelled_writer_unblocks_readers(self) -> None:
        lock = ReadWriteLock()
        release = asyncio.Event()
        got_read = asyncio.Event()

        async def holder() -> None:
            async with lock.read():
                await release.wait()

        async def writer() -> None:
            async with lock.write():
                pass

        async def reader() -> None:
            async with lock.read():
                got_read.set()

        hold = asyncio.create_task(holder())
        await asyncio.sleep(0)
        w = asyncio.create_task(writer())
        await asyncio.sleep(0.005)
        r = asyncio.create_task(reader())
        await asyncio.sleep(0.005)
        assert not got_read.is_set()

        w.cancel()
        await asyncio.wait_for(got_read.wait(), timeout=1)
        release.set()
        await asyncio.gather(hold, r)
        assert not lock.locked

    @pytest.mark.asyncio
    async def test_released_after_error(self) -> None:
        lock = ReadWriteLock()
        with pytest.raises(RuntimeError):
            async with lock.write():
                raise RuntimeError("boom")
        assert not lock.locked

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["read", "write"])
    async def test_release_survives_repeated_cancel(self, mode: str) -> None:
        lock = ReadWriteLock()
        entered = asyncio.Event()

        async def holder() -> None:
            async with getattr(lock, mode)():
                entered.set()
                await asyncio.Event().wait()

        async def writer() -> None:
            async with lock.write():
                pass

        task = asyncio.create_task(holder())
        await entered.wait()

        # keep the condition busy so the release path has to queue for it
        async with lock._cond:
            task.cancel()
            await asyncio.sleep(0)
            task.cancel()
            await asyncio.sleep(0)
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not lock.locked
        await asyncio.wait_for(writer(), timeout=1)
