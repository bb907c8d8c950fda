"""
Tests for the reader/writer lock guarding the in-memory user store.
"""
import asyncio
import pytest

from account_service.core.locks import ReadWriteLock


class TestReadWriteLock:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        both_inside = asyncio.Event()
        entered = 0

        async def reader():
            nonlocal entered
            async with lock.read():
                entered += 1
                if entered == 2:
                    both_inside.set()
                await asyncio.wait_for(both_inside.wait(), timeout=1)

        await asyncio.gather(reader(), reader())

        assert lock.readers == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        release_writer = asyncio.Event()

        async def writer():
            async with lock.write():
                events.append("write-start")
                await release_writer.wait()
                events.append("write-end")

        async def reader():
            async with lock.read():
                events.append("read")

        writer_task = asyncio.create_task(writer())
        await asyncio.sleep(0)
        reader_task = asyncio.create_task(reader())
        await asyncio.sleep(0.01)

        assert lock.writer_active is True
        assert events == ["write-start"]

        release_writer.set()
        await asyncio.gather(writer_task, reader_task)

        assert events == ["write-start", "write-end", "read"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        events = []
        release_first_reader = asyncio.Event()

        async def first_reader():
            async with lock.read():
                events.append("read-1")
                await release_first_reader.wait()

        async def writer():
            async with lock.write():
                events.append("write")

        async def late_reader():
            async with lock.read():
                events.append("read-2")

        tasks = [asyncio.create_task(first_reader())]
        await asyncio.sleep(0)
        tasks.append(asyncio.create_task(writer()))
        await asyncio.sleep(0)
        tasks.append(asyncio.create_task(late_reader()))
        await asyncio.sleep(0.01)

        assert events == ["read-1"]

        release_first_reader.set()
        await asyncio.gather(*tasks)

        assert events == ["read-1", "write", "read-2"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancelled_writer_does_not_block_readers(self):
        lock = ReadWriteLock()
        release_reader = asyncio.Event()

        async def holder():
            async with lock.read():
                await release_reader.wait()

        async def writer():
            async with lock.write():
                pass

        holder_task = asyncio.create_task(holder())
        await asyncio.sleep(0)
        writer_task = asyncio.create_task(writer())
        await asyncio.sleep(0)

        writer_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await writer_task

        async def reader():
            async with lock.read():
                return "ok"

        assert await asyncio.wait_for(reader(), timeout=1) == "ok"

        release_reader.set()
        await holder_task
