# tests/test_network.py
import asyncio

import pytest

from aprs_core.exceptions import NetworkError
from aprs_core.network import LineConnection, ReadStatus


async def _start_server(handler):
    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    return server, port


@pytest.mark.asyncio
async def test_read_lines_then_eof():
    async def handler(reader, writer):
        writer.write(b"# aprsc 2.1.10\r\nN0CALL>APRS:hi\n")
        await writer.drain()
        writer.close()

    server, port = await _start_server(handler)
    conn = await LineConnection.open("127.0.0.1", port, timeout=2.0)
    try:
        first = await conn.read_line()
        second = await conn.read_line()
        third = await conn.read_line()
    finally:
        await conn.close()
        server.close()
        await server.wait_closed()

    assert (first.status, first.line) == (ReadStatus.DATA, "# aprsc 2.1.10")
    assert (second.status, second.line) == (ReadStatus.DATA, "N0CALL>APRS:hi")
    assert third.status is ReadStatus.EOF


@pytest.mark.asyncio
async def test_read_is_cancelled_by_event():
    release = asyncio.Event()

    async def handler(reader, writer):
        await release.wait()
        writer.close()

    server, port = await _start_server(handler)
    conn = await LineConnection.open("127.0.0.1", port, timeout=2.0)
    cancel = asyncio.Event()

    try:
        read = asyncio.create_task(conn.read_line(cancel))
        await asyncio.sleep(0.05)
        assert not read.done()

        cancel.set()
        result = await asyncio.wait_for(read, timeout=2.0)
        assert result.status is ReadStatus.CANCELED

        # 已置位的取消信号直接返回，不再读取
        assert (await conn.read_line(cancel)).status is ReadStatus.CANCELED
    finally:
        release.set()
        await conn.close()
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_write_line_appends_crlf():
    received = asyncio.get_running_loop().create_future()

    async def handler(reader, writer):
        received.set_result(await reader.readline())
        writer.close()

    server, port = await _start_server(handler)
    conn = await LineConnection.open("127.0.0.1", port, timeout=2.0)
    try:
        await conn.write_line("user N0CALL pass -1")
        assert await asyncio.wait_for(received, timeout=2.0) == b"user N0CALL pass -1\r\n"
    finally:
        await conn.close()
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_close_is_idempotent_and_blocks_writes():
    async def handler(reader, writer):
        await reader.read()
        writer.close()

    server, port = await _start_server(handler)
    conn = await LineConnection.open("127.0.0.1", port, timeout=2.0)

    await conn.close()
    await conn.close()

    assert conn.is_closed
    assert (await conn.read_line()).status is ReadStatus.EOF
    with pytest.raises(NetworkError, match="已关闭"):
        await conn.write_line("late")

    server.close()
    await server.wait_closed()


@pytest.mark.asyncio
async def test_open_refused():
    server, port = await _start_server(lambda r, w: None)
    server.close()
    await server.wait_closed()

    with pytest.raises(NetworkError):
        await LineConnection.open("127.0.0.1", port, timeout=2.0)
