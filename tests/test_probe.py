import asyncio
import socket

import pytest

from reconlens.probe import probe_port
from reconlens.risk import service_probe


def free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def serve(on_connect):
    server = await asyncio.start_server(on_connect, "127.0.0.1", 0)
    return server, server.sockets[0].getsockname()[1]


@pytest.mark.asyncio
async def test_open_port_with_banner():
    async def greet(reader, writer):
        writer.write(b"  SSH-2.0-OpenSSH_9.6\r\n")
        await writer.drain()
        writer.close()

    server, port = await serve(greet)
    async with server:
        result = await probe_port("127.0.0.1", port, banner_timeout=1)
    assert result.open is True
    assert result.banner == "SSH-2.0-OpenSSH_9.6"


@pytest.mark.asyncio
async def test_silent_service_is_still_open():
    async def silent(reader, writer):
        await asyncio.sleep(1)
        writer.close()

    server, port = await serve(silent)
    async with server:
        result = await probe_port("127.0.0.1", port, banner_timeout=0.2)
    assert result.open is True
    assert result.banner == ""


@pytest.mark.asyncio
async def test_banner_is_limited_to_one_read():
    async def chatty(reader, writer):
        writer.write(b"A" * 4096)
        await writer.drain()
        writer.close()

    server, port = await serve(chatty)
    async with server:
        result = await probe_port("127.0.0.1", port, banner_timeout=1)
    assert result.open is True
    assert 0 < len(result.banner) <= 1024


@pytest.mark.asyncio
async def test_refused_port_is_closed():
    result = await probe_port("127.0.0.1", free_port(), connect_timeout=1)
    assert result.open is False
    assert result.banner == ""


@pytest.mark.asyncio
async def test_http_payload_reaches_service():
    received = []

    async def web(reader, writer):
        received.append(await reader.readline())
        writer.write(b"HTTP/1.1 200 OK\r\nServer: nginx\r\n\r\n")
        await writer.drain()
        writer.close()

    server, port = await serve(web)
    async with server:
        result = await probe_port("127.0.0.1", port, banner_timeout=1,
                                  payload=service_probe(80, "127.0.0.1"))
    assert received == [b"GET / HTTP/1.1\r\n"]
    assert result.open is True
    assert result.banner.startswith("HTTP/1.1 200 OK")
