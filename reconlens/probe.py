import asyncio, logging
from typing import Optional

from . import config
from .models import ProbeResult
from .risk import service_probe

log = logging.getLogger("reconlens.probe")


async def probe_port(
    ip: str,
    port: int,
    connect_timeout: float = config.CONNECT_TIMEOUT,
    banner_timeout: float = config.BANNER_TIMEOUT,
    payload: Optional[str] = None,
) -> ProbeResult:
    """
    One TCP connect to ip:port, no retries. An accepted connection means open;
    a failed banner read never downgrades that.

    ``payload`` overrides the per-service probe looked up by port; "" sends nothing.
    """
    try:
        reader, writer = await asyncio.wait_for(asyncio.open_connection(ip, port), connect_timeout)
    except (OSError, asyncio.TimeoutError):
        return ProbeResult(open=False)

    banner = ""
    try:
        if payload is None:
            payload = service_probe(port, ip)
        if payload:
            writer.write(payload.encode())
            await writer.drain()
        data = await asyncio.wait_for(reader.read(config.BANNER_READ_BYTES), banner_timeout)
        banner = data.decode("utf-8", "ignore").strip()
    except (OSError, asyncio.TimeoutError) as e:
        log.debug("banner grab on %s:%s failed: %r", ip, port, e)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
    return ProbeResult(open=True, banner=banner)
