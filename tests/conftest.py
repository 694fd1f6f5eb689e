"""Common test fixtures and helpers."""
import asyncio
from typing import Dict, List, Optional, Tuple

import pytest
from aiohttp import web

from reconlens.models import GeoInfo, ProbeResult


def html(*links: str, extra: str = "") -> str:
    anchors = "".join(f'<a href="{l}">{l}</a>' for l in links)
    return f"<html><body>{anchors}{extra}</body></html>"


def site_app(pages: Dict[str, str], hits: Optional[List[str]] = None,
             raw: Optional[Dict[str, Tuple[str, str]]] = None,
             delays: Optional[Dict[str, float]] = None) -> web.Application:
    """
    Tiny site for crawler tests. ``pages`` maps path -> HTML body, ``raw``
    maps path -> (content type, body). Every request path is appended to ``hits``.
    """
    raw = raw or {}
    delays = delays or {}

    async def handler(request: web.Request) -> web.Response:
        path = request.path
        if hits is not None:
            hits.append(path)
        if path in delays:
            await asyncio.sleep(delays[path])
        if path in raw:
            ctype, body = raw[path]
            return web.Response(text=body, content_type=ctype)
        if path in pages:
            return web.Response(text=pages[path], content_type="text/html")
        return web.Response(status=404, text="not found", content_type="text/plain")

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    return app


class FakeProbe:
    """Stands in for probe_port: ``open_ports`` maps port -> banner."""

    def __init__(self, open_ports: Dict[int, str], delay: float = 0.0):
        self.open_ports = open_ports
        self.delay = delay
        self.calls: List[Tuple[str, int]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, ip: str, port: int) -> ProbeResult:
        self.calls.append((ip, port))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if port in self.open_ports:
            return ProbeResult(open=True, banner=self.open_ports[port])
        return ProbeResult(open=False)


class FakeGeo:
    def __init__(self, info: Optional[GeoInfo] = None):
        self.info = info
        self.calls: List[str] = []

    async def __call__(self, ip: str) -> Optional[GeoInfo]:
        self.calls.append(ip)
        return self.info


@pytest.fixture
def google_geo() -> GeoInfo:
    return GeoInfo(country="United States", city="Mountain View", organization="Google LLC",
                   asn="AS15169 Google LLC", latitude=37.4, longitude=-122.1)
