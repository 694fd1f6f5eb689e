import asyncio, logging
from typing import Optional

import aiohttp
from pydantic import ValidationError

from . import config
from .models import GeoInfo

log = logging.getLogger("reconlens.geo")


class GeoLocator:
    """
    Best-effort IP geolocation against an ip-api.com compatible endpoint.
    Any failure, including a non-"success" status in the body, yields None.
    """

    def __init__(self, endpoint: str = config.GEO_ENDPOINT, timeout: float = config.GEO_TIMEOUT):
        self.endpoint = endpoint
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def lookup(self, ip: str) -> Optional[GeoInfo]:
        url = self.endpoint.format(ip=ip)
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as r:
                    if r.status != 200:
                        log.debug("geo lookup for %s returned HTTP %s", ip, r.status)
                        return None
                    data = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.debug("geo lookup for %s failed: %r", ip, e)
            return None

        if not isinstance(data, dict) or data.get("status") != "success":
            return None
        try:
            return GeoInfo(
                country=data.get("country") or "",
                city=data.get("city") or "",
                organization=data.get("org") or data.get("isp") or "",
                asn=data.get("as") or "",
                latitude=data.get("lat"),
                longitude=data.get("lon"),
            )
        except ValidationError as e:
            log.debug("geo reply for %s is malformed: %s", ip, e)
            return None
