import re
from typing import List, NamedTuple, Optional
from urllib.parse import SplitResult, urljoin, urlsplit

# Attribute values; in-page anchors ("#top") are skipped by the extractor
LINK_ATTR = re.compile(r"""(?:href|src|action)\s*=\s*["']([^"']*)["']""", re.I)

DEFAULT_PORTS = {"http": 80, "https": 443}


def _origin(parts: SplitResult) -> Optional[str]:
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if not scheme or not host:
        return None
    port = parts.port  # raises ValueError on junk ports
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def origin_of(url: str) -> str:
    """scheme://host[:port] with the default port dropped, as browsers report it."""
    origin = _origin(urlsplit(url))
    if origin is None:
        raise ValueError(f"not an absolute URL: {url!r}")
    return origin


def normalize_url(url: str) -> str:
    """Origin plus path; query and fragment stripped. Used as the dedup key."""
    parts = urlsplit(url)
    origin = _origin(parts)
    if origin is None:
        raise ValueError(f"not an absolute URL: {url!r}")
    return origin + (parts.path or "/")


def base_domain(host: str) -> str:
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


class ExtractedLinks(NamedTuple):
    internal: List[str]
    external: List[str]
    subdomains: List[str]


class LinkExtractor:
    """
    Pulls href/src/action values out of a page and sorts the resolved URLs
    into internal (same origin as the crawl base), external (other http(s)
    origins) and subdomains (external origins under the base domain).
    Output lists keep discovery order and may contain repeats.
    """

    def __init__(self, base_origin: str):
        self.base_origin = origin_of(base_origin)
        self.base_host = urlsplit(self.base_origin).hostname or ""
        self.base_domain = base_domain(self.base_host)

    def is_subdomain(self, host: str) -> bool:
        host = host.lower()
        if host == self.base_host:
            return False
        return host == self.base_domain or host.endswith("." + self.base_domain)

    def extract(self, body: str, page_url: str) -> ExtractedLinks:
        internal: List[str] = []
        external: List[str] = []
        subdomains: List[str] = []
        for m in LINK_ATTR.finditer(body or ""):
            raw = m.group(1).strip()
            if not raw or raw.startswith("#"):
                continue
            try:
                resolved = urlsplit(urljoin(page_url, raw))
                origin = _origin(resolved)
            except ValueError:
                continue
            if origin is None:
                continue
            if origin == self.base_origin:
                internal.append(origin + (resolved.path or "/"))
            elif resolved.scheme.lower() in ("http", "https"):
                external.append(resolved._replace(fragment="").geturl())
                if self.is_subdomain(resolved.hostname or ""):
                    subdomains.append(origin)
        return ExtractedLinks(internal, external, subdomains)
