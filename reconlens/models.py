from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from . import config


class CrawlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(min_length=1)
    depth: int = Field(config.DEFAULT_DEPTH, ge=1, le=config.MAX_DEPTH)
    max_pages: int = Field(config.DEFAULT_MAX_PAGES, ge=1, le=config.MAX_PAGES, alias="maxPages")

    @field_validator("url")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v


class PortScanRequest(BaseModel):
    ip_range: str = Field(min_length=1)
    ports: List[int] = Field(default_factory=lambda: list(config.DEFAULT_PORTS),
                             min_length=1, max_length=config.MAX_PORTS)

    @field_validator("ports")
    @classmethod
    def _valid_ports(cls, v: List[int]) -> List[int]:
        bad = [p for p in v if not 1 <= p <= 65535]
        if bad:
            raise ValueError(f"invalid port(s): {', '.join(str(p) for p in bad)}")
        return v


class CrawledPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    status: int
    links_found: int
    attack_surface: List[str] = []


class CrawlResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    main_domain: str
    pages_crawled: int
    internal_links: List[str]
    external_links: List[str]
    subdomains: List[str]
    crawled_pages: List[CrawledPage]
    stopped_early: bool
    cancelled: bool = False
    elapsed: float
    crawl_time: str
    steps: List[str]


class ProbeResult(BaseModel):
    open: bool
    banner: str = ""


class GeoInfo(BaseModel):
    country: str = ""
    city: str = ""
    organization: str = ""
    asn: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class PortScanFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip: str
    port: int
    protocol: str = "tcp"
    service: str
    banner: str = ""
    risk_score: int
    country: Optional[str] = None
    city: Optional[str] = None
    organization: Optional[str] = None
    asn: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ScanSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    steps: List[str]
    results: List[PortScanFinding]
    total_open: int
    hosts_scanned: int
    cancelled: bool = False
