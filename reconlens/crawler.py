import asyncio, logging, re, time
from collections import deque
from typing import Deque, List, NamedTuple, Optional, Set, Tuple

import aiohttp

from . import config
from .analyzer import analyze_page, is_warning
from .errors import InputError
from .links import LinkExtractor, normalize_url, origin_of
from .models import CrawledPage, CrawlResult
from .steps import StepCb, StepLog

log = logging.getLogger("reconlens.crawler")

DISALLOW_PAT = re.compile(r"Disallow:\s*(.+)", re.I)


class CrawlTarget(NamedTuple):
    url: str
    base_origin: str
    max_depth: int
    max_pages: int

    @classmethod
    def from_url(cls, url: str, depth: int = config.DEFAULT_DEPTH,
                 max_pages: int = config.DEFAULT_MAX_PAGES) -> "CrawlTarget":
        url = (url or "").strip()
        if not url:
            raise InputError("URL is required")
        if depth < 0:
            raise InputError("depth must be >= 0")
        if max_pages < 1:
            raise InputError("max_pages must be >= 1")
        if not url.lower().startswith("http"):
            url = f"https://{url}"
        try:
            base = origin_of(url)
        except ValueError as e:
            raise InputError(f"Invalid URL: {e}") from e
        return cls(url, base, depth, max_pages)


class FrontierItem(NamedTuple):
    url: str
    depth: int


class _Cancelled(Exception):
    pass


class CrawlEngine:
    """
    Breadth-first crawler. Each run owns its frontier, visited set and
    accumulators; nothing is shared between runs.
    """

    def __init__(
        self,
        user_agent: str = config.USER_AGENT,
        fetch_timeout: float = config.FETCH_TIMEOUT,
        robots_timeout: float = config.ROBOTS_TIMEOUT,
    ):
        self.headers = {"User-Agent": user_agent}
        self.fetch_timeout = aiohttp.ClientTimeout(total=fetch_timeout)
        self.robots_timeout = aiohttp.ClientTimeout(total=robots_timeout)

    async def _check_robots(self, session: aiohttp.ClientSession, base: str, steps: StepLog) -> None:
        steps.info("Fetching robots.txt...")
        try:
            async with session.get(f"{base}/robots.txt", headers=self.headers,
                                   timeout=self.robots_timeout) as r:
                if r.status == 200:
                    text = await r.text(errors="ignore")
                    rules = len(DISALLOW_PAT.findall(text))
                    steps.success(f"robots.txt found — {rules} disallow rules")
                else:
                    steps.success("No robots.txt found — no restrictions")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug("robots.txt fetch failed: %r", e)
            steps.info("Could not fetch robots.txt")

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> Tuple[int, str, Optional[str]]:
        """(status, content type, body). Body is None for non-HTML responses."""
        async with session.get(url, headers=self.headers, allow_redirects=True,
                               timeout=self.fetch_timeout) as r:
            ctype = r.headers.get("Content-Type", "")
            if "text/html" not in ctype.lower():
                return r.status, ctype, None
            return r.status, ctype, await r.text(errors="ignore")

    async def _fetch_or_cancel(self, session: aiohttp.ClientSession, url: str,
                               cancel: Optional[asyncio.Event]):
        if cancel is None:
            return await self._fetch(session, url)
        fetch = asyncio.ensure_future(self._fetch(session, url))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({fetch, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            fetch.cancel()
            raise
        finally:
            waiter.cancel()
        if fetch in done:
            return fetch.result()
        fetch.cancel()
        # let the aborted request unwind before the session is reused
        await asyncio.wait({fetch})
        raise _Cancelled()

    async def run(
        self,
        target: CrawlTarget,
        cancel: Optional[asyncio.Event] = None,
        on_step: Optional[StepCb] = None,
    ) -> CrawlResult:
        start = time.monotonic()
        base = target.base_origin
        limit = target.max_pages
        steps = StepLog(log, on_step)
        extractor = LinkExtractor(base)

        frontier: Deque[FrontierItem] = deque([FrontierItem(target.url, 0)])
        enqueued: Set[str] = {normalize_url(target.url)}
        visited: Set[str] = set()
        internal: dict = {}
        external: dict = {}
        subdomains: dict = {}
        pages: List[CrawledPage] = []
        cancelled = False
        level = 0

        steps.system(f"Initializing BFS crawler for {base}")
        steps.system(f"Config: depth={target.max_depth}, max_pages={limit}")

        async with aiohttp.ClientSession() as session:
            await self._check_robots(session, base, steps)
            steps.info("Starting BFS traversal...")

            while frontier and len(visited) < limit:
                if cancel is not None and cancel.is_set():
                    cancelled = True
                    break
                item = frontier.popleft()
                key = normalize_url(item.url)
                if key in visited or item.depth > target.max_depth:
                    continue
                if item.depth > level:
                    steps.system(f"Depth level {level} complete — {len(pages)} pages crawled so far")
                    level = item.depth
                visited.add(key)
                steps.info(f"[{len(visited)}/{limit}] Visiting: {item.url[:100]}")

                try:
                    status, ctype, body = await self._fetch_or_cancel(session, item.url, cancel)
                except _Cancelled:
                    cancelled = True
                    break
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    steps.warning(f"Error fetching {item.url[:80]}: {str(e) or 'timeout'}")
                    continue

                if body is None:
                    steps.info(f"  → Skipping non-HTML content: {ctype.split(';')[0] or 'unknown'}")
                    continue

                found = extractor.extract(body, item.url)
                for link in found.internal:
                    internal.setdefault(link, None)
                    if link not in enqueued and item.depth + 1 <= target.max_depth:
                        enqueued.add(link)
                        frontier.append(FrontierItem(link, item.depth + 1))
                for link in found.external:
                    external.setdefault(link, None)
                for sub in found.subdomains:
                    if sub not in subdomains:
                        subdomains[sub] = None
                        steps.info(f"  → Subdomain discovered: {sub.split('://', 1)[-1]}")

                surface = analyze_page(body, item.url, ctype)
                for finding in surface:
                    if is_warning(finding):
                        steps.warning(f"  → {finding}")
                    else:
                        steps.info(f"  → {finding}")
                steps.success(f"  → Extracted {len(found.internal)} links, {len(surface)} attack vectors")

                pages.append(CrawledPage(
                    url=item.url,
                    status=status,
                    links_found=len(found.internal),
                    attack_surface=surface,
                ))

        stopped_early = not cancelled and bool(frontier) and len(visited) >= limit
        if cancelled:
            steps.warning(f"Crawl stopped by user — returning {len(pages)} pages crawled so far")
        elif stopped_early:
            steps.warning(f"Page limit reached ({limit}), {len(frontier)} URLs still in queue")

        elapsed = time.monotonic() - start
        steps.system("=== Crawl Complete ===" if not cancelled else "=== Crawl Aborted ===")
        steps.info(f"Pages crawled: {len(pages)}")
        steps.info(f"Internal links: {len(internal)}")
        steps.info(f"External links: {len(external)}")
        steps.info(f"Subdomains: {len(subdomains)}")
        steps.success(f"Crawler shutdown after {elapsed:.1f}s")

        return CrawlResult(
            main_domain=base,
            pages_crawled=len(pages),
            internal_links=list(internal),
            external_links=list(external),
            subdomains=list(subdomains),
            crawled_pages=pages,
            stopped_early=stopped_early,
            cancelled=cancelled,
            elapsed=round(elapsed, 3),
            crawl_time=f"{elapsed:.1f}s",
            steps=steps.lines,
        )
