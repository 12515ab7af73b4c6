"""
Core crawling logic: job options, frontier, the breadth-first crawl loop
and report assembly for the security and extraction modes.
"""
from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from typing import Callable, Deque, Dict, Iterator, List, Optional, Set, Union

import requests
from bs4 import BeautifulSoup, SoupStrainer

from sitescan.errors import ClientInputError, FetchError
from sitescan.extract import AssetRef, FormDescriptor, ImageRef, LinkRef, PageExtraction, extract_page
from sitescan.fetcher import SCAN_TIMEOUT, SCRAPE_TIMEOUT, FetchedPage, create_session, fetch_page
from sitescan.profiles import DEFAULT_IDENTITY, DEFAULT_LOCALE
from sitescan.security import Finding, Severity, analyze_security, connection_error
from sitescan.urls import is_in_scope, normalize_url, root_domain

logger = logging.getLogger(__name__)

# Status recorded for pages whose fetch failed
ERROR_STATUS = "error"
LOAD_ERROR_TITLE = "load error"

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

Status = Union[int, str]


@dataclass(frozen=True, slots=True)
class CrawlJob:
    """Options for one crawl. Validated on construction, never mutated."""
    seed_url: str
    page_budget: int = 1
    include_assets: bool = False
    identity_profile: str = DEFAULT_IDENTITY
    locale_profile: str = DEFAULT_LOCALE
    follow_redirects: bool = True

    def __post_init__(self) -> None:
        if not self.seed_url or not isinstance(self.seed_url, str):
            raise ClientInputError("URL required")
        if normalize_url(self.seed_url, "") is None or not root_domain(self.seed_url):
            raise ClientInputError(f"Invalid URL: {self.seed_url}")
        if not self.seed_url.lower().startswith(("http://", "https://")):
            raise ClientInputError(f"Unsupported URL scheme: {self.seed_url}")
        if isinstance(self.page_budget, bool) or not isinstance(self.page_budget, int) or self.page_budget < 1:
            raise ClientInputError(f"Page budget must be a positive integer, got {self.page_budget!r}")

    @property
    def domain(self) -> str:
        return root_domain(self.seed_url)


class Frontier:
    """FIFO queue of URLs awaiting a fetch, with O(1) membership checks."""

    def __init__(self, seed: str) -> None:
        self._queue: Deque[str] = deque([seed])
        self._queued: Set[str] = {seed}

    def push(self, url: str) -> None:
        self._queue.append(url)
        self._queued.add(url)

    def pop(self) -> str:
        url = self._queue.popleft()
        self._queued.discard(url)
        return url

    def __contains__(self, url: object) -> bool:
        return url in self._queued

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self) -> Iterator[str]:
        return iter(self._queue)


@dataclass(slots=True)
class SecurityPageResult:
    url: str
    status: Status
    findings: List[Finding] = field(default_factory=list)


@dataclass(slots=True)
class ExtractionPageResult:
    url: str
    status: Status
    title: str
    description: str = ""
    headings: List[str] = field(default_factory=list)
    links: List[LinkRef] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    css: List[AssetRef] = field(default_factory=list)
    scripts: List[AssetRef] = field(default_factory=list)
    forms: List[FormDescriptor] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_extraction(cls, url: str, status: int, data: PageExtraction) -> "ExtractionPageResult":
        return cls(
            url=url,
            status=status,
            title=data.title,
            description=data.description,
            headings=data.headings,
            links=data.links,
            images=data.images,
            css=data.css,
            scripts=data.scripts,
            forms=data.forms,
        )


PageResult = Union[SecurityPageResult, ExtractionPageResult]


@dataclass(slots=True)
class CrawlOutcome:
    """Raw result of the crawl loop, before summaries are computed.

    `pending` holds URLs still queued when the loop stopped.
    """
    pages: List[PageResult] = field(default_factory=list)
    visited: List[str] = field(default_factory=list)
    pending: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CrawlReport:
    """Final report handed back to the caller."""
    pages: List[PageResult]
    summary: Dict[str, int]

    def to_dict(self) -> Dict[str, object]:
        """Plain dict form, ready for JSON encoding."""
        return {"pages": [asdict(p) for p in self.pages], "summary": dict(self.summary)}


# Per-page hooks supplied by each crawl mode
Analyzer = Callable[[FetchedPage], PageResult]
Degrader = Callable[[str, FetchError], PageResult]
ProgressHook = Callable[[int, int, PageResult, int], None]


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags in document order."""
    soup = BeautifulSoup(html or "", "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a") if a.get("href") is not None]


def crawl(
    job: CrawlJob,
    analyze: Analyzer,
    degrade: Degrader,
    timeout: float,
    session: Optional[requests.Session] = None,
    progress: Optional[ProgressHook] = None,
) -> CrawlOutcome:
    """
    Crawl in-scope links from the seed URL using BFS traversal.

    Stops when the frontier is empty or the page budget is reached. A page
    whose fetch fails is recorded through `degrade` and contributes no links.
    """
    domain = job.domain
    frontier = Frontier(job.seed_url)
    visited: Set[str] = set()
    outcome = CrawlOutcome()

    owns_session = session is None
    if session is None:
        session = create_session(job.identity_profile, job.locale_profile)

    logger.info("Starting crawl from %s (budget=%d)", job.seed_url, job.page_budget)

    try:
        while frontier and len(outcome.pages) < job.page_budget:
            url = frontier.pop()

            if url in visited:
                continue
            visited.add(url)
            outcome.visited.append(url)

            try:
                page = fetch_page(session, url, timeout, job.follow_redirects)
            except FetchError as e:
                logger.warning("Fetch failed for %s: %s", url, e.message)
                result = degrade(url, e)
                outcome.pages.append(result)
                if progress:
                    progress(len(outcome.pages), job.page_budget, result, 0)
                continue

            result = analyze(page)
            outcome.pages.append(result)

            # Discover and queue new links
            new_links = 0
            if len(outcome.pages) < job.page_budget:
                for href in extract_links(page.body):
                    target = normalize_url(href, page.final_url)
                    if not target or not is_in_scope(target, domain):
                        continue
                    if target in visited or target in frontier:
                        continue
                    frontier.push(target)
                    new_links += 1

            if progress:
                progress(len(outcome.pages), job.page_budget, result, new_links)
    finally:
        if owns_session:
            session.close()

    outcome.pending = list(frontier)
    logger.info("Crawl finished: %d page(s), %d still queued", len(outcome.pages), len(frontier))
    return outcome


def summarize_findings(pages: List[SecurityPageResult]) -> Dict[str, int]:
    """Count findings per severity across all pages in a single pass."""
    counts = Counter(f.severity for page in pages for f in page.findings)
    return {
        "total_pages": len(pages),
        Severity.CRITICAL.value: counts[Severity.CRITICAL],
        Severity.MEDIUM.value: counts[Severity.MEDIUM],
        Severity.LOW.value: counts[Severity.LOW],
    }


def scan_site(
    job: CrawlJob,
    session: Optional[requests.Session] = None,
    timeout: float = SCAN_TIMEOUT,
    progress: Optional[ProgressHook] = None,
) -> CrawlReport:
    """Crawl a site and run the security checklist on every page."""

    def analyze(page: FetchedPage) -> SecurityPageResult:
        findings = analyze_security(page.final_url, page.body, page.headers)
        return SecurityPageResult(url=page.url, status=page.status_code, findings=findings)

    def degrade(url: str, error: FetchError) -> SecurityPageResult:
        return SecurityPageResult(url=url, status=ERROR_STATUS, findings=[connection_error(error.message)])

    outcome = crawl(job, analyze, degrade, timeout, session=session, progress=progress)
    return CrawlReport(pages=outcome.pages, summary=summarize_findings(outcome.pages))


def scrape_site(
    job: CrawlJob,
    session: Optional[requests.Session] = None,
    timeout: float = SCRAPE_TIMEOUT,
    progress: Optional[ProgressHook] = None,
) -> CrawlReport:
    """Crawl a site and extract structured content from every page."""
    domain = job.domain

    def analyze(page: FetchedPage) -> ExtractionPageResult:
        data = extract_page(page.final_url, page.body, domain, job.include_assets)
        return ExtractionPageResult.from_extraction(page.url, page.status_code, data)

    def degrade(url: str, error: FetchError) -> ExtractionPageResult:
        return ExtractionPageResult(url=url, status=ERROR_STATUS, title=LOAD_ERROR_TITLE, error=error.message)

    outcome = crawl(job, analyze, degrade, timeout, session=session, progress=progress)
    summary = {"total_pages": len(outcome.pages), "requested_pages": job.page_budget}
    return CrawlReport(pages=outcome.pages, summary=summary)
