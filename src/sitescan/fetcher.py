"""
HTTP page retrieval. Every status code comes back as data; only
network-level failures raise.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

import requests
from urllib3.exceptions import LocationValueError

from sitescan.errors import FetchError
from sitescan.profiles import build_headers

logger = logging.getLogger(__name__)

# Per-fetch timeouts (seconds) for the two crawl modes
SCAN_TIMEOUT = 10.0
SCRAPE_TIMEOUT = 15.0

MAX_REDIRECTS = 5


@dataclass(slots=True)
class FetchedPage:
    """Raw response data for one fetched page."""
    url: str
    final_url: str
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


def create_session(identity: str, locale: str) -> requests.Session:
    """Build an HTTP session carrying the identity and locale headers."""
    session = requests.Session()
    session.headers.update(build_headers(identity, locale))
    session.max_redirects = MAX_REDIRECTS
    return session


def fetch_page(
    session: requests.Session,
    url: str,
    timeout: float,
    follow_redirects: bool = True,
) -> FetchedPage:
    """
    Fetch a URL and return its status, body and headers.

    Non-2xx responses are returned like any other. With redirects disabled
    the 3xx response itself is returned. Timeouts, DNS, connection, TLS,
    redirect-loop and unparsable-host failures raise FetchError.
    """
    logger.debug("GET %s (timeout=%ss, redirects=%s)", url, timeout, follow_redirects)
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=follow_redirects)
    except (requests.RequestException, LocationValueError, UnicodeError) as e:
        raise FetchError(url, str(e)) from e

    return FetchedPage(
        url=url,
        final_url=resp.url or url,
        status_code=resp.status_code,
        body=resp.text or "",
        headers={k.lower(): v for k, v in resp.headers.items()},
    )
