"""Shared test helpers: an in-memory stand-in for requests.Session."""

from typing import Dict, List, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict

SECURE_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000",
    "Content-Security-Policy": "default-src 'self'",
}


class FakeResponse:
    def __init__(self, url: str, text: str = "", status_code: int = 200, headers: Optional[Dict[str, str]] = None):
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})


class FakeSession:
    """Serves canned pages by URL; unknown URLs and exceptions raise."""

    def __init__(self, pages: Dict[str, Union[str, FakeResponse, Exception]]):
        self.pages = pages
        self.requested: List[str] = []
        self.calls: List[dict] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requested.append(url)
        self.calls.append(kwargs)
        page = self.pages.get(url)
        if page is None:
            raise requests.ConnectionError(f"Failed to establish a new connection: {url}")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, FakeResponse):
            return page
        return FakeResponse(url, page, headers=SECURE_HEADERS)

    def close(self):
        self.closed = True


def links_page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>t</title></head><body>{anchors}</body></html>"
