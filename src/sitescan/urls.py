"""
Link resolution and crawl scope checks.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

# Schemes that must carry a host to be usable
HOST_SCHEMES: frozenset[str] = frozenset(("http", "https", "ftp", "ws", "wss"))

# Characters never valid inside an authority component
_BAD_NETLOC_CHARS = frozenset(' <>"\\^`{|}')


def normalize_url(href: Optional[str], base: str) -> Optional[str]:
    """
    Resolve a possibly-relative reference against the page URL.

    - Lowercases scheme and host
    - Gives hierarchical URLs with an empty path a "/" path
    - Keeps query strings, fragments and trailing slashes as written

    Returns None when the result is not an absolute URL, so callers can
    drop the link instead of failing the page.
    """
    if href is None:
        return None

    try:
        joined = urljoin(base or "", href.strip())
        parts = urlsplit(joined)
        # Accessing .port validates it
        parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if not scheme:
        return None

    if scheme in HOST_SCHEMES:
        if not parts.hostname or _BAD_NETLOC_CHARS.intersection(parts.netloc):
            return None
        # Lowercase the host portion only, leaving userinfo untouched
        userinfo, sep, hostport = parts.netloc.rpartition("@")
        netloc = f"{userinfo}{sep}{hostport.lower()}"
        return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))

    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def root_domain(url: str) -> str:
    """Return the lowercased host of a URL, or an empty string."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def is_in_scope(url: str, domain: str) -> bool:
    """
    Check if a URL's host is the root domain or one of its subdomains.

    Scope is host-based only, the scheme is not compared.
    """
    host = root_domain(url)
    if not host or not domain:
        return False
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)
