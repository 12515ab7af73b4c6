"""
Named User-Agent and Accept-Language header sets for outbound requests.
"""
from __future__ import annotations

from typing import Dict

DEFAULT_IDENTITY = "desktop"
DEFAULT_LOCALE = "france"

USER_AGENTS: Dict[str, str] = {
    "desktop": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "mobile": (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 14_6 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/14.0 Mobile/15E148 Safari/604.1"
    ),
    "alyze": "Alyze-Bot/1.0 (+https://alyze.info/crawler)",
}

LOCALES: Dict[str, Dict[str, str]] = {
    "france": {"Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8"},
    "us": {"Accept-Language": "en-US,en;q=0.9"},
    "spain": {"Accept-Language": "es-ES,es;q=0.9,en;q=0.8"},
}

BASE_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


def build_headers(identity: str = DEFAULT_IDENTITY, locale: str = DEFAULT_LOCALE) -> Dict[str, str]:
    """
    Build request headers for an identity/locale pair.

    Unknown identities fall back to the desktop User-Agent. Unknown locales
    add no Accept-Language header, leaving the client default in place.
    """
    headers = {"User-Agent": USER_AGENTS.get(identity, USER_AGENTS[DEFAULT_IDENTITY])}
    headers.update(BASE_HEADERS)
    headers.update(LOCALES.get(locale, {}))
    return headers
