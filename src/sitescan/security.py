"""
Per-page security checklist: transport, response headers, forms, inline
scripts and suspicious link parameters.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping
from urllib.parse import parse_qsl

from bs4 import BeautifulSoup


class Severity(str, Enum):
    CRITICAL = "critical"
    MEDIUM = "medium"
    LOW = "low"


class FindingKind(str, Enum):
    HTTP_INSECURE = "HTTP_INSECURE"
    MISSING_SECURITY_HEADER = "MISSING_SECURITY_HEADER"
    CSRF_MISSING = "CSRF_MISSING"
    PASSWORD_AUTOCOMPLETE = "PASSWORD_AUTOCOMPLETE"
    DANGEROUS_SCRIPT = "DANGEROUS_SCRIPT"
    SUSPICIOUS_PARAMETER = "SUSPICIOUS_PARAMETER"
    CONNECTION_ERROR = "CONNECTION_ERROR"


SEVERITY_BY_KIND: Dict[FindingKind, Severity] = {
    FindingKind.HTTP_INSECURE: Severity.CRITICAL,
    FindingKind.MISSING_SECURITY_HEADER: Severity.MEDIUM,
    FindingKind.CSRF_MISSING: Severity.CRITICAL,
    FindingKind.PASSWORD_AUTOCOMPLETE: Severity.LOW,
    FindingKind.DANGEROUS_SCRIPT: Severity.MEDIUM,
    FindingKind.SUSPICIOUS_PARAMETER: Severity.CRITICAL,
    FindingKind.CONNECTION_ERROR: Severity.CRITICAL,
}

# Header name -> what its absence exposes
SECURITY_HEADERS: Dict[str, str] = {
    "x-frame-options": "Missing X-Frame-Options header (clickjacking protection)",
    "x-content-type-options": "Missing X-Content-Type-Options header (MIME sniffing protection)",
    "x-xss-protection": "Missing X-XSS-Protection header (basic XSS protection)",
    "strict-transport-security": "Missing HSTS header (transport security)",
    "content-security-policy": "Missing CSP header (content security policy)",
}

DANGEROUS_SCRIPT_MARKERS = ("eval(", "innerHTML", "document.write")
SUSPICIOUS_VALUE_MARKERS = ("<script", "javascript:", "SELECT", "UNION")
CSRF_NAME_MARKERS = ("csrf", "token")


@dataclass(frozen=True, slots=True)
class Finding:
    """One security observation on a page."""
    kind: FindingKind
    severity: Severity
    detail: str
    recommendation: str

    @classmethod
    def of(cls, kind: FindingKind, detail: str, recommendation: str) -> "Finding":
        """Build a finding with the severity fixed for its kind."""
        return cls(kind, SEVERITY_BY_KIND[kind], detail, recommendation)


def connection_error(message: str) -> Finding:
    """Finding recorded for a page whose fetch failed at the network level."""
    return Finding.of(
        FindingKind.CONNECTION_ERROR,
        f"Connection error: {message}",
        "Check that the site is reachable",
    )


def analyze_security(url: str, html: str, headers: Mapping[str, str]) -> List[Finding]:
    """
    Run every security check on a page and return findings in a fixed order:
    transport, headers, forms, scripts, links.

    The result depends only on the arguments.
    """
    soup = BeautifulSoup(html or "", "lxml")
    findings: List[Finding] = []
    findings.extend(_check_transport(url))
    findings.extend(_check_headers(headers))
    findings.extend(_check_forms(soup))
    findings.extend(_check_scripts(soup))
    findings.extend(_check_link_parameters(soup))
    return findings


def _check_transport(url: str) -> List[Finding]:
    if url.startswith("https://"):
        return []
    return [Finding.of(
        FindingKind.HTTP_INSECURE,
        "The site is served over plain HTTP",
        "Migrate to HTTPS with a valid SSL/TLS certificate",
    )]


def _check_headers(headers: Mapping[str, str]) -> List[Finding]:
    present = {name.lower() for name, value in headers.items() if value}
    return [
        Finding.of(
            FindingKind.MISSING_SECURITY_HEADER,
            detail,
            f"Add the {name.upper()} header",
        )
        for name, detail in SECURITY_HEADERS.items()
        if name not in present
    ]


def _has_csrf_input(form) -> bool:
    for field_ in form.find_all("input"):
        name = field_.get("name") or ""
        if name == "_token" or any(marker in name for marker in CSRF_NAME_MARKERS):
            return True
    return False


def _check_forms(soup: BeautifulSoup) -> List[Finding]:
    findings: List[Finding] = []
    for form in soup.find_all("form"):
        method = form.get("method") or "GET"
        action = form.get("action") or ""

        if method.lower() == "post" and not _has_csrf_input(form):
            findings.append(Finding.of(
                FindingKind.CSRF_MISSING,
                f"POST form without CSRF protection: {action}",
                "Add a CSRF token to the form",
            ))

        for password in form.select('input[type="password"]'):
            if password.get("autocomplete") != "off":
                findings.append(Finding.of(
                    FindingKind.PASSWORD_AUTOCOMPLETE,
                    'Password field without autocomplete="off"',
                    "Disable autocompletion on password fields",
                ))
    return findings


def _check_scripts(soup: BeautifulSoup) -> List[Finding]:
    findings: List[Finding] = []
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        body = "".join(str(child) for child in script.children)
        if not body.strip():
            continue
        if any(marker in body for marker in DANGEROUS_SCRIPT_MARKERS):
            findings.append(Finding.of(
                FindingKind.DANGEROUS_SCRIPT,
                "Inline script using potentially dangerous functions",
                "Avoid eval(), innerHTML and document.write",
            ))
    return findings


def _check_link_parameters(soup: BeautifulSoup) -> List[Finding]:
    findings: List[Finding] = []
    for link in soup.find_all("a", href=True):
        href = link["href"]
        if "?" not in href:
            continue
        query = href.split("?")[1]
        for key, value in parse_qsl(query, keep_blank_values=True):
            if value and any(marker in value for marker in SUSPICIOUS_VALUE_MARKERS):
                findings.append(Finding.of(
                    FindingKind.SUSPICIOUS_PARAMETER,
                    f"Suspicious parameter in link: {key}={value}",
                    "Validate and escape all GET parameters",
                ))
    return findings
