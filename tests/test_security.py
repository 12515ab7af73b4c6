"""Tests for the security checklist."""

from conftest import SECURE_HEADERS

from sitescan.security import (
    SEVERITY_BY_KIND,
    Finding,
    FindingKind,
    Severity,
    analyze_security,
    connection_error,
)

URL = "https://example.com/"


def kinds(findings):
    return [f.kind for f in findings]


class TestCleanPage:
    def test_no_findings(self):
        html = "<html><head><title>ok</title></head><body><a href='/a?page=2'>next</a></body></html>"
        assert analyze_security(URL, html, SECURE_HEADERS) == []

    def test_deterministic(self):
        html = "<form method='post'><input type='password'></form><script>eval('1')</script>"
        first = analyze_security("http://example.com/", html, {})
        second = analyze_security("http://example.com/", html, {})
        assert first == second


class TestTransportAndHeaders:
    def test_plain_http_is_critical(self):
        findings = analyze_security("http://example.com/", "", SECURE_HEADERS)
        assert kinds(findings) == [FindingKind.HTTP_INSECURE]
        assert findings[0].severity == Severity.CRITICAL

    def test_each_missing_header_is_reported(self):
        findings = analyze_security(URL, "", {})
        assert kinds(findings) == [FindingKind.MISSING_SECURITY_HEADER] * 5
        assert all(f.severity == Severity.MEDIUM for f in findings)
        assert "X-FRAME-OPTIONS" in findings[0].recommendation
        assert "CONTENT-SECURITY-POLICY" in findings[-1].recommendation

    def test_header_names_are_case_insensitive(self):
        headers = {k.upper(): v for k, v in SECURE_HEADERS.items()}
        assert analyze_security(URL, "", headers) == []

    def test_empty_header_value_counts_as_missing(self):
        headers = dict(SECURE_HEADERS, **{"X-Frame-Options": ""})
        findings = analyze_security(URL, "", headers)
        assert len(findings) == 1
        assert "X-Frame-Options" in findings[0].detail


class TestForms:
    def test_post_form_without_token(self):
        html = '<form method="POST" action="/login"><input name="email"></form>'
        findings = analyze_security(URL, html, SECURE_HEADERS)
        assert kinds(findings) == [FindingKind.CSRF_MISSING]
        assert findings[0].detail.endswith(": /login")

    def test_csrf_token_names_are_accepted(self):
        for name in ("csrf_token", "user_token", "_token", "csrfmiddlewaretoken"):
            html = f'<form method="post" action="/x"><input type="hidden" name="{name}"></form>'
            assert analyze_security(URL, html, SECURE_HEADERS) == [], name

    def test_get_form_needs_no_token(self):
        html = '<form action="/search"><input name="q"></form>'
        assert analyze_security(URL, html, SECURE_HEADERS) == []

    def test_password_autocomplete_per_input(self):
        html = (
            '<form method="get">'
            '<input type="password" name="a">'
            '<input type="password" name="b" autocomplete="new-password">'
            '<input type="password" name="c" autocomplete="off">'
            "</form>"
        )
        findings = analyze_security(URL, html, SECURE_HEADERS)
        assert kinds(findings) == [FindingKind.PASSWORD_AUTOCOMPLETE] * 2
        assert findings[0].severity == Severity.LOW


class TestScripts:
    def test_one_finding_per_dangerous_script(self):
        html = "<script>eval('x'); document.write('y'); el.innerHTML = 'z';</script>"
        findings = analyze_security(URL, html, SECURE_HEADERS)
        assert kinds(findings) == [FindingKind.DANGEROUS_SCRIPT]

    def test_each_dangerous_script_counts(self):
        html = "<script>eval('a')</script><script>console.log(1)</script><script>document.write('b')</script>"
        assert len(analyze_security(URL, html, SECURE_HEADERS)) == 2

    def test_external_and_empty_scripts_are_ignored(self):
        html = '<script src="/app.js"></script><script>   </script>'
        assert analyze_security(URL, html, SECURE_HEADERS) == []


class TestLinkParameters:
    def test_script_injection_in_query(self):
        html = '<a href="/search?q=&lt;script&gt;alert(1)">x</a>'
        findings = analyze_security(URL, html, SECURE_HEADERS)
        assert kinds(findings) == [FindingKind.SUSPICIOUS_PARAMETER]
        assert findings[0].detail == "Suspicious parameter in link: q=<script>alert(1)"

    def test_each_offending_parameter_is_reported(self):
        html = '<a href="/p?id=1%20UNION%20SELECT%20pw&amp;next=javascript:go()&amp;page=2">x</a>'
        findings = analyze_security(URL, html, SECURE_HEADERS)
        assert len(findings) == 2
        assert "id=1 UNION SELECT pw" in findings[0].detail
        assert "next=javascript:go()" in findings[1].detail

    def test_match_is_case_sensitive(self):
        html = '<a href="/p?q=select%20union">x</a>'
        assert analyze_security(URL, html, SECURE_HEADERS) == []


def test_findings_follow_check_order():
    html = (
        '<a href="/p?q=UNION">x</a>'
        "<script>eval('1')</script>"
        '<form method="post" action="/login"><input type="password" name="pw"></form>'
    )
    findings = analyze_security("http://example.com/", html, {})
    assert kinds(findings) == (
        [FindingKind.HTTP_INSECURE]
        + [FindingKind.MISSING_SECURITY_HEADER] * 5
        + [
            FindingKind.CSRF_MISSING,
            FindingKind.PASSWORD_AUTOCOMPLETE,
            FindingKind.DANGEROUS_SCRIPT,
            FindingKind.SUSPICIOUS_PARAMETER,
        ]
    )


def test_finding_severity_is_fixed_by_kind():
    for kind in FindingKind:
        assert Finding.of(kind, "d", "r").severity == SEVERITY_BY_KIND[kind]
    error = connection_error("timed out")
    assert error.kind == FindingKind.CONNECTION_ERROR
    assert error.severity == Severity.CRITICAL
    assert "timed out" in error.detail


def test_password_type_matches_case_insensitively():
    html = '<form><input type="PASSWORD" name="pw"></form>'
    findings = analyze_security(URL, html, SECURE_HEADERS)
    assert kinds(findings) == [FindingKind.PASSWORD_AUTOCOMPLETE]
