"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse

from sitescan.core import (
    ERROR_STATUS,
    CrawlJob,
    CrawlReport,
    PageResult,
    SecurityPageResult,
    scan_site,
    scrape_site,
)
from sitescan.errors import ClientInputError
from sitescan.fetcher import SCAN_TIMEOUT, SCRAPE_TIMEOUT
from sitescan.profiles import DEFAULT_IDENTITY, DEFAULT_LOCALE, LOCALES, USER_AGENTS


def print_scan_line(done: int, budget: int, result: PageResult, new_links: int) -> None:
    """Print single page result line."""
    status_str = "ERR" if result.status == ERROR_STATUS else str(result.status)
    extra = f", {len(result.findings)} findings" if isinstance(result, SecurityPageResult) else ""
    sys.stderr.write(f"  [{done}/{budget}] {status_str} {result.url} (+{new_links} links{extra})\n")
    sys.stderr.flush()


def print_summary(mode: str, report: CrawlReport) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write(f"{mode.upper()} SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    summary = report.summary
    sys.stderr.write(f"Total pages crawled:    {summary['total_pages']}\n")
    if mode == "scan":
        sys.stderr.write(f"Critical findings:      {summary['critical']}\n")
        sys.stderr.write(f"Medium findings:        {summary['medium']}\n")
        sys.stderr.write(f"Low findings:           {summary['low']}\n")
    else:
        sys.stderr.write(f"Requested pages:        {summary['requested_pages']}\n")

    errors = sum(1 for page in report.pages if page.status == ERROR_STATUS)
    if errors:
        sys.stderr.write(f"Connection errors:      {errors}\n")
    sys.stderr.write("\n")


def generate_output_path(mode: str, start_url: str) -> Path:
    """Generate output path: crawls/{mode}_{hostname}_{datetime}.json"""
    parsed = urlparse(start_url)
    hostname = parsed.hostname or "unknown"
    # Sanitize hostname for filename (replace dots with underscores)
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{mode}_{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitescan",
        description="Crawl a site from a URL and output a security or content report as JSON.",
    )
    sub = parser.add_subparsers(dest="mode", required=True)

    for mode, help_text, default_timeout in (
        ("scan", "Run the security checklist on each crawled page", SCAN_TIMEOUT),
        ("scrape", "Extract titles, links, images, assets and forms from each crawled page", SCRAPE_TIMEOUT),
    ):
        p = sub.add_parser(mode, help=help_text)
        p.add_argument("start_url", help="Start URL (e.g. https://example.com)")
        p.add_argument("--pages", type=int, default=1, help="Maximum pages to crawl (default: 1)")
        p.add_argument("--assets", action="store_true", help="Include CSS and JS assets (scrape only)")
        p.add_argument(
            "--user-agent",
            default=DEFAULT_IDENTITY,
            help=f"Identity profile: {', '.join(USER_AGENTS)} (default: {DEFAULT_IDENTITY})",
        )
        p.add_argument(
            "--locale",
            default=DEFAULT_LOCALE,
            help=f"Locale profile: {', '.join(LOCALES)} (default: {DEFAULT_LOCALE})",
        )
        p.add_argument("--no-redirects", action="store_true", help="Do not follow HTTP redirects")
        p.add_argument(
            "--timeout",
            type=float,
            default=default_timeout,
            help=f"Request timeout in seconds (default: {default_timeout:g})",
        )
        p.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
        p.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
        p.add_argument("--verbose", action="store_true", help="Show progress and summary")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        job = CrawlJob(
            seed_url=args.start_url,
            page_budget=args.pages,
            include_assets=args.assets,
            identity_profile=args.user_agent,
            locale_profile=args.locale,
            follow_redirects=not args.no_redirects,
        )
    except ClientInputError as e:
        sys.stderr.write(f"error: {e}\n")
        return 2

    run = scan_site if args.mode == "scan" else scrape_site
    report = run(job, timeout=args.timeout, progress=print_scan_line if args.verbose else None)

    # Print summary if verbose
    if args.verbose:
        print_summary(args.mode, report)

    # Output JSON
    json_text = json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        # Auto-generate path if not specified
        output_path = Path(args.out) if args.out else generate_output_path(args.mode, args.start_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
