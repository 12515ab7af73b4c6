"""
Site crawler that runs a security checklist or a structured content
extraction on every in-scope page reached by BFS from a seed URL.
"""
from sitescan.core import CrawlJob, CrawlReport, scan_site, scrape_site
from sitescan.errors import ClientInputError, FetchError

__version__ = "1.0.0"
__all__ = ["CrawlJob", "CrawlReport", "scan_site", "scrape_site", "ClientInputError", "FetchError"]
