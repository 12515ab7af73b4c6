"""
HTTP routes for the two crawl operations.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from sitescan.core import CrawlJob, scan_site, scrape_site
from sitescan.errors import ClientInputError, UnexpectedServerError
from sitescan.profiles import DEFAULT_IDENTITY, DEFAULT_LOCALE

logger = logging.getLogger(__name__)

app = FastAPI(title="sitescan")


class CrawlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    include_assets: bool = Field(False, alias="includeAssets")
    user_agent: str = Field(DEFAULT_IDENTITY, alias="userAgent")
    location: str = DEFAULT_LOCALE
    follow_redirects: bool = Field(True, alias="followRedirects")
    # Accepted for compatibility, not used
    language: str = "auto"

    def to_job(self, budget: int) -> CrawlJob:
        return CrawlJob(
            seed_url=self.url or "",
            page_budget=budget,
            include_assets=self.include_assets,
            identity_profile=self.user_agent,
            locale_profile=self.location,
            follow_redirects=self.follow_redirects,
        )


class ScanRequest(CrawlRequest):
    depth: int = 1


class ScrapeRequest(CrawlRequest):
    pages: int = 1


@app.exception_handler(ClientInputError)
async def client_input_error_handler(request: Request, exc: ClientInputError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(UnexpectedServerError)
async def server_error_handler(request: Request, exc: UnexpectedServerError):
    return JSONResponse(status_code=500, content={"error": f"Server error: {exc}"})


def _run(run, job: CrawlJob) -> dict:
    try:
        return run(job).to_dict()
    except Exception as e:
        logger.exception("Crawl of %s failed", job.seed_url)
        raise UnexpectedServerError(str(e)) from e


# Sync handlers: requests blocks, so each job runs in the worker thread pool
@app.post("/api/scan")
def scan(req: ScanRequest):
    job = req.to_job(req.depth)
    logger.info("Scan requested: %s (depth=%d)", job.seed_url, job.page_budget)
    return _run(scan_site, job)


@app.post("/api/scrape")
def scrape(req: ScrapeRequest):
    job = req.to_job(req.pages)
    logger.info("Scrape requested: %s (pages=%d)", job.seed_url, job.page_budget)
    return _run(scrape_site, job)
