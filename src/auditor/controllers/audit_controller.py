import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Protocol
from urllib.parse import urlparse

from agentlint.core.managers.config_manager import config_manager
from auditor.dom.builder import DOMBuilder
from auditor.dom.models import HTMLDocument
from auditor.dom.qngine import QNGINE
from auditor.errors import FetchFailedError, HttpStatusError, InvalidUrlError, UnsupportedSchemeError
from auditor.model import AuditReport
from crawler.model import FetchResult
from crawler.services.http_request_service import HttpRequestService
from crawler.utils.url_utils import SUPPORTED_SCHEMES, UrlUtils

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def perform_request(self, url: str) -> FetchResult: ...


class AuditController:
    """
    Orchestrates one audit: URL validation, retrieval, parsing, rule
    evaluation and report assembly.

    An audit either returns a complete AuditReport or raises a classified
    AuditError; there is no partial report. Each call builds its own document,
    so concurrent audits share nothing but the (immutable) rule table.
    """

    def __init__(self, fetcher: Optional[Fetcher] = None, engine: Optional[QNGINE] = None):
        self.fetcher = fetcher
        self.engine = engine if engine is not None else QNGINE()
        self.builder = DOMBuilder()

    # --- Step 1: URL validation ---

    @staticmethod
    def validate_url(target_url: str) -> str:
        """
        Returns the stripped target URL or raises InvalidUrlError /
        UnsupportedSchemeError.
        """
        if not isinstance(target_url, str) or not target_url.strip():
            raise InvalidUrlError("URL is empty", url=target_url)
        url = target_url.strip()

        try:
            parsed = urlparse(url)
            port = parsed.port  # raises ValueError for a malformed port
        except ValueError as e:
            raise InvalidUrlError(f"Invalid URL '{url}': {e}", url=url) from e

        if not parsed.scheme:
            raise InvalidUrlError(f"Invalid URL '{url}': missing scheme", url=url)
        if not UrlUtils.is_supported_scheme(url):
            raise UnsupportedSchemeError(
                f"Unsupported scheme '{parsed.scheme}' (expected one of: {', '.join(SUPPORTED_SCHEMES)})",
                url=url, scheme=parsed.scheme
            )
        if not parsed.hostname or any(ch.isspace() for ch in parsed.netloc):
            raise InvalidUrlError(f"Invalid URL '{url}': missing or malformed host", url=url)

        logger.debug(f"Validated {url} (port: {port or 'default'})")
        return url

    # --- Step 2: Retrieval ---

    async def fetch(self, url: str) -> FetchResult:
        """Retrieves the page and classifies transport and HTTP failures."""
        if self.fetcher is not None:
            result = await self.fetcher.perform_request(url)
        else:
            async with HttpRequestService(
                    timeout=float(config_manager.get_nested("fetch.timeout", 15)),
                    max_redirects=int(config_manager.get_nested("fetch.max_redirects", 10))
            ) as service:
                result = await service.perform_request(url)

        if result.is_transport_error:
            logger.warning(f"Fetch failed for {url}: {result.error}")
            raise FetchFailedError(f"Failed to fetch {url}: {result.error}", url=url, cause=result.error)

        if not result.is_success:
            logger.warning(f"HTTP {result.status} {result.reason} for {url}")
            raise HttpStatusError(
                f"HTTP {result.status} {result.reason}".strip() + f" for {url}",
                url=url, status=result.status, reason=result.reason
            )

        return result

    # --- Steps 3 to 5: Parse, evaluate, aggregate ---

    def assemble(self, url: str, html: str) -> AuditReport:
        start = time.perf_counter()
        doc: HTMLDocument = self.builder.parse_doc(url, html or "")
        results = self.engine.evaluate(doc)
        score = self.engine.aggregate(results)

        logger.info(f"Audited {url}: score {score} ({time.perf_counter() - start:.3f}s)")
        return AuditReport(
            url=url,
            timestamp=datetime.now(timezone.utc),
            score=score,
            results=tuple(results)
        )

    async def run_audit(self, target_url: str) -> AuditReport:
        url = self.validate_url(target_url)
        logger.info(f"Starting audit of {url}")

        response = await self.fetch(url)
        report_url = UrlUtils.normalize_url(url, response.final_url or url)

        # Parsing and rules are CPU-bound; keep them off the event loop.
        return await asyncio.to_thread(self.assemble, report_url, response.content or "")

    def audit_markup(self, html: str, url: str = "about:blank") -> AuditReport:
        return self.assemble(url, html)
