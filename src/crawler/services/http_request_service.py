# src/crawler/services/http_request_service.py
import asyncio
import logging
import time
from typing import Optional

import aiohttp

from crawler.model import FetchResult
from crawler.services.generate_default_user_agent_service import generate_default_user_agent

logger = logging.getLogger(__name__)


class HttpRequestService:
    """
    Service for retrieving one page over HTTP(S).
    Manages the aiohttp session, redirect following and error handling.
    """

    def __init__(self, timeout: float = 15.0, user_agent: Optional[str] = None, max_redirects: int = 10):
        self.timeout = float(timeout)
        self.user_agent = user_agent or generate_default_user_agent()
        self.max_redirects = int(max_redirects)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
            default_headers = {
                'Accept': 'text/html,application/xhtml+xml;q=0.9,*/*;q=0.8',
                'Accept-Encoding': 'gzip, deflate',
                'User-Agent': self.user_agent
            }
            self.session = aiohttp.ClientSession(
                timeout=timeout_obj, headers=default_headers
            )
            logger.debug("HttpRequestService: Session initialized.")

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug("HttpRequestService: Session closed.")

    async def perform_request(self, url: str) -> FetchResult:
        """
        Fetches `url` with GET, following redirects.

        Transport-level failures are returned as a FetchResult with status -1
        and the error message; HTTP error statuses are returned as-is so the
        caller can classify them.
        """
        start_time = time.perf_counter()

        if not self.session or self.session.closed:
            await self.initialize()

        try:
            result = await self._execute_get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            message = str(e) or type(e).__name__
            logger.debug("Transport error for %s: %s", url, message)
            result = FetchResult(url=url, status=-1, error=message)

        return result.model_copy(update={"elapsed_time": round(time.perf_counter() - start_time, 4)})

    async def _execute_get(self, url: str) -> FetchResult:
        async with self.session.get(
                url,
                allow_redirects=True,
                max_redirects=self.max_redirects
        ) as response:
            status = response.status
            content = await self._read_content(response) if 200 <= status < 300 else None

            result = FetchResult(
                url=url,
                final_url=str(response.url),
                status=status,
                reason=response.reason or "",
                headers=response.headers,
                content=content,
            )

        if result.is_success and result.content_type and "html" not in result.content_type:
            logger.warning("Content-Type for %s is '%s'; auditing it as HTML anyway", url, result.content_type)
        return result

    async def _read_content(self, response) -> str:
        """Helper to read response body text, falling back to lenient UTF-8."""
        try:
            return await response.text()
        except (UnicodeDecodeError, LookupError):
            content_bytes = await response.read()
            return content_bytes.decode('utf-8', errors='replace')
