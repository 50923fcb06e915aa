# src/crawler/utils/url_utils.py
import logging
from urllib.parse import urlparse, urljoin, urlunparse

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def normalize_url(base_url: str, url: str) -> str:
        """
        Creates a clean, absolute URL from a base URL and a potentially relative URL.
        Scheme and host are lower-cased, an empty path becomes '/', fragments are dropped.
        """
        if isinstance(base_url, bytes):
            base_url = base_url.decode('utf-8')
        if isinstance(url, bytes):
            url = url.decode('utf-8')

        absolute_url = urljoin(base_url, url)
        parsed_url = urlparse(absolute_url)

        parsed_url = parsed_url._replace(scheme=parsed_url.scheme.lower(), netloc=parsed_url.netloc.lower())

        # Ensure there is a path (e.g., '/' for the homepage)
        if not parsed_url.path:
            parsed_url = parsed_url._replace(path='/')

        # Remove fragments, as they are client-side only
        parsed_url = parsed_url._replace(fragment='')

        return urlunparse(parsed_url)

    @staticmethod
    def is_supported_scheme(url: str) -> bool:
        """Checks if a URL uses a scheme the fetcher can retrieve (http or https)."""
        try:
            return urlparse(url).scheme.lower() in SUPPORTED_SCHEMES
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            return False
