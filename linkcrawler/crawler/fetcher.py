"""
Web page fetcher.

`WebFetcher` is the asyncio/aiohttp client. `ContentFetcher` adapts it to
the blocking ``fetch(url) -> str`` contract the crawl workers use: every
worker thread runs its own short-lived event loop for each request.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout, ClientError


DEFAULT_USER_AGENT = "LinkCrawler/1.0"
DEFAULT_MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10MB


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    encoding: Optional[str] = None


class WebFetcher:
    """
    Fetches web pages over a single aiohttp session.

    The session is bound to the event loop it was started on, so an
    instance must only be used from that loop.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: int = 30,
                 max_content_size: int = DEFAULT_MAX_CONTENT_SIZE):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}

            self.session = aiohttp.ClientSession(timeout=timeout, headers=headers)
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Never raises for network or protocol problems; those are reported
        through `FetchResult.error`.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult object containing the response data or error information
        """
        start_time = time.time()

        try:
            self.stats['total_requests'] += 1

            async with self.session.get(url) as response:
                fetch_time = time.time() - start_time

                headers = dict(response.headers)
                content_type = response.headers.get('content-type', '').lower()

                if response.status >= 400:
                    self.stats['failed_requests'] += 1
                    self.logger.debug(f"HTTP {response.status} for {url}")
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        headers=headers,
                        content_type=content_type,
                        error=f"HTTP {response.status}",
                        fetch_time=fetch_time
                    )

                # Only download text content
                if not self._is_text_content(content_type):
                    self.stats['failed_requests'] += 1
                    self.logger.debug(f"Skipping non-text content: {url} ({content_type})")
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        headers=headers,
                        content_type=content_type,
                        error="Non-text content type",
                        fetch_time=fetch_time
                    )

                content = await self._read_content_safely(response)

                if content:
                    self.stats['total_bytes_downloaded'] += len(content)
                    self.stats['successful_requests'] += 1
                else:
                    self.stats['failed_requests'] += 1

                self.logger.debug(f"Fetched {url}: {response.status} ({len(content) if content else 0} bytes)")
                return FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    headers=headers,
                    content_type=content_type,
                    encoding=response.charset,
                    fetch_time=fetch_time
                )

        except asyncio.TimeoutError:
            error_msg = "Request timeout"
            self.logger.warning(f"Timeout fetching {url}")

        except ClientError as e:
            error_msg = f"Client error: {str(e)}"
            self.logger.warning(f"Client error fetching {url}: {e}")

        except ValueError as e:
            # aiohttp rejects unsupported schemes and malformed addresses this way
            error_msg = f"Invalid URL: {str(e)}"
            self.logger.debug(f"Cannot fetch {url}: {e}")

        self.stats['failed_requests'] += 1
        return FetchResult(
            url=url,
            status_code=0,
            error=error_msg,
            fetch_time=time.time() - start_time
        )

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based."""
        if not content_type:
            return True

        text_types = [
            'text/html',
            'text/plain',
            'text/xml',
            'application/xml',
            'application/xhtml+xml'
        ]

        return any(text_type in content_type for text_type in text_types)

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content with a size limit.

        Returns:
            Content string or None if too large
        """
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_size:
            self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
            return None

        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_content_size:
                self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                return None

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            for fallback_encoding in ['utf-8', 'cp1252']:
                try:
                    return content_bytes.decode(fallback_encoding)
                except UnicodeDecodeError:
                    continue

            return content_bytes.decode('utf-8', errors='ignore')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()


class ContentFetcher:
    """
    Blocking fetch collaborator for crawl workers.

    Calling an instance returns the text content of a page, or an empty
    string when the page cannot be fetched for any reason. It never
    raises, so a failed page simply yields no links.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: int = 30,
                 max_content_size: int = DEFAULT_MAX_CONTENT_SIZE):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_content_size = max_content_size
        self.logger = logging.getLogger(__name__)

        self._stats_lock = threading.Lock()
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    def __call__(self, url: str) -> str:
        return self.get_content(url)

    def get_content(self, url: str) -> str:
        """Fetch the page at `url` and return its text, or '' on failure."""
        try:
            result, fetch_stats = asyncio.run(self._fetch(url))
        except Exception as e:
            self.logger.error(f"Unexpected error fetching {url}: {e}")
            with self._stats_lock:
                self.stats['total_requests'] += 1
                self.stats['failed_requests'] += 1
            return ''

        with self._stats_lock:
            for key, value in fetch_stats.items():
                self.stats[key] += value

        if result.error:
            self.logger.debug(f"No content for {url}: {result.error}")
        return result.content or ''

    async def _fetch(self, url: str):
        async with WebFetcher(
            user_agent=self.user_agent,
            request_timeout=self.request_timeout,
            max_content_size=self.max_content_size
        ) as fetcher:
            result = await fetcher.fetch(url)
            return result, fetcher.get_stats()

    def get_stats(self) -> Dict[str, int]:
        """Get aggregated statistics over every fetch made so far."""
        with self._stats_lock:
            return self.stats.copy()
