"""
Web crawler core components.
"""

from .fetcher import WebFetcher, FetchResult, ContentFetcher
from .parser import extract_links
from .urls import resolve_url, normalize_url, coerce_seed_url, InvalidURLError
from .worker import CrawlWorker, CrawlCancelled
from .coordinator import CrawlCoordinator, CrawlStats

__all__ = [
    'WebFetcher', 'FetchResult', 'ContentFetcher',
    'extract_links',
    'resolve_url', 'normalize_url', 'coerce_seed_url', 'InvalidURLError',
    'CrawlWorker', 'CrawlCancelled',
    'CrawlCoordinator', 'CrawlStats'
]
