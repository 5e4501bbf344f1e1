"""
Crawl coordinator that runs a fixed pool of workers from one seed address
and reports when all of them are done.
"""

import functools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from .fetcher import ContentFetcher
from .parser import extract_links
from .worker import CrawlWorker, ExtractFunction, FetchFunction
from ..storage.link_store import LinkStore
from ..utils.events import EventHook


@dataclass
class CrawlStats:
    """Statistics for one crawl."""
    start_time: float
    links_found: int = 0
    pages_fetched: int = 0
    empty_pages: int = 0
    worker_errors: int = 0
    end_time: Optional[float] = None

    @property
    def elapsed_time(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def links_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.links_found / elapsed_minutes if elapsed_minutes > 0 else 0


class _CrawlRun:
    """Workers started by one `start_search` call, their stats and single-fire finished flag."""

    def __init__(self, seed_url: str):
        self.seed_url = seed_url
        self.workers: List[CrawlWorker] = []
        self.stats = CrawlStats(start_time=time.time())
        self.finished = False
        self.superseded = False
        self.done = threading.Event()
        self.lock = threading.Lock()


class CrawlCoordinator:
    """
    Starts `task_count` workers against the same seed page and raises a
    single `finished` notification once every one of them has ended.

    Events:
        new_link_found(address, worker_id): re-emitted from the link store
        finished(): fired once per crawl
    """

    def __init__(self, task_count: int = 1, max_depth: Optional[int] = None,
                 fetch: Optional[FetchFunction] = None,
                 extract: ExtractFunction = extract_links):
        if isinstance(task_count, bool) or not isinstance(task_count, int) or task_count < 1:
            raise ValueError(f"task_count must be a positive integer, got {task_count!r}")
        if max_depth is not None and (not isinstance(max_depth, int) or max_depth < 0):
            raise ValueError(f"max_depth must be None or a non-negative integer, got {max_depth!r}")

        self.task_count = task_count
        self.max_depth = max_depth
        self.fetch = fetch if fetch is not None else ContentFetcher()
        self.extract = extract
        self.logger = logging.getLogger(__name__)

        self.storage = LinkStore()
        self.workers: List[CrawlWorker] = []

        self.new_link_found = EventHook('new_link_found')
        self.finished = EventHook('crawl_finished')

        self.stats = CrawlStats(start_time=time.time())
        self._stats_lock = threading.Lock()
        self._run: Optional[_CrawlRun] = None

        self.storage.new_link_found.connect(self._on_new_link)

    @property
    def is_finished(self) -> bool:
        return self._run is not None and self._run.finished

    @property
    def is_running(self) -> bool:
        return self._run is not None and not self._run.finished and bool(self.workers)

    def start_search(self, url: str):
        """
        Start a new crawl from `url`, stopping any crawl in progress.

        The seed page is fetched once here and handed to every worker.
        """
        if self._run is not None:
            self._run.superseded = True
        self.stop_search()
        self.storage.clear()

        run = _CrawlRun(url)
        with self._stats_lock:
            self.stats = run.stats

        self.logger.info(f"Starting crawl of {url} with {self.task_count} workers "
                         f"(max depth: {self.max_depth if self.max_depth is not None else 'unbounded'})")

        # Fetches count toward the run that made them
        fetch = functools.partial(self._fetch, run)
        content = fetch(url)

        # All workers are registered before any of them starts so an early
        # finisher cannot see an incomplete pool as done.
        for i in range(self.task_count):
            worker = CrawlWorker(self.storage, fetch, extract=self.extract, name=f"worker-{i}")
            worker.finished.connect(lambda w, run_id, run=run: self._on_worker_finished(run))
            run.workers.append(worker)

        self._run = run
        self.workers = list(run.workers)
        for worker in run.workers:
            worker.start(url, content, self.max_depth)

    def stop_search(self):
        """Signal every live worker to stop and forget them. Does not block."""
        if self.workers:
            self.logger.info(f"Stopping {len(self.workers)} workers")
        for worker in self.workers:
            worker.stop()
        self.workers.clear()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current crawl has finished. Returns False on timeout."""
        run = self._run
        if run is None:
            return True
        return run.done.wait(timeout)

    def _fetch(self, run: _CrawlRun, url: str) -> str:
        content = self.fetch(url)
        with self._stats_lock:
            run.stats.pages_fetched += 1
            if not content:
                run.stats.empty_pages += 1
        return content or ''

    def _on_new_link(self, link: str, worker_id: str):
        with self._stats_lock:
            self.stats.links_found += 1
        self.new_link_found.emit(link, worker_id)

    def _on_worker_finished(self, run: _CrawlRun):
        with run.lock:
            if run.finished or not all(w.is_finished for w in run.workers):
                return
            run.finished = True

        if run.superseded:
            run.done.set()
            self.logger.debug(f"Previous crawl of {run.seed_url} wound down")
            return

        errors = sum(1 for w in run.workers if w.error is not None)
        with self._stats_lock:
            run.stats.worker_errors = errors
            run.stats.end_time = time.time()

        self._log_final_stats(run.stats)
        self.finished.emit()
        run.done.set()

    def _log_final_stats(self, stats: CrawlStats):
        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Links found: {len(self.storage)}")
        self.logger.info(f"Pages fetched: {stats.pages_fetched}")
        self.logger.info(f"Empty pages: {stats.empty_pages}")
        self.logger.info(f"Worker errors: {stats.worker_errors}")
        self.logger.info(f"Total time: {stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Average rate: {stats.links_per_minute:.1f} links/min")

    def get_stats(self) -> Dict:
        """Get current crawl statistics."""
        with self._stats_lock:
            return {
                'links_found': self.stats.links_found,
                'links_stored': len(self.storage),
                'pages_fetched': self.stats.pages_fetched,
                'empty_pages': self.stats.empty_pages,
                'worker_errors': self.stats.worker_errors,
                'elapsed_time': self.stats.elapsed_time,
                'links_per_minute': self.stats.links_per_minute,
                'is_running': self.is_running
            }
