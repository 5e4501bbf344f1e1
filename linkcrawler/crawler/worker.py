"""
Crawl worker.

A worker runs one depth-first traversal on its own thread, starting from
a seed page. Every link it discovers is offered to the shared link store;
only links the worker managed to insert first are followed further.
"""

import itertools
import threading
from typing import Callable, Iterator, List, Optional, Tuple

from .parser import extract_links
from .urls import resolve_url, InvalidURLError
from ..storage.link_store import LinkStore
from ..utils.events import EventHook
from ..utils.logger import get_crawler_logger


FetchFunction = Callable[[str], str]
ExtractFunction = Callable[[str], List[str]]

_worker_counter = itertools.count()


class CrawlCancelled(Exception):
    """Raised inside a traversal when its run has been stopped."""


class CrawlWorker:
    """
    One concurrently running traversal unit with its own cancellation control.

    Each call to `start` begins a new run on a fresh thread and cancels the
    previous one. The `finished` event fires exactly once per run, whether
    the traversal completed, was cancelled or failed.
    """

    def __init__(self, storage: LinkStore, fetch: FetchFunction,
                 extract: ExtractFunction = extract_links,
                 name: Optional[str] = None):
        self.storage = storage
        self.fetch = fetch
        self.extract = extract

        self.name = name or f"worker-{next(_worker_counter)}"
        self.logger = get_crawler_logger(__name__, worker_id=self.name)

        # Fired with the worker and the id of the run that ended
        self.finished = EventHook('worker_finished')

        self.error: Optional[BaseException] = None

        self._lock = threading.Lock()
        self._cancel_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._run_id = 0
        self._is_finished = False

    @property
    def is_finished(self) -> bool:
        """True once the current run has ended. Never reverts within a run."""
        return self._is_finished

    def start(self, address: str, page_content: Optional[str] = None,
              depth_budget: Optional[int] = None):
        """
        Start collecting links asynchronously.

        Args:
            address: Address of the page to start from
            page_content: Already fetched content of that page. When given
                the page is not fetched again, so workers sharing a seed
                only download it once.
            depth_budget: Remaining levels to descend. None means unbounded,
                0 means only the links of the start page are collected.
        """
        with self._lock:
            self._cancel_locked()
            cancel_event = threading.Event()
            self._cancel_event = cancel_event
            self._run_id += 1
            run_id = self._run_id
            self._is_finished = False
            self.error = None

            self._thread = threading.Thread(
                target=self._run,
                args=(run_id, address, page_content, depth_budget, cancel_event),
                name=self.name,
                daemon=True
            )
            self._thread.start()

        self.logger.debug(f"Started run {run_id} from {address} (depth budget: {depth_budget})")

    def stop(self):
        """Signal the current run to stop. Does not wait for it to unwind."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self):
        if self._cancel_event is not None:
            self._cancel_event.set()
            self._cancel_event = None

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current run's thread. Returns True if it has ended."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run(self, run_id: int, address: str, page_content: Optional[str],
             depth_budget: Optional[int], cancel_event: threading.Event):
        try:
            self.crawl(address, page_content, depth_budget, cancel_event)
        except CrawlCancelled:
            self.logger.debug(f"Run {run_id} cancelled")
        except Exception as e:
            self.error = e
            self.logger.error(f"Crawl from {address} failed: {e}", exc_info=True)
        finally:
            self._on_finished(run_id)

    def _on_finished(self, run_id: int):
        with self._lock:
            is_current = run_id == self._run_id
            if is_current:
                self._is_finished = True

        self.logger.debug(f"Run {run_id} finished" + ("" if is_current else " after being replaced"))
        self.finished.emit(self, run_id)

    def crawl(self, address: str, page_content: Optional[str],
              depth_budget: Optional[int], cancel_event: threading.Event):
        """
        Depth-first traversal from `address`.

        Links are followed in document order; a link is descended into
        immediately after it has been stored, before the next link on the
        same page is looked at.

        Raises:
            CrawlCancelled: when `cancel_event` is set
        """
        if depth_budget is not None and depth_budget < 0:
            return

        # Pages are visited with an explicit stack of link iterators, which
        # keeps recursive order without being bound by the interpreter's
        # recursion limit on deep sites.
        stack = [self._new_links(address, page_content, depth_budget, cancel_event)]
        while stack:
            try:
                link, next_budget = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue

            if next_budget is not None and next_budget < 0:
                continue
            stack.append(self._new_links(link, None, next_budget, cancel_event))

    def _new_links(self, address: str, page_content: Optional[str],
                   depth_budget: Optional[int],
                   cancel_event: threading.Event) -> Iterator[Tuple[str, Optional[int]]]:
        """
        Process one page and yield each link this worker stored first,
        together with the depth budget for descending into it.
        """
        self._check_cancelled(cancel_event)

        if page_content is None:
            page_content = self.fetch(address) or ''

        next_budget = depth_budget - 1 if depth_budget is not None else None

        for raw_link in self.extract(page_content):
            try:
                absolute_address = resolve_url(address, raw_link)
            except InvalidURLError as e:
                self.logger.debug(f"Skipping link on {address}: {e}")
                continue

            self._check_cancelled(cancel_event)
            if not self.storage.try_add(absolute_address):
                continue

            self._check_cancelled(cancel_event)
            yield absolute_address, next_budget

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event):
        if cancel_event.is_set():
            raise CrawlCancelled()

    def __repr__(self) -> str:
        return f"CrawlWorker(name={self.name!r}, finished={self._is_finished})"
