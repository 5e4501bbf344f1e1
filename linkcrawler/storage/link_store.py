"""
Shared store of visited links.

Every absolute address discovered during a crawl is registered here
exactly once. Workers running on different threads race to insert the
same address; only one of them wins and continues crawling from it.
"""

import logging
import threading
from typing import Dict, Iterator

from ..utils.events import EventHook


class LinkStore:
    """
    Thread-safe set of visited absolute addresses.

    Addresses are compared case-insensitively. Each key maps to the
    identifier of the worker thread that inserted it first.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._links: Dict[str, str] = {}
        self._lock = threading.Lock()

        # Fired with (address, worker_id) after every successful insertion
        self.new_link_found = EventHook('new_link_found')

    def try_add(self, link: str) -> bool:
        """
        Register a link if it is not yet known.

        Args:
            link: Absolute address of the link

        Returns:
            True if the link was inserted by this call, False if it was
            already present in the store
        """
        key = link.lower()
        worker_id = threading.current_thread().name

        with self._lock:
            if key in self._links:
                return False
            self._links[key] = worker_id

        self.logger.debug(f"New link stored by {worker_id}: {link}")
        self.new_link_found.emit(link, worker_id)
        return True

    def clear(self):
        """Remove every stored link. Must not be called while workers are running."""
        with self._lock:
            self._links.clear()

    def owner(self, link: str) -> str:
        """Return the identifier of the worker that first stored the link."""
        with self._lock:
            return self._links[link.lower()]

    @property
    def links(self) -> Dict[str, str]:
        """Snapshot of the stored links mapped to the worker that found them."""
        with self._lock:
            return dict(self._links)

    def __contains__(self, link: str) -> bool:
        with self._lock:
            return link.lower() in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __iter__(self) -> Iterator[str]:
        return iter(self.links)
