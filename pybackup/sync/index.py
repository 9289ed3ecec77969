"""In-memory index of objects that already exist in the remote store."""

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from typing import Optional

from .paths import PathKey, normalize_key

logger = logging.getLogger(__name__)


class RemoteIndex:
    """Set of path keys known to exist remotely.

    The index only grows during a run: it is filled from the remote listing
    and then extended with every key the engine decides to upload. Keys are
    never removed.
    """

    def __init__(self, keys: Optional[Iterable[PathKey]] = None):
        self._keys: set[PathKey] = set(keys) if keys is not None else set()
        self._lock = threading.Lock()

    def contains(self, key: PathKey) -> bool:
        """Return True if key is already known."""
        return key in self._keys

    def insert(self, key: PathKey) -> bool:
        """Add key to the index.

        Returns:
            True if the key was newly inserted, False if it was already present
        """
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def claim(self, key: PathKey) -> bool:
        """Atomically check for and insert key.

        Safe to call from several threads; for any key exactly one caller
        gets True.
        """
        with self._lock:
            return self.insert(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[PathKey]:
        return iter(self._keys)


class RemoteIndexBuilder:
    """Builds a :class:`RemoteIndex` by exhausting a store's listing.

    There is no page limit: the builder keeps requesting pages until the
    store reports that no more are available.
    """

    def __init__(self) -> None:
        self.pages = 0
        """Number of list requests made by the last build"""

    def build(self, store) -> RemoteIndex:
        """List every object in the store into a new index.

        Args:
            store: A :class:`~pybackup.store.RemoteStore`

        Returns:
            Fully populated RemoteIndex

        Raises:
            ListingFailedError: If any page request fails. No partial index
                is returned in that case.
        """
        start = time.time()
        index = RemoteIndex()
        cursor: Optional[str] = None
        self.pages = 0

        while True:
            page = store.list_page(cursor)
            self.pages += 1
            for key in page.keys:
                index.insert(normalize_key(key))
            logger.debug(
                "Listing page %d: %d keys (index size %d)",
                self.pages,
                len(page.keys),
                len(index),
            )

            if not page.has_more:
                break
            cursor = page.next_cursor

        logger.debug(
            "Remote listing took %.2fs over %d page(s)", time.time() - start, self.pages
        )
        return index
