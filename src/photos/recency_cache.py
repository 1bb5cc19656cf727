"""
Recency cache for provider photos.

Remembers which provider photo ids were recently served so that repeated
listing calls do not immediately show the same photos again. It only
reduces repeats: when too few unseen photos are left, the cache is cleared
and the raw batch is used.

One instance is created at service start and injected into the search
adapter. Note: contents are lost on restart.
"""

import random
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from config.constants import DEFAULT_RECENCY_CONFIG
from core.logging import get_logger
from core.utils import shuffled

logger = get_logger(__name__)

T = TypeVar("T")


class RecencyCache:
    """
    Bounded, insertion-ordered set of recently served ids.

    When more than ``capacity`` ids are held, only the ``trim_to`` most
    recently inserted ones are kept. Every read-check-insert sequence runs
    under a single lock.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_RECENCY_CONFIG.SOFT_CAPACITY,
        trim_to: int = DEFAULT_RECENCY_CONFIG.TRIM_TARGET,
    ):
        if trim_to > capacity:
            raise ValueError(f"trim_to ({trim_to}) must not exceed capacity ({capacity})")
        self._ids: "OrderedDict[int, None]" = OrderedDict()
        self._lock = Lock()
        self.capacity = capacity
        self.trim_to = trim_to
        self._clears = 0
        self._trims = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __contains__(self, item_id: int) -> bool:
        with self._lock:
            return item_id in self._ids

    def add(self, ids: Iterable[int]) -> None:
        """Record ids as served (most recent last)."""
        with self._lock:
            self._insert(ids)

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()
            self._clears += 1

    def take_fresh(
        self,
        items: Sequence[T],
        limit: int,
        key: Callable[[T], int],
        min_fresh: int = DEFAULT_RECENCY_CONFIG.MIN_FRESH,
        rng: Optional[random.Random] = None,
    ) -> List[T]:
        """
        Pick up to ``limit`` items that were not served recently.

        Items whose id is cached are dropped. If fewer than ``min_fresh``
        remain, the cache is cleared and the unfiltered batch is used. The
        survivors are shuffled, capped at ``limit`` and recorded.

        Args:
            items: Candidate batch from the provider.
            limit: Maximum number of items to return.
            key: Extracts the id of an item.
            min_fresh: Low-supply threshold that triggers a clear.
            rng: Random source for the shuffle.

        Returns:
            The chosen items, in shuffled order.
        """
        with self._lock:
            fresh = [item for item in items if key(item) not in self._ids]
            if len(fresh) < min_fresh:
                logger.info(
                    "Recency cache exhausted supply, clearing",
                    fresh=len(fresh),
                    batch=len(items),
                    cached=len(self._ids),
                )
                self._ids.clear()
                self._clears += 1
                fresh = list(items)

            chosen = shuffled(fresh, rng)[:max(limit, 0)]
            self._insert(key(item) for item in chosen)
            return chosen

    def _insert(self, ids: Iterable[int]) -> None:
        # Caller holds the lock
        for item_id in ids:
            self._ids[item_id] = None
            self._ids.move_to_end(item_id)
        if len(self._ids) > self.capacity:
            while len(self._ids) > self.trim_to:
                self._ids.popitem(last=False)
            self._trims += 1

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._ids),
                "capacity": self.capacity,
                "trim_to": self.trim_to,
                "trims": self._trims,
                "clears": self._clears,
            }
