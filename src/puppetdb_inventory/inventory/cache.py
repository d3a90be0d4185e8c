"""
Node set cache.

A single slot cache owned by one plugin instance.

There is no ttl, no eviction and no background refresh. The slot is filled by
the first successful load and kept until clear is called. Failed loads leave
the slot empty, so the next caller tries again.

get_or_load holds a lock across check, load and store. Concurrent first callers
therefore trigger exactly one load and all receive its result.
If you add ttl based refresh later, keep the refresh inside that same lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from puppetdb_inventory.inventory.store import NodeSet

logger = logging.getLogger(__name__)

CACHE_KEY = "nodes"


@dataclass
class NodeSetCache:
    """
    In memory single slot cache for a NodeSet.

    The key is fixed. Log lines name the slot by it.
    """

    key: str = CACHE_KEY
    _value: Optional[NodeSet] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self) -> Optional[NodeSet]:
        """Return the cached node set, or None when the slot is empty."""
        return self._value

    def contains(self) -> bool:
        return self._value is not None

    def get_or_load(self, loader: Callable[[], NodeSet]) -> NodeSet:
        """
        Return the cached node set, loading it on a miss.

        Exceptions from loader propagate and leave the slot empty.
        """
        with self._lock:
            if self._value is not None:
                logger.info("Using cached puppet nodes from slot %s", self.key)
                return self._value

            logger.info("Cache slot %s is empty", self.key)
            value = loader()
            self._value = value
            logger.info("Cache slot %s refreshed", self.key)
            return value

    def reload(self, loader: Callable[[], NodeSet]) -> NodeSet:
        """
        Load a new node set and replace the cached one.

        The previous value stays in place when loader raises.
        """
        with self._lock:
            value = loader()
            self._value = value
            logger.info("Cache slot %s refreshed", self.key)
            return value

    def clear(self) -> None:
        with self._lock:
            self._value = None
