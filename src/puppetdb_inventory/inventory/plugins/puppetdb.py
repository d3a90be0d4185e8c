"""
PuppetDB inventory plugin.

This is the entry point orchestration tooling calls to obtain inventory.

get_nodes serves the cached NodeSet when there is one. On a miss it runs a
full InventoryFetcher pass, stores the result and returns it. Errors from the
fetcher propagate unchanged and nothing is cached for a failed pass.

The cache lives for as long as the plugin does. close drops it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from puppetdb_inventory.inventory.cache import NodeSetCache
from puppetdb_inventory.inventory.fetcher import InventoryFetcher
from puppetdb_inventory.inventory.plugins.base import InventoryPlugin
from puppetdb_inventory.inventory.store import NodeSet
from puppetdb_inventory.puppetdb.client import PuppetDBClient


class PuppetDBInventoryPlugin(InventoryPlugin):
    """
    Cached PuppetDB inventory source.

    client
    PuppetDB client used for every fetch.

    username
    Login applied to every node.

    custom_fact_names
    Optional extra fact names, requested on top of the mandatory facts.

    cache
    Optional NodeSetCache. A fresh one is created when omitted.
    """

    def __init__(
        self,
        client: PuppetDBClient,
        username: str,
        custom_fact_names: Iterable[str] | None = None,
        cache: NodeSetCache | None = None,
    ) -> None:
        fact_names = frozenset(custom_fact_names) if custom_fact_names is not None else None
        self._fetcher = InventoryFetcher(
            client=client,
            username=username,
            custom_fact_names=fact_names,
        )
        self._cache = cache if cache is not None else NodeSetCache()

    def get_nodes(self) -> NodeSet:
        """Return the current node set, fetching from PuppetDB on a cache miss."""
        return self._cache.get_or_load(self._fetcher.fetch)

    def refresh(self) -> NodeSet:
        """Fetch from PuppetDB unconditionally and replace the cached node set."""
        return self._cache.reload(self._fetcher.fetch)

    def load(self) -> NodeSet:
        return self.get_nodes()

    def close(self) -> None:
        self._cache.clear()

    def __enter__(self) -> PuppetDBInventoryPlugin:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
