"""
Inventory fetcher.

Purpose
One full, uncached read of PuppetDB:
- List active nodes
- Convert them into a NodeSet
- Query the mandatory and custom facts
- Merge the facts into the NodeSet

The fetcher holds no state between calls. Caching lives in the plugin.

Failure semantics
All or nothing. Zero nodes or zero facts is treated as an error, and so is
any transport failure. Nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from puppetdb_inventory.core.errors import EmptyFactsError, EmptyNodesError, RemoteServiceError
from puppetdb_inventory.inventory.convert import convert_nodes
from puppetdb_inventory.inventory.enrich import enrich_nodes
from puppetdb_inventory.inventory.store import NodeSet
from puppetdb_inventory.puppetdb.client import PuppetDBClient, PuppetDBTransportError
from puppetdb_inventory.puppetdb.query import build_facts_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryFetcher:
    """
    Fetch and merge nodes and facts from PuppetDB.

    client
    PuppetDB client.

    username
    Login applied to every node.

    custom_fact_names
    Extra fact names to request on top of the mandatory ones.
    """

    client: PuppetDBClient
    username: str
    custom_fact_names: Iterable[str] | None = None

    def fetch(self) -> NodeSet:
        try:
            logger.info("Requesting nodes from PuppetDB")
            active_nodes = self.client.list_active_nodes(None)
            if not active_nodes:
                raise EmptyNodesError("Received ZERO nodes from PuppetDB")
            logger.info("Received %d nodes from PuppetDB", len(active_nodes))

            node_set = convert_nodes(active_nodes, self.username)

            query = build_facts_query(self.custom_fact_names)

            logger.info("Requesting facts from PuppetDB")
            facts = self.client.list_facts(query)
            if not facts:
                raise EmptyFactsError("Received ZERO facts from PuppetDB")
            logger.info("Received %d facts from PuppetDB", len(facts))
        except (PuppetDBTransportError, OSError) as exc:
            raise RemoteServiceError(f"Error requesting PuppetDB: {exc}") from exc

        return enrich_nodes(node_set, facts)
