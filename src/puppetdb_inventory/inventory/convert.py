"""
Node converter.

Turns PuppetDB node records into NodeEntry objects with no attributes yet.
Attributes are filled in later by the fact enricher.
"""

from __future__ import annotations

from collections.abc import Iterable

from puppetdb_inventory.core.types import NodeEntry, RemoteNode
from puppetdb_inventory.inventory.store import NodeSet


def convert_nodes(nodes: Iterable[RemoteNode], username: str) -> NodeSet:
    """
    Build a NodeSet with one entry per remote node.

    Every entry gets the same username.
    Duplicate certnames collapse to the last one seen.
    """
    node_set = NodeSet()
    for node in nodes:
        node_set.add(NodeEntry(name=node.certname, username=username))
    return node_set
