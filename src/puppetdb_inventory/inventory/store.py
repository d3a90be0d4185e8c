"""
Node set.

The fetcher builds it, the enricher fills in attributes, and the cache
publishes it. A published node set is shared between callers, so readers
must not mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from puppetdb_inventory.core.types import NodeEntry


@dataclass
class NodeSet:
    """Nodes keyed by certname. A later add with the same name replaces the entry."""

    _nodes: Dict[str, NodeEntry] = field(default_factory=dict)

    def add(self, node: NodeEntry) -> None:
        self._nodes[node.name] = node

    def get(self, name: str) -> Optional[NodeEntry]:
        return self._nodes.get(name)

    def all(self) -> List[NodeEntry]:
        return list(self._nodes.values())

    def names(self) -> List[str]:
        """Sorted certnames, for stable output."""
        return sorted(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeEntry]:
        return iter(self._nodes.values())
