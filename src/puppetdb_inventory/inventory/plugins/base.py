"""
Inventory plugin interfaces.

Goal
Provide pluggable inventory sources so orchestration tooling is source agnostic.

Inventory is normalized into NodeSet and NodeEntry objects.

We keep the interface narrow so it is easy to mock in tests.
"""

from __future__ import annotations

from typing import Protocol

from puppetdb_inventory.inventory.store import NodeSet


class InventoryPlugin(Protocol):
    """
    Inventory plugin interface.

    load returns a fully populated NodeSet.
    """

    def load(self) -> NodeSet:
        """Load inventory into a NodeSet."""
