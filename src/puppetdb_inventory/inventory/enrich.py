"""
Fact enricher.

Merges PuppetDB facts onto an existing NodeSet as node attributes.

Facts are grouped by certname first. Facts for nodes that are not in the set,
for example deactivated nodes that still have facts stored, are dropped.

Mandatory facts are only enforced when building the query. A node whose
facts came back without, say, osfamily simply has no osfamily attribute.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from puppetdb_inventory.core.types import RemoteFact
from puppetdb_inventory.inventory.store import NodeSet

logger = logging.getLogger(__name__)


def group_facts(facts: Iterable[RemoteFact]) -> dict[str, dict[str, Any]]:
    """Return certname to fact name to value. Later facts win on repeats."""
    grouped: dict[str, dict[str, Any]] = defaultdict(dict)
    for fact in facts:
        grouped[fact.certname][fact.name] = fact.value
    return dict(grouped)


def enrich_nodes(base: NodeSet, facts: Iterable[RemoteFact]) -> NodeSet:
    """
    Merge facts into base in place and return base.

    Existing attributes are kept unless a fact with the same name replaces them.
    """
    for certname, values in group_facts(facts).items():
        node = base.get(certname)
        if node is None:
            logger.debug("Dropping %d facts for unknown node %s", len(values), certname)
            continue
        node.attributes.update(values)
    return base
