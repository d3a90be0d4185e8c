from __future__ import annotations

from typing import Any

from puppetdb_inventory.core.types import NodeEntry

RESERVED_KEYS = ("nodename", "hostname", "username")


def _normalize(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    return obj


def node_to_resource(node: NodeEntry) -> dict[str, Any]:
    """
    Convert a NodeEntry into a resource dict.

    Facts are copied in as attributes. A fact named like a reserved key
    does not override it.
    """
    resource: dict[str, Any] = {
        str(k): _normalize(v) for k, v in node.attributes.items() if k not in RESERVED_KEYS
    }
    resource["nodename"] = node.name
    resource["hostname"] = node.name
    resource["username"] = node.username
    return resource


def node_set_to_resources(node_set: Any) -> dict[str, dict[str, Any]]:
    """
    Resource json transport shape, keyed by node name.

    We only rely on node_set.all returning NodeEntry dataclasses.
    """
    return {node.name: node_to_resource(node) for node in node_set.all()}
