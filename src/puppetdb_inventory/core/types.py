"""
Core types.

This file defines the shared data structures used across the inventory source.

Important design choice
Remote records and internal records are separate types.

RemoteNode and RemoteFact mirror what PuppetDB returns and are read only.
NodeEntry is the normalized view handed to orchestration tooling.
That keeps PuppetDB schemas from leaking into consumers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

MANDATORY_FACT_NAMES: frozenset[str] = frozenset(
    {"hardwaremodel", "operatingsystem", "operatingsystemrelease", "osfamily"}
)


@dataclass(frozen=True)
class RemoteNode:
    """
    A node as listed by PuppetDB.

    certname is the node identity.
    deactivated and facts_timestamp are carried for reporting only.
    """

    certname: str
    deactivated: Optional[str] = None
    facts_timestamp: Optional[str] = None


@dataclass(frozen=True)
class RemoteFact:
    """
    A single fact as listed by PuppetDB.

    value may be any json value. Structured facts arrive as dicts or lists.
    """

    certname: str
    name: str
    value: Any


@dataclass
class NodeEntry:
    """
    A node in the normalized node set.

    name is the PuppetDB certname.
    username is the login used to reach the node, the same for every node in a run.
    attributes starts empty and is populated from facts.
    """

    name: str
    username: str
    attributes: Dict[str, Any] = field(default_factory=dict)
