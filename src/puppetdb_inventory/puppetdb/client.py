"""
PuppetDB client.

This is a minimal PuppetDB http client approach with no third party deps.

Design
The inventory code only depends on the PuppetDBClient protocol, so tests can
hand in an in memory fake. HttpPuppetDBClient is the real adapter and talks to
the v4 query api through a narrow HttpClient that is also easy to mock.

Every transport problem surfaces as PuppetDBTransportError.
The fetcher maps it into the domain error taxonomy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any, Protocol
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from puppetdb_inventory.core.types import RemoteFact, RemoteNode
from puppetdb_inventory.puppetdb.query import Equals, Expression, and_, to_json

logger = logging.getLogger(__name__)

NODES_ENDPOINT = "/pdb/query/v4/nodes"
FACTS_ENDPOINT = "/pdb/query/v4/facts"

ACTIVE_NODES = Equals(("node", "active"), True)


class PuppetDBTransportError(Exception):
    """Raised when PuppetDB cannot be reached or returns an unusable payload."""


class PuppetDBClient(Protocol):
    """
    PuppetDB client interface.

    list_active_nodes returns active nodes, optionally narrowed by query.
    list_facts returns facts matching query.
    """

    def list_active_nodes(self, query: Expression | None = None) -> list[RemoteNode]:
        """List active nodes."""

    def list_facts(self, query: Expression) -> list[RemoteFact]:
        """List facts matching query."""


class HttpClient(Protocol):
    """Simple http client interface for testability."""

    def get_json(self, url: str, headers: dict[str, str]) -> Any:
        """Return parsed json for the given url."""


@dataclass
class UrllibHttpClient(HttpClient):
    """Default http client using urllib."""

    timeout_seconds: int = 10

    def get_json(self, url: str, headers: dict[str, str]) -> Any:
        req = Request(url, headers=headers, method="GET")
        with urlopen(req, timeout=self.timeout_seconds) as resp:
            body = resp.read().decode("utf-8")
        return json.loads(body)


def _node_from_dict(obj: dict[str, Any]) -> RemoteNode | None:
    certname = obj.get("certname")
    if not isinstance(certname, str) or not certname:
        return None
    deactivated = obj.get("deactivated")
    facts_timestamp = obj.get("facts_timestamp")
    return RemoteNode(
        certname=certname,
        deactivated=str(deactivated) if deactivated is not None else None,
        facts_timestamp=str(facts_timestamp) if facts_timestamp is not None else None,
    )


def _fact_from_dict(obj: dict[str, Any]) -> RemoteFact | None:
    certname = obj.get("certname")
    name = obj.get("name")
    if not isinstance(certname, str) or not certname:
        return None
    if not isinstance(name, str) or not name:
        return None
    return RemoteFact(certname=certname, name=name, value=obj.get("value"))


@dataclass(frozen=True)
class HttpPuppetDBClient(PuppetDBClient):
    """
    PuppetDB client for the v4 query api.

    base_url is the PuppetDB root, for example http://puppetdb:8080.
    token is optional. If provided, it is sent as an X-Authentication header.
    """

    base_url: str
    token: str | None = None
    http: HttpClient = field(default_factory=UrllibHttpClient)

    def list_active_nodes(self, query: Expression | None = None) -> list[RemoteNode]:
        expr: Expression = ACTIVE_NODES if query is None else and_(ACTIVE_NODES, query)
        items = self._query(NODES_ENDPOINT, expr)
        nodes = []
        for obj in items:
            node = _node_from_dict(obj)
            if node is None:
                logger.debug("Skipping node record without certname: %r", obj)
                continue
            nodes.append(node)
        return nodes

    def list_facts(self, query: Expression) -> list[RemoteFact]:
        items = self._query(FACTS_ENDPOINT, query)
        facts = []
        for obj in items:
            fact = _fact_from_dict(obj)
            if fact is None:
                logger.debug("Skipping fact record without certname or name: %r", obj)
                continue
            facts.append(fact)
        return facts

    def _url(self, endpoint: str, query: Expression) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}{endpoint}?{urlencode({'query': to_json(query)})}"

    def _query(self, endpoint: str, query: Expression) -> list[dict[str, Any]]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["X-Authentication"] = self.token

        url = self._url(endpoint, query)
        try:
            data = self.http.get_json(url, headers=headers)
        except (URLError, OSError, HTTPException, ValueError) as exc:
            raise PuppetDBTransportError(f"request to {endpoint} failed: {exc}") from exc

        if not isinstance(data, list):
            raise PuppetDBTransportError(
                f"unexpected payload from {endpoint}: expected a list, got {type(data).__name__}"
            )
        return [obj for obj in data if isinstance(obj, dict)]
