from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from http.client import IncompleteRead

import pytest

from fakes import FakePuppetDBClient, make_client
from puppetdb_inventory.core.errors import (
    EmptyFactsError,
    EmptyNodesError,
    QueryBuildError,
    RemoteServiceError,
)
from puppetdb_inventory.core.types import RemoteFact, RemoteNode
from puppetdb_inventory.inventory.cache import NodeSetCache
from puppetdb_inventory.inventory.plugins.puppetdb import PuppetDBInventoryPlugin
from puppetdb_inventory.puppetdb.client import HttpPuppetDBClient, PuppetDBTransportError


def test_second_call_is_served_from_cache():
    client = make_client()
    plugin = PuppetDBInventoryPlugin(client=client, username="svc")

    first = plugin.get_nodes()
    second = plugin.get_nodes()

    assert first is second
    assert len(client.node_queries) == 1
    assert len(client.fact_queries) == 1


def test_load_delegates_to_cached_get_nodes():
    client = make_client()
    plugin = PuppetDBInventoryPlugin(client=client, username="svc")

    assert plugin.load() is plugin.get_nodes()
    assert len(client.node_queries) == 1


def test_failure_is_not_cached_and_next_call_retries():
    client = make_client()
    client.nodes_error = PuppetDBTransportError("down")
    cache = NodeSetCache()
    plugin = PuppetDBInventoryPlugin(client=client, username="svc", cache=cache)

    with pytest.raises(RemoteServiceError):
        plugin.get_nodes()
    assert cache.get() is None

    client.nodes_error = None
    node_set = plugin.get_nodes()

    assert node_set.names() == ["a", "b"]
    assert len(client.node_queries) == 2
    assert cache.get() is node_set


def test_empty_nodes_error_propagates_unchanged():
    client = FakePuppetDBClient(nodes=[], facts=[])
    plugin = PuppetDBInventoryPlugin(client=client, username="svc")

    with pytest.raises(EmptyNodesError):
        plugin.get_nodes()


def test_custom_facts_are_passed_to_query():
    client = make_client()
    plugin = PuppetDBInventoryPlugin(client=client, username="svc", custom_fact_names=["kernel"])

    plugin.get_nodes()

    (query,) = client.fact_queries
    assert "kernel" in {predicate.value for predicate in query.predicates()}


def test_injected_cache_is_shared_and_close_clears_it():
    cache = NodeSetCache()
    client = make_client()

    with PuppetDBInventoryPlugin(client=client, username="svc", cache=cache) as plugin:
        plugin.get_nodes()
        assert cache.contains()

    assert not cache.contains()


def test_refresh_replaces_cached_value_only_on_success():
    client = make_client()
    plugin = PuppetDBInventoryPlugin(client=client, username="svc")
    first = plugin.get_nodes()

    client.nodes = [RemoteNode(certname="c")]
    client.facts = [RemoteFact(certname="c", name="osfamily", value="Debian")]
    second = plugin.refresh()

    assert second is not first
    assert second.names() == ["c"]
    assert plugin.get_nodes() is second

    client.facts_error = PuppetDBTransportError("down")
    with pytest.raises(RemoteServiceError):
        plugin.refresh()
    assert plugin.get_nodes() is second


@dataclass
class SlowClient(FakePuppetDBClient):
    release: threading.Event = field(default_factory=threading.Event)

    def list_active_nodes(self, query=None):
        self.release.wait(timeout=5)
        return super().list_active_nodes(query)


def test_concurrent_first_calls_fetch_once():
    base = make_client()
    client = SlowClient(nodes=base.nodes, facts=base.facts)
    plugin = PuppetDBInventoryPlugin(client=client, username="svc")

    results = []
    results_lock = threading.Lock()

    def worker():
        node_set = plugin.get_nodes()
        with results_lock:
            results.append(node_set)

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()

    time.sleep(0.05)
    client.release.set()

    for t in threads:
        t.join(timeout=5)

    assert len(results) == 5
    assert len(client.node_queries) == 1
    assert all(node_set is results[0] for node_set in results)


def break_transport(client):
    client.nodes_error = PuppetDBTransportError("down")


def empty_nodes(client):
    client.nodes = []


def empty_facts(client):
    client.facts = []


@pytest.mark.parametrize(
    "break_client, custom_fact_names, expected",
    [
        (break_transport, None, RemoteServiceError),
        (empty_nodes, None, EmptyNodesError),
        (empty_facts, None, EmptyFactsError),
        (None, {""}, QueryBuildError),
    ],
)
def test_errors_propagate_and_are_never_cached(break_client, custom_fact_names, expected):
    client = make_client()
    if break_client is not None:
        break_client(client)
    cache = NodeSetCache()
    plugin = PuppetDBInventoryPlugin(
        client=client,
        username="svc",
        custom_fact_names=custom_fact_names,
        cache=cache,
    )

    with pytest.raises(expected):
        plugin.get_nodes()
    assert cache.get() is None

    with pytest.raises(expected):
        plugin.get_nodes()
    assert cache.get() is None
    assert len(client.node_queries) == 2


@dataclass
class TruncatingHttpClient:
    def get_json(self, url, headers):
        raise IncompleteRead(b'[{"certname": "we')


def test_truncated_response_surfaces_as_remote_service_error():
    cache = NodeSetCache()
    client = HttpPuppetDBClient(base_url="http://puppetdb:8080", http=TruncatingHttpClient())
    plugin = PuppetDBInventoryPlugin(client=client, username="svc", cache=cache)

    with pytest.raises(RemoteServiceError) as excinfo:
        plugin.get_nodes()

    assert isinstance(excinfo.value.__cause__, PuppetDBTransportError)
    assert isinstance(excinfo.value.__cause__.__cause__, IncompleteRead)
    assert cache.get() is None


def test_cache_log_lines_name_the_slot(caplog):
    cache = NodeSetCache(key="puppetdb-nodes")
    plugin = PuppetDBInventoryPlugin(client=make_client(), username="svc", cache=cache)

    with caplog.at_level(logging.INFO, logger="puppetdb_inventory.inventory.cache"):
        plugin.get_nodes()
        plugin.get_nodes()

    messages = [record.getMessage() for record in caplog.records]
    assert "Cache slot puppetdb-nodes is empty" in messages
    assert "Using cached puppet nodes from slot puppetdb-nodes" in messages
