from puppetdb_inventory.core.types import NodeEntry, RemoteFact, RemoteNode
from puppetdb_inventory.inventory.convert import convert_nodes
from puppetdb_inventory.inventory.enrich import enrich_nodes, group_facts
from puppetdb_inventory.inventory.store import NodeSet


def test_node_set_add_get():
    node_set = NodeSet()
    node_set.add(NodeEntry(name="web1", username="svc"))

    assert node_set.get("web1") is not None
    assert node_set.get("missing") is None
    assert node_set.names() == ["web1"]
    assert "web1" in node_set
    assert len(node_set) == 1


def test_convert_preserves_names_and_sets_username():
    nodes = [RemoteNode(certname=n) for n in ("web1", "web2", "db1")]

    node_set = convert_nodes(nodes, "svc")

    assert len(node_set) == 3
    assert node_set.names() == ["db1", "web1", "web2"]
    for node in node_set:
        assert node.username == "svc"
        assert node.attributes == {}


def test_node_set_add_same_name_replaces_entry():
    node_set = NodeSet()
    first = NodeEntry(name="web1", username="old")
    second = NodeEntry(name="web1", username="new")

    node_set.add(first)
    node_set.add(second)

    assert len(node_set) == 1
    assert node_set.get("web1") is second


def test_convert_duplicate_certnames_collapse_to_one_entry():
    nodes = [RemoteNode(certname="web1"), RemoteNode(certname="web1")]

    node_set = convert_nodes(nodes, "svc")

    assert node_set.names() == ["web1"]
    assert len(node_set.all()) == 1


def test_convert_empty_input_gives_empty_set():
    assert len(convert_nodes([], "svc")) == 0


def test_group_facts_by_certname():
    facts = [
        RemoteFact(certname="a", name="osfamily", value="Debian"),
        RemoteFact(certname="b", name="osfamily", value="RedHat"),
        RemoteFact(certname="a", name="kernel", value="Linux"),
    ]

    grouped = group_facts(facts)

    assert grouped == {
        "a": {"osfamily": "Debian", "kernel": "Linux"},
        "b": {"osfamily": "RedHat"},
    }


def test_enrich_sets_attributes_in_place():
    base = convert_nodes([RemoteNode(certname="a"), RemoteNode(certname="b")], "svc")
    facts = [
        RemoteFact(certname="a", name="osfamily", value="RedHat"),
        RemoteFact(certname="a", name="processors", value={"count": 4}),
    ]

    result = enrich_nodes(base, facts)

    assert result is base
    assert result.get("a").attributes == {"osfamily": "RedHat", "processors": {"count": 4}}
    assert result.get("b").attributes == {}


def test_enrich_drops_facts_for_unknown_nodes():
    base = convert_nodes([RemoteNode(certname="a")], "svc")
    facts = [RemoteFact(certname="ghost", name="osfamily", value="RedHat")]

    result = enrich_nodes(base, facts)

    assert result.names() == ["a"]
    assert result.get("ghost") is None
    assert result.get("a").attributes == {}


def test_enrich_only_grows_attributes():
    base = convert_nodes([RemoteNode(certname="a")], "svc")
    base.get("a").attributes["role"] = "web"

    enrich_nodes(base, [RemoteFact(certname="a", name="osfamily", value="Debian")])

    node = base.get("a")
    assert node.name == "a"
    assert node.username == "svc"
    assert node.attributes == {"role": "web", "osfamily": "Debian"}


def test_enrich_does_not_require_mandatory_facts():
    base = convert_nodes([RemoteNode(certname="a")], "svc")

    enrich_nodes(base, [RemoteFact(certname="a", name="osfamily", value="Debian")])

    attributes = base.get("a").attributes
    assert "osfamily" in attributes
    assert "hardwaremodel" not in attributes
    assert "operatingsystem" not in attributes
