import logging
from ipaddress import IPv4Address, IPv6Address

import pytest
from multiaddr import Multiaddr

from kadtable.dht.contact import Contact, NetworkNode
from kadtable.dht.id import DHTID
from kadtable.utils import MSGPackSerializer
from kadtable.utils.logging import StyleMode, get_logger, use_kadtable_log_style
from kadtable.utils.networking import LOCALHOST, ip_to_multiaddr, multiaddr_to_ip, parse_ip, parse_port


def test_network_node():
    node_id = DHTID.generate()
    node = NetworkNode(bytes(node_id), "127.0.0.1", "1337")
    assert node.node_id == node_id and isinstance(node.node_id, DHTID)
    assert node.ip == IPv4Address("127.0.0.1") and node.port == 1337
    assert node == NetworkNode(node_id, IPv4Address("127.0.0.1"), 1337)
    assert hash(node) == hash(NetworkNode(node_id, LOCALHOST, 1337))
    assert str(node) == f"{bytes(node_id).hex()}@127.0.0.1:1337"

    with pytest.raises(ValueError):
        NetworkNode(node_id, "127.0.0.256", 1337)
    with pytest.raises(ValueError):
        NetworkNode(node_id, LOCALHOST, "port")
    with pytest.raises(AssertionError):
        NetworkNode(b"\x00" * 21, LOCALHOST, 1337)


def test_contact_equality():
    node_id = DHTID.generate()
    first = Contact(NetworkNode(node_id, LOCALHOST, 1000))
    second = Contact(NetworkNode(node_id, "10.0.0.1", 2000))
    assert first == second and hash(first) == hash(second)
    assert first != Contact(NetworkNode(DHTID.generate(), LOCALHOST, 1000))
    assert first != first.node
    assert first.node_id == node_id and first.ip == IPv4Address(LOCALHOST) and first.port == 1000

    seen = first.seen(timestamp=first.added_at + 10)
    assert seen == first and seen.last_seen == first.added_at + 10 and seen.added_at == first.added_at
    assert first.last_seen is None


def test_network_node_multiaddr():
    node = NetworkNode(DHTID.generate(), "192.168.1.2", 4000)
    assert node.to_multiaddr() == Multiaddr("/ip4/192.168.1.2/udp/4000")
    assert NetworkNode.from_multiaddr(node.node_id, node.to_multiaddr()) == node
    assert NetworkNode.from_multiaddr(bytes(node.node_id), Multiaddr("/ip4/192.168.1.2/tcp/4000"), "tcp") == node

    node6 = NetworkNode(DHTID.generate(), "::1", 4000)
    assert str(node6.to_multiaddr("tcp")) == "/ip6/::1/tcp/4000"
    assert NetworkNode.from_multiaddr(node6.node_id, node6.to_multiaddr("tcp"), "tcp") == node6


def test_serialize_network_node():
    nodes = [NetworkNode(DHTID.generate(), LOCALHOST, port) for port in (1, 1337, 65535)]
    nodes.append(NetworkNode(DHTID.generate(), "2001:db8::1", 30303))
    restored = MSGPackSerializer.loads(MSGPackSerializer.dumps({"peers": nodes, "key": (b"abc", 1)}))
    assert restored["peers"] == nodes
    assert all(isinstance(node, NetworkNode) for node in restored["peers"])
    assert restored["key"] == (b"abc", 1)


def test_networking_helpers():
    assert parse_ip(" 10.0.0.1 ") == IPv4Address("10.0.0.1")
    assert parse_ip(IPv6Address("::1")) == IPv6Address("::1")
    assert parse_port("8080") == parse_port(8080) == 8080
    assert parse_port(" 0 ") == 0
    for bad_port in ["-1", "65536", "1.5", "", True]:
        with pytest.raises(ValueError):
            parse_port(bad_port)

    maddr = ip_to_multiaddr(IPv4Address("1.2.3.4"), 5678)
    assert multiaddr_to_ip(maddr) == (IPv4Address("1.2.3.4"), 5678)
    with pytest.raises(ValueError):
        multiaddr_to_ip(Multiaddr("/dns4/example.com/udp/5678"))


def test_log_style(caplog):
    logger = get_logger("kadtable.test_log_style")
    try:
        use_kadtable_log_style("nowhere")
        assert get_logger("kadtable").propagate and not get_logger("kadtable").handlers

        use_kadtable_log_style(StyleMode.AMONG_KADTABLE)
        assert not get_logger("kadtable").propagate and get_logger("kadtable").handlers
        assert logger.getEffectiveLevel() == get_logger("kadtable").level
    finally:
        use_kadtable_log_style("everywhere")

    with caplog.at_level(logging.INFO, logger="kadtable.test_log_style"):
        logger.info("routing table is alive")
    assert "routing table is alive" in caplog.text
