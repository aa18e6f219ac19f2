""" Construction options of a routing table and their validation """
from dataclasses import dataclass
from typing import Optional, Union

from kadtable.dht.contact import NetworkNode
from kadtable.dht.id import DHTID, BinaryDHTID
from kadtable.utils.logging import get_logger
from kadtable.utils.networking import IPAddress, parse_ip, parse_port

logger = get_logger(__name__)


class ConfigurationError(ValueError):
    """Routing table options are missing or malformed"""


@dataclass(frozen=True)
class RoutingTableOptions:
    """
    :param ip: address of this node, e.g. "127.0.0.1" (required)
    :param port: port of this node as an int or a numeric string (required)
    :param node_id: identifier of this node, raw bytes or DHTID; generated at random if not specified
    """

    ip: Optional[Union[str, IPAddress]] = None
    port: Optional[Union[str, int]] = None
    node_id: Optional[Union[DHTID, BinaryDHTID]] = None


def resolve_self_node(options: RoutingTableOptions) -> NetworkNode:
    """
    Validate options and build the NetworkNode of the local node.

    :raises ConfigurationError: if ip or port is missing or malformed, or if node_id has the wrong length
    :raises IdentifierGenerationError: if node_id is missing and the secure random source failed
    """
    if options.ip is None or options.ip == "" or options.port is None or options.port == "":
        raise ConfigurationError("Port and IP required")
    try:
        ip, port = parse_ip(options.ip), parse_port(options.port)
    except ValueError as e:
        raise ConfigurationError(f"Invalid address {options.ip}:{options.port}: {e}") from e

    if options.node_id is None:
        node_id = DHTID.generate()
        logger.info(f"No node id specified, generated a random one: {node_id.to_bytes().hex()}")
    elif isinstance(options.node_id, DHTID):
        node_id = options.node_id
    elif isinstance(options.node_id, bytes) and len(options.node_id) == DHTID.HASH_NBYTES:
        node_id = DHTID.from_bytes(options.node_id)
    else:
        raise ConfigurationError(f"node_id must be {DHTID.HASH_NBYTES} bytes, got {options.node_id!r}")
    return NetworkNode(node_id, ip, port)
