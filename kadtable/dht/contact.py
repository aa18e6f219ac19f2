""" Address records for remote DHT nodes: where to reach a node and what the routing table knows about it """
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Union

from multiaddr import Multiaddr

from kadtable.dht.id import DHTID, BinaryDHTID
from kadtable.utils.networking import IPAddress, ip_to_multiaddr, multiaddr_to_ip, parse_ip, parse_port
from kadtable.utils.serializer import MSGPackSerializer
from kadtable.utils.timed import get_dht_time


@MSGPackSerializer.ext_serializable(type_code=0x21)
@dataclass(frozen=True)
class NetworkNode:
    """
    A network-reachable DHT node: identifier, ip address and port.

    Strings and raw bytes are accepted for convenience and converted on construction,
    e.g. ``NetworkNode(b"\\x00" * 20, "127.0.0.1", "1337")``.
    Malformed addresses raise ValueError, identifiers of the wrong length fail an assertion.
    """

    node_id: DHTID
    ip: IPAddress
    port: int

    def __post_init__(self):
        node_id = self.node_id
        if not isinstance(node_id, DHTID):
            node_id = DHTID.from_bytes(node_id) if isinstance(node_id, bytes) else DHTID(node_id)
        object.__setattr__(self, "node_id", node_id)
        object.__setattr__(self, "ip", parse_ip(self.ip))
        object.__setattr__(self, "port", parse_port(self.port))

    def to_multiaddr(self, transport: str = "udp") -> Multiaddr:
        return ip_to_multiaddr(self.ip, self.port, transport)

    @classmethod
    def from_multiaddr(cls, node_id: Union[DHTID, BinaryDHTID], maddr: Multiaddr, transport: str = "udp"):
        ip, port = multiaddr_to_ip(maddr, transport)
        return cls(node_id, ip, port)

    def packb(self) -> bytes:
        return MSGPackSerializer.dumps([self.node_id.to_bytes(), str(self.ip), self.port])

    @classmethod
    def unpackb(cls, raw: bytes) -> NetworkNode:
        node_id, ip, port = MSGPackSerializer.loads(raw)
        return cls(DHTID.from_bytes(node_id), ip, port)

    def __str__(self):
        return f"{self.node_id.to_bytes().hex()}@{self.ip}:{self.port}"


@dataclass(frozen=True, eq=False)
class Contact:
    """
    A remote node as stored in the routing table. Two contacts are equal iff their identifiers are equal,
    regardless of the address each of them claims.
    """

    node: NetworkNode
    added_at: float = dataclasses.field(default_factory=get_dht_time)
    last_seen: Optional[float] = None

    @property
    def node_id(self) -> DHTID:
        return self.node.node_id

    @property
    def ip(self) -> IPAddress:
        return self.node.ip

    @property
    def port(self) -> int:
        return self.node.port

    def seen(self, timestamp: Optional[float] = None) -> Contact:
        """Return a copy of this contact that was last seen at :timestamp: (default: now)"""
        return dataclasses.replace(self, last_seen=get_dht_time() if timestamp is None else timestamp)

    def __eq__(self, other):
        if not isinstance(other, Contact):
            return NotImplemented
        return self.node_id == other.node_id

    def __hash__(self):
        return hash(self.node_id)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.node})"
