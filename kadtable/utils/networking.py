from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Tuple, Union

from multiaddr import Multiaddr

LOCALHOST = "127.0.0.1"
MAX_PORT = 2**16 - 1

IPAddress = Union[IPv4Address, IPv6Address]


def parse_ip(ip: Union[str, IPAddress]) -> IPAddress:
    """Parse a dotted (ipv4) or colon-separated (ipv6) address, raise ValueError if it is malformed"""
    return ip if isinstance(ip, (IPv4Address, IPv6Address)) else ip_address(ip.strip() if isinstance(ip, str) else ip)


def parse_port(port: Union[str, int]) -> int:
    """Parse a numeric port given as int or string, raise ValueError if it is not a valid port"""
    if isinstance(port, bool):
        raise ValueError(f"Port must be an integer, got {port!r}")
    port = int(port.strip()) if isinstance(port, str) else int(port)
    if not 0 <= port <= MAX_PORT:
        raise ValueError(f"Port must be in [0, {MAX_PORT}], got {port}")
    return port


def ip_to_multiaddr(ip: IPAddress, port: int, transport: str = "udp") -> Multiaddr:
    """Convert an ip address and port to a multiaddr, e.g. /ip4/127.0.0.1/udp/1337"""
    protocol = "ip4" if ip.version == 4 else "ip6"
    return Multiaddr(f"/{protocol}/{ip}/{transport}/{port}")


def multiaddr_to_ip(maddr: Multiaddr, transport: str = "udp") -> Tuple[IPAddress, int]:
    """Extract (ip, port) from a multiaddr such as /ip6/::1/udp/1337"""
    protocols = [proto.name for proto in maddr.protocols()]
    for protocol in ("ip4", "ip6"):
        if protocol in protocols:
            return ip_address(maddr.value_for_protocol(protocol)), int(maddr.value_for_protocol(transport))
    raise ValueError(f"No IP address found in multiaddr: {maddr}")
