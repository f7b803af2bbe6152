"""
Server addresses: either a resolved IP literal with a port, or a domain name
that is left for the relay to resolve when it connects.
"""

import ipaddress
from dataclasses import dataclass
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_ip(text: str) -> Optional[IPAddress]:
    """
    Parse an IPv4 literal, then an IPv6 literal. Returns None when the text
    is neither. Scoped IPv6 ("fe80::1%eth0") is not a literal.
    """
    try:
        return ipaddress.IPv4Address(text)
    except ValueError:
        pass
    return _parse_ipv6(text)


def _parse_ipv6(text: str) -> Optional[ipaddress.IPv6Address]:
    try:
        ip = ipaddress.IPv6Address(text)
    except ValueError:
        return None
    return None if ip.scope_id else ip


def _parse_port(text: str) -> Optional[int]:
    if not text.isascii() or not text.isdigit():
        return None
    port = int(text)
    return port if port <= 0xFFFF else None


class _Endpoint:
    host: str
    port: int

    def to_json_object(self, obj: dict, legacy: bool = False) -> None:
        """
        Write the host and port into a JSON object, under `address`/`port`
        or, for the single-server layout, `server`/`server_port`.
        """
        if legacy:
            obj["server"] = self.host
            obj["server_port"] = self.port
        else:
            obj["address"] = self.host
            obj["port"] = self.port


@dataclass(frozen=True)
class SocketAddr(_Endpoint):
    ip: IPAddress
    port: int

    @property
    def host(self) -> str:
        return str(self.ip)

    def __str__(self):
        if self.ip.version == 6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class DomainName(_Endpoint):
    name: str
    port: int

    @property
    def host(self) -> str:
        return self.name

    def __str__(self):
        return f"{self.name}:{self.port}"


ServerAddr = Union[SocketAddr, DomainName]


def server_addr_from_host(host: str, port: int) -> ServerAddr:
    """
    IPv4 literal first, then IPv6, and anything else is kept verbatim as a
    domain name. Domain syntax is not checked here.
    """
    ip = parse_ip(host)
    if ip is not None:
        return SocketAddr(ip, port)
    return DomainName(host, port)


def _parse_socket_addr(text: str) -> Optional[SocketAddr]:
    host, sep, port_text = text.rpartition(":")
    if not sep:
        return None
    port = _parse_port(port_text)
    if port is None:
        return None
    if host.startswith("[") and host.endswith("]"):
        ip = _parse_ipv6(host[1:-1])
    else:
        try:
            ip = ipaddress.IPv4Address(host)
        except ValueError:
            return None
    return SocketAddr(ip, port) if ip is not None else None


def parse_server_addr(text: str) -> ServerAddr:
    """
    Parse "host:port". IPv6 hosts must be bracketed ("[::1]:8388").
    Raises ValueError if no port can be read.
    """
    addr = _parse_socket_addr(text)
    if addr is not None:
        return addr

    parts = text.split(":")
    if len(parts) >= 2:
        port = _parse_port(parts[1])
        if port is not None:
            return DomainName(parts[0], port)
    raise ValueError(f"Invalid server address: {text!r}")


def listen_addr(addr: ServerAddr) -> SocketAddr:
    """
    Return the address a listener should bind to.

    Only IP literals can be bound; passing a DomainName is a bug in the
    caller and raises TypeError.
    """
    if isinstance(addr, SocketAddr):
        return addr
    if isinstance(addr, DomainName):
        raise TypeError("Cannot use domain name as server listen address")
    raise TypeError(f"Unknown server address type: {type(addr).__name__}")
