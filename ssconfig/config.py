"""
Configuration handling for the proxy client and server.

Two document layouts are accepted. The traditional one describes a single
server with top-level keys:

    {
        "server": "127.0.0.1",
        "server_port": 8388,
        "password": "the-password",
        "method": "aes-256-cfb",
        "timeout": 300,
        "local_address": "127.0.0.1",
        "local_port": 1080,
        "dns_cache_capacity": 65536
    }

The extended one lists several servers, which the relay balances between
in list order:

    {
        "servers": [
            {"address": "127.0.0.1", "port": 8388,
             "password": "pw1", "method": "bf-cfb"},
            {"address": "example.com", "port": 8389,
             "password": "pw2", "method": "aes-128-cfb", "timeout": 60}
        ],
        "local_address": "127.0.0.1",
        "local_port": 1080
    }

When "servers" is present the top-level server keys are ignored.
"""

import enum
import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable, Iterator, Optional

from ssconfig.address import (
    IPAddress,
    ServerAddr,
    SocketAddr,
    parse_ip,
    server_addr_from_host,
)
from ssconfig.cipher import CipherType
from ssconfig.errors import (
    ConfigIOError,
    InvalidError,
    JsonParsingError,
    MalformedError,
    MissingFieldError,
)

logger = logging.getLogger(__name__)

DEFAULT_DNS_CACHE_CAPACITY = 128

# Largest integer an unsigned field accepts
U64_MAX = 0xFFFFFFFFFFFFFFFF

# Keys that together make a traditional single-server document
LEGACY_SERVER_KEYS = ("server", "server_port", "password", "method")


class ConfigType(enum.Enum):
    """Which process is loading the config."""

    # Local client: bind settings are read
    LOCAL = "local"
    # Remote server: bind settings are ignored
    SERVER = "server"


@dataclass(frozen=True)
class ServerConfig:
    """
    One upstream server.
    """

    addr: ServerAddr
    password: str = field(repr=False)
    method: CipherType
    # Per-server override of the global timeout
    timeout: Optional[timedelta] = None

    @classmethod
    def basic(cls, addr: ServerAddr, password: str, method: CipherType) -> "ServerConfig":
        return cls(addr=addr, password=password, method=method)

    def to_json(self) -> dict:
        obj = {}
        self.addr.to_json_object(obj)
        obj["password"] = self.password
        obj["method"] = str(self.method)
        if self.timeout is not None:
            obj["timeout"] = int(self.timeout.total_seconds())
        return obj


@dataclass(frozen=True)
class Config:
    """
    Validated configuration. Built once per load and never changed after.
    """

    servers: tuple[ServerConfig, ...] = ()
    local: Optional[SocketAddr] = None
    http_proxy: Optional[SocketAddr] = None
    enable_udp: bool = False
    timeout: Optional[timedelta] = None
    forbidden_ip: frozenset[IPAddress] = frozenset()
    dns_cache_capacity: int = DEFAULT_DNS_CACHE_CAPACITY

    def to_json(self) -> dict:
        """
        Build a JSON object for display. A single server is written in the
        traditional layout, anything else as a "servers" list.

        forbidden_ip, the global timeout and the HTTP proxy address are not
        written.
        """
        obj = {}
        if len(self.servers) == 1:
            server = self.servers[0]
            server.addr.to_json_object(obj, legacy=True)
            obj["password"] = server.password
            obj["method"] = str(server.method)
            if server.timeout is not None:
                obj["timeout"] = int(server.timeout.total_seconds())
        else:
            obj["servers"] = [server.to_json() for server in self.servers]

        if self.local is not None:
            obj["local_address"] = self.local.host
            obj["local_port"] = self.local.port

        obj["enable_udp"] = self.enable_udp
        obj["dns_cache_capacity"] = self.dns_cache_capacity
        return obj

    def __str__(self):
        return json.dumps(self.to_json(), sort_keys=True)


def _is_uint(value) -> bool:
    # bool is a subclass of int, but JSON true/false are not numbers
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= U64_MAX


def _uint(value, desc: str) -> int:
    if not _is_uint(value):
        raise MalformedError(desc)
    return value


def _port(value, desc: str) -> int:
    if not _is_uint(value) or value > 0xFFFF:
        raise MalformedError(desc)
    return value


def _string(value, desc: str) -> str:
    if not isinstance(value, str):
        raise MalformedError(desc)
    return value


def _timeout(obj: dict) -> Optional[timedelta]:
    if "timeout" not in obj:
        return None
    desc = "`timeout` should be an integer"
    try:
        return timedelta(seconds=_uint(obj["timeout"], desc))
    except OverflowError:
        # Beyond timedelta.max (about 2.7 million years)
        raise MalformedError(desc, str(obj["timeout"])) from None


def parse_server(server: dict) -> ServerConfig:
    """
    Parse one server object. The first bad field raises.

    `port`/`address` fall back to the traditional `server_port`/`server`
    keys.
    """
    if "method" not in server:
        raise MissingFieldError("need to specify a method")
    method_str = _string(server["method"], "`method` should be a string")
    method = CipherType.parse(method_str)
    if method is None:
        raise InvalidError(
            "not supported method", f"`{method_str}` is not a supported method"
        )

    port_key = "port" if "port" in server else "server_port"
    if port_key not in server:
        raise MissingFieldError("need to specify a server port")
    port = _port(server[port_key], "`port` should be an integer")

    addr_key = "address" if "address" in server else "server"
    if addr_key not in server:
        raise MissingFieldError("need to specify a server address")
    addr = server_addr_from_host(
        _string(server[addr_key], "`address` should be a string"), port
    )

    if "password" not in server:
        raise MissingFieldError("need to specify a password")
    password = _string(server["password"], "`password` should be a string")

    return ServerConfig(
        addr=addr, password=password, method=method, timeout=_timeout(server)
    )


def _server_objects(entries: list, log: logging.Logger) -> Iterator[dict]:
    for index, entry in enumerate(entries):
        if isinstance(entry, dict):
            yield entry
        else:
            log.warning(
                "Server entry #%d should be an object, but found %s, skipping",
                index,
                type(entry).__name__,
            )


def _forbidden_ips(entries: Iterable, log: logging.Logger) -> Iterator[IPAddress]:
    for entry in entries:
        if not isinstance(entry, str):
            log.warning(
                "Forbidden IP should be a string, but found %r, skipping", entry
            )
            continue
        ip = parse_ip(entry)
        if ip is None:
            log.warning("Invalid forbidden IP %s, skipping", entry)
            continue
        yield ip


def _bind_addr(
    obj: dict, addr_key: str, port_key: str, log: logging.Logger
) -> Optional[SocketAddr]:
    """
    Read a local listen address. Both keys or neither must be given; a
    listen address must be an IP literal.
    """
    has_addr = addr_key in obj
    has_port = port_key in obj

    if has_addr and has_port:
        addr_str = _string(obj[addr_key], f"`{addr_key}` should be a string")
        port = _port(obj[port_key], f"`{port_key}` should be an integer")
        ip = parse_ip(addr_str)
        if ip is None:
            raise MalformedError(f"`{addr_key}` is not a valid IP address", addr_str)
        return SocketAddr(ip, port)

    if has_addr or has_port:
        # Half a listen address is fatal, not a recoverable ConfigError
        message = f"You have to provide `{addr_key}` and `{port_key}` together"
        log.critical(message)
        raise SystemExit(message)

    return None


def parse_json_object(
    obj: dict,
    require_local_info: bool,
    *,
    log: Optional[logging.Logger] = None,
    dns_cache_capacity: int = DEFAULT_DNS_CACHE_CAPACITY,
) -> Config:
    """
    Assemble a Config from a decoded JSON object.

    Skipped list entries are reported as warnings on `log`.
    `dns_cache_capacity` is used when the document does not set one.
    """
    log = log or logger

    timeout = _timeout(obj)

    servers = []
    if "servers" in obj:
        server_list = obj["servers"]
        if not isinstance(server_list, list):
            raise MalformedError("`servers` should be a list")
        for entry in _server_objects(server_list, log):
            servers.append(parse_server(entry))
    elif all(key in obj for key in LEGACY_SERVER_KEYS):
        servers.append(parse_server(obj))

    local = None
    http_proxy = None
    if require_local_info:
        local = _bind_addr(obj, "local_address", "local_port", log)
        http_proxy = _bind_addr(obj, "local_http_address", "local_http_port", log)

    forbidden_ip = frozenset()
    if "forbidden_ip" in obj:
        entries = obj["forbidden_ip"]
        if not isinstance(entries, list):
            raise MalformedError("`forbidden_ip` should be a list")
        forbidden_ip = frozenset(_forbidden_ips(entries, log))

    if "dns_cache_capacity" in obj:
        dns_cache_capacity = _uint(
            obj["dns_cache_capacity"], "`dns_cache_capacity` should be an integer"
        )

    config = Config(
        servers=tuple(servers),
        local=local,
        http_proxy=http_proxy,
        timeout=timeout,
        forbidden_ip=forbidden_ip,
        dns_cache_capacity=dns_cache_capacity,
    )
    log.debug(
        "Loaded %d server(s), %d forbidden IP(s)", len(servers), len(forbidden_ip)
    )
    return config


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def load_from_str(
    text: str, config_type: ConfigType, *, log: Optional[logging.Logger] = None
) -> Config:
    """
    Load configuration from JSON text.
    Raises JsonParsingError if the text is not a JSON object, or another
    ConfigError if its contents are not as expected.
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise JsonParsingError("Json parse error", str(e)) from e

    if not isinstance(data, dict):
        raise JsonParsingError("root is not a JSON object")

    return parse_json_object(
        data, config_type is ConfigType.LOCAL, log=log
    )


def load_from_file(
    path: str, config_type: ConfigType, *, log: Optional[logging.Logger] = None
) -> Config:
    """
    Load configuration from a UTF-8 JSON file.
    Raises ConfigIOError if the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigIOError("error while reading file", str(e)) from e
    except UnicodeDecodeError as e:
        raise JsonParsingError("Json parse error", str(e)) from e

    return load_from_str(text, config_type, log=log)
