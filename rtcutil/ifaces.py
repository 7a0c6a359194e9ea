"""Enumeration of the local system's network interface addresses."""

from __future__ import annotations

import argparse
import ipaddress
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import psutil

from .errors import ErrorKind, UtilError

SocketAddress = Tuple[str, int]


class Kind(Enum):
    """Address family of an interface entry."""

    PACKET = "packet"
    LINK = "link"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class HopKind(Enum):
    """Meaning of an interface's next-hop address."""

    BROADCAST = "broadcast"
    DESTINATION = "destination"


@dataclass(frozen=True)
class NextHop:
    """A broadcast address, or the peer of a point-to-point link."""

    kind: HopKind
    addr: SocketAddress


@dataclass(frozen=True)
class Interface:
    """One address assigned to a named interface."""

    name: str
    kind: Kind
    addr: Optional[SocketAddress] = None
    mask: Optional[SocketAddress] = None
    hop: Optional[NextHop] = None


def _link_kind() -> Kind:
    """Kind used for link-layer entries on this platform."""
    if getattr(socket, "AF_PACKET", None) == int(psutil.AF_LINK):
        return Kind.PACKET
    return Kind.LINK


def _kind_of(family: int) -> Optional[Kind]:
    if family == int(socket.AF_INET):
        return Kind.IPV4
    if family == int(socket.AF_INET6):
        return Kind.IPV6
    if family == int(psutil.AF_LINK):
        return _link_kind()
    return None


def _to_sockaddr(text: Optional[str], kind: Kind) -> Optional[SocketAddress]:
    """Turn an IP address string into ``(ip, 0)``; non-IP entries give None."""
    if not text or kind not in (Kind.IPV4, Kind.IPV6):
        return None
    try:
        ip = ipaddress.ip_address(text.split("%", 1)[0])
    except ValueError:
        return None
    return str(ip), 0


def _entry_to_interface(name: str, entry: Any) -> Optional[Interface]:
    kind = _kind_of(int(entry.family))
    if kind is None:
        return None
    addr = _to_sockaddr(entry.address, kind)
    mask = _to_sockaddr(entry.netmask, kind)
    hop: Optional[NextHop] = None
    broadcast = _to_sockaddr(getattr(entry, "broadcast", None), kind)
    if broadcast is not None:
        hop = NextHop(HopKind.BROADCAST, broadcast)
    else:
        destination = _to_sockaddr(getattr(entry, "ptp", None), kind)
        if destination is not None:
            hop = NextHop(HopKind.DESTINATION, destination)
    return Interface(name=name, kind=kind, addr=addr, mask=mask, hop=hop)


def _interfaces_from(table: Mapping[str, Iterable[Any]]) -> list[Interface]:
    """Build interfaces from a name-to-address-entries table, skipping unknown families."""
    result = []
    for name, entries in table.items():
        for entry in entries:
            iface = _entry_to_interface(name, entry)
            if iface is not None:
                result.append(iface)
    return result


def ifaces() -> list[Interface]:
    """Query the local system for all interface addresses."""
    try:
        table = psutil.net_if_addrs()
    except OSError as exc:
        raise UtilError(ErrorKind.IO, str(exc)) from exc
    return _interfaces_from(table)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print every interface address with its index."""
    parser = argparse.ArgumentParser(description="List local interface addresses.")
    parser.parse_args(argv)
    for index, interface in enumerate(ifaces()):
        print(f"{index} {interface!r}")
    return 0