"""Connection abstractions: UDP sockets, in-memory pipes and reply-to-sender wrappers."""

from __future__ import annotations

import abc
import asyncio
import socket
from typing import Optional, Tuple, Union

from .errors import ErrorKind, UtilError

Address = Tuple[str, int]
AddressLike = Union[Address, str]

UNSPECIFIED_ADDR: Address = ("0.0.0.0", 0)
PIPE_CAPACITY = 16

NOT_APPLICABLE = "Not applicable"
ADDR_NOT_AVAILABLE = "Addr Not Available"
SOCKET_CLOSED = "socket closed"

_CLOSED = object()


def _io_error(message: str) -> UtilError:
    return UtilError(ErrorKind.IO, message)


def _parse_addr(addr: AddressLike) -> Address:
    """Turn ``(host, port)`` or ``"host:port"`` / ``"[v6]:port"`` into a tuple."""
    if isinstance(addr, tuple):
        host, port = str(addr[0]), int(addr[1])
    else:
        text = str(addr)
        if text.startswith("["):
            host, sep, port_text = text[1:].partition("]:")
        else:
            host, sep, port_text = text.rpartition(":")
        if not sep or not host:
            raise UtilError(ErrorKind.PARSE_IP, "invalid socket address syntax")
        try:
            port = int(port_text)
        except ValueError:
            raise UtilError(ErrorKind.PARSE_INT, "invalid digit found in string") from None
    if not 0 <= port <= 0xFFFF:
        raise UtilError(ErrorKind.INVALID_PORT_NUMBER)
    return host, port


async def _resolve(addr: AddressLike, family: int = 0) -> list[tuple[int, Address]]:
    """Resolve ``addr`` into ``(family, (host, port))`` pairs for datagram use."""
    host, port = _parse_addr(addr)
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, port, family=family, type=socket.SOCK_DGRAM)
    except OSError as exc:
        raise _io_error(str(exc)) from exc
    return [(info[0], (info[4][0], info[4][1])) for info in infos]


class Conn(abc.ABC):
    """A packet-oriented connection."""

    @abc.abstractmethod
    async def connect(self, addr: AddressLike) -> None:
        """Fix the default peer for :meth:`send`."""

    @abc.abstractmethod
    async def recv(self, size: Optional[int] = None) -> bytes:
        """Receive one packet, truncated to ``size`` bytes."""

    @abc.abstractmethod
    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        """Receive one packet and the address it came from."""

    @abc.abstractmethod
    async def send(self, data: bytes) -> int:
        """Send a packet to the default peer; return the bytes sent."""

    @abc.abstractmethod
    async def send_to(self, data: bytes, target: AddressLike) -> int:
        """Send a packet to ``target``; return the bytes sent."""

    @abc.abstractmethod
    async def local_addr(self) -> Address:
        """Return the local address."""

    @abc.abstractmethod
    async def remote_addr(self) -> Optional[Address]:
        """Return the remote address, if one is known."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the connection."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class Listener(abc.ABC):
    """A network listener for connection-oriented protocols."""

    @abc.abstractmethod
    async def accept(self) -> tuple[Conn, Address]:
        """Wait for and return the next connection with its remote address."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Close the listener, unblocking pending accepts with an error."""

    @abc.abstractmethod
    async def addr(self) -> Address:
        """Return the listener's network address."""


async def lookup_host(use_ipv4: bool, host: AddressLike) -> Address:
    """Resolve ``host`` and return its first address of the wanted family."""
    wanted = socket.AF_INET if use_ipv4 else socket.AF_INET6
    for family, sockaddr in await _resolve(host):
        if family == wanted:
            return sockaddr
    raise _io_error(
        f"No available {'ipv4' if use_ipv4 else 'ipv6'} IP address found!"
    )


class _DatagramQueue(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.incoming: asyncio.Queue = asyncio.Queue()

    def datagram_received(self, data: bytes, addr) -> None:
        self.incoming.put_nowait((bytes(data), (addr[0], addr[1])))

    def error_received(self, exc: Exception) -> None:
        self.incoming.put_nowait(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self.incoming.put_nowait(_CLOSED)


class UdpSocket(Conn):
    """An asynchronous UDP socket; create it with :func:`bind_udp`."""

    def __init__(self, transport: asyncio.DatagramTransport, protocol: _DatagramQueue, family: int) -> None:
        self._transport = transport
        self._protocol = protocol
        self._family = family
        self._peer: Optional[Address] = None

    async def connect(self, addr: AddressLike) -> None:
        resolved = await _resolve(addr, self._family)
        if not resolved:
            raise _io_error("could not resolve address")
        self._peer = resolved[0][1]

    async def _next(self) -> tuple[bytes, Address]:
        item = await self._protocol.incoming.get()
        if item is _CLOSED:
            # Leave the marker for any other waiting reader.
            self._protocol.incoming.put_nowait(_CLOSED)
            raise _io_error(SOCKET_CLOSED)
        if isinstance(item, Exception):
            raise _io_error(str(item)) from item
        return item

    async def recv(self, size: Optional[int] = None) -> bytes:
        while True:
            data, addr = await self._next()
            if self._peer is None or addr == self._peer:
                return data[:size]

    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        data, addr = await self._next()
        return data[:size], addr

    async def send(self, data: bytes) -> int:
        if self._peer is None:
            raise UtilError(ErrorKind.NO_REM_ADDR)
        return await self.send_to(data, self._peer)

    async def send_to(self, data: bytes, target: AddressLike) -> int:
        if self._transport.is_closing():
            raise _io_error(SOCKET_CLOSED)
        self._transport.sendto(bytes(data), _parse_addr(target))
        return len(data)

    async def local_addr(self) -> Address:
        sockname = self._transport.get_extra_info("sockname")
        return sockname[0], sockname[1]

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        self._transport.close()


async def bind_udp(addr: AddressLike) -> UdpSocket:
    """Bind a UDP socket to ``addr`` and return it."""
    host, port = _parse_addr(addr)
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_DGRAM)
    try:
        sock.setblocking(False)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise _io_error(str(exc)) from exc
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(_DatagramQueue, sock=sock)
    return UdpSocket(transport, protocol, family)


class PipeConn(Conn):
    """One end of an in-memory packet pipe; create a pair with :func:`pipe`."""

    def __init__(self, inbox: asyncio.Queue, outbox: asyncio.Queue) -> None:
        self._inbox = inbox
        self._outbox = outbox

    async def connect(self, addr: AddressLike) -> None:
        raise _io_error(NOT_APPLICABLE)

    async def recv(self, size: Optional[int] = None) -> bytes:
        data = await self._inbox.get()
        return data[:size]

    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        return await self.recv(size), UNSPECIFIED_ADDR

    async def send(self, data: bytes) -> int:
        await self._outbox.put(bytes(data))
        return len(data)

    async def send_to(self, data: bytes, target: AddressLike) -> int:
        raise _io_error(NOT_APPLICABLE)

    async def local_addr(self) -> Address:
        raise _io_error(ADDR_NOT_AVAILABLE)

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        return None


def pipe() -> tuple[PipeConn, PipeConn]:
    """Return two connected ends; what one sends the other receives."""
    first: asyncio.Queue = asyncio.Queue(PIPE_CAPACITY)
    second: asyncio.Queue = asyncio.Queue(PIPE_CAPACITY)
    return PipeConn(first, second), PipeConn(second, first)


class DisconnectedPacketConn(Conn):
    """Wraps a packet conn so that :meth:`send` replies to the last sender."""

    def __init__(self, conn: Conn) -> None:
        self._conn = conn
        self._raddr: Address = UNSPECIFIED_ADDR

    async def connect(self, addr: AddressLike) -> None:
        await self._conn.connect(addr)

    async def recv(self, size: Optional[int] = None) -> bytes:
        data, self._raddr = await self._conn.recv_from(size)
        return data

    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        return await self._conn.recv_from(size)

    async def send(self, data: bytes) -> int:
        return await self._conn.send_to(data, self._raddr)

    async def send_to(self, data: bytes, target: AddressLike) -> int:
        return await self._conn.send_to(data, target)

    async def local_addr(self) -> Address:
        return await self._conn.local_addr()

    async def remote_addr(self) -> Optional[Address]:
        return self._raddr

    async def close(self) -> None:
        await self._conn.close()