"""Connection-oriented listener that demultiplexes one UDP socket by remote address."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from .buffer import Buffer
from .conn import Address, AddressLike, Conn, Listener, UdpSocket, bind_udp
from .errors import ErrorKind, UtilError

RECEIVE_MTU = 8192
DEFAULT_LISTEN_BACKLOG = 128  # same as the Linux default

AcceptFilter = Callable[[bytes], Union[bool, Awaitable[bool]]]

_log = logging.getLogger(__name__)


def _discard(task: Optional[asyncio.Future]) -> None:
    """Cancel ``task`` and swallow any result it already produced."""
    if task is None:
        return
    if task.done():
        if not task.cancelled():
            task.exception()
    else:
        task.cancel()


class UdpConn(Conn):
    """A per-remote connection carved out of a listener's UDP socket."""

    def __init__(self, listener: "UdpListener", raddr: Address) -> None:
        self._listener = listener
        self._pconn = listener._pconn
        self._raddr = raddr
        self._buffer = Buffer(0, 0)

    async def connect(self, addr: AddressLike) -> None:
        await self._pconn.connect(addr)

    async def recv(self, size: Optional[int] = None) -> bytes:
        return await self._buffer.read(size)

    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        return await self._buffer.read(size), self._raddr

    async def send(self, data: bytes) -> int:
        return await self._pconn.send_to(data, self._raddr)

    async def send_to(self, data: bytes, target: AddressLike) -> int:
        return await self._pconn.send_to(data, target)

    async def local_addr(self) -> Address:
        return await self._pconn.local_addr()

    async def remote_addr(self) -> Optional[Address]:
        return self._raddr

    async def close(self) -> None:
        await self._listener._forget(self._raddr)


class UdpListener(Listener):
    """Accepts one :class:`UdpConn` per new remote address; create it with :func:`listen`."""

    def __init__(
        self,
        pconn: UdpSocket,
        backlog: int,
        accept_filter: Optional[AcceptFilter] = None,
    ) -> None:
        self._pconn = pconn
        self._accept_filter = accept_filter
        self._accepting = True
        self._accept_queue: asyncio.Queue = asyncio.Queue(backlog)
        self._accept_open = True
        self._done = asyncio.Event()
        self._conns: dict[Address, UdpConn] = {}
        self._pconn_closed = False
        self._read_task = asyncio.get_running_loop().create_task(self._read_loop())

    async def accept(self) -> tuple[Conn, Address]:
        if self._done.is_set():
            raise UtilError(ErrorKind.CLOSED_LISTENER)
        get_task = asyncio.ensure_future(self._accept_queue.get())
        done_task = asyncio.ensure_future(self._done.wait())
        try:
            finished, _ = await asyncio.wait(
                {get_task, done_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not get_task.done():
                get_task.cancel()
            _discard(done_task)
        if get_task in finished:
            conn = get_task.result()
            return conn, conn._raddr
        raise UtilError(ErrorKind.CLOSED_LISTENER)

    async def close(self) -> None:
        if not self._accepting:
            return
        self._accepting = False
        self._done.set()
        self._accept_open = False
        # Connections still waiting to be accepted can no longer be reached.
        while not self._accept_queue.empty():
            conn = self._accept_queue.get_nowait()
            self._conns.pop(conn._raddr, None)
        await self._release_if_idle()

    async def addr(self) -> Address:
        return await self._pconn.local_addr()

    async def _forget(self, raddr: Address) -> None:
        self._conns.pop(raddr, None)
        await self._release_if_idle()

    async def _release_if_idle(self) -> None:
        if self._accepting or self._conns or self._pconn_closed:
            return
        self._pconn_closed = True
        await self._pconn.close()

    async def _read_loop(self) -> None:
        """Dispatch incoming packets to their conns, creating conns for new remotes."""
        done_wait = asyncio.ensure_future(self._done.wait())
        recv: Optional[asyncio.Future] = None
        try:
            while True:
                recv = asyncio.ensure_future(self._pconn.recv_from(RECEIVE_MTU))
                finished, _ = await asyncio.wait(
                    {recv, done_wait}, return_when=asyncio.FIRST_COMPLETED
                )
                if done_wait in finished:
                    break
                try:
                    data, raddr = recv.result()
                except UtilError as exc:
                    _log.warning("listener recv_from error: %s", exc)
                    break
                try:
                    conn = await self._get_udp_conn(raddr, data)
                except UtilError:
                    continue
                if conn is not None:
                    try:
                        conn._buffer.write(data)
                    except UtilError:
                        pass
        finally:
            _discard(recv)
            _discard(done_wait)

    async def _get_udp_conn(self, raddr: Address, data: bytes) -> Optional[UdpConn]:
        existing = self._conns.get(raddr)
        if existing is not None:
            return existing
        if not self._accepting:
            raise UtilError(ErrorKind.CLOSED_LISTENER)
        if self._accept_filter is not None:
            verdict = self._accept_filter(data)
            if inspect.isawaitable(verdict):
                verdict = await verdict
            if not verdict:
                return None
        conn = UdpConn(self, raddr)
        if not self._accept_open:
            raise UtilError(ErrorKind.CLOSED_LISTENER_ACCEPT_CH)
        try:
            self._accept_queue.put_nowait(conn)
        except asyncio.QueueFull:
            raise UtilError(ErrorKind.LISTEN_QUEUE_EXCEEDED) from None
        self._conns[raddr] = conn
        return conn


@dataclass
class ListenConfig:
    """Options for :meth:`listen`.

    ``backlog`` bounds the queue of unaccepted connections; packets from new
    remotes beyond it are discarded. Zero selects 128. ``accept_filter``
    decides, from the first packet, whether a new conn is made; it may be a
    plain or an async callable.
    """

    backlog: int = 0
    accept_filter: Optional[AcceptFilter] = None

    async def listen(self, laddr: AddressLike) -> UdpListener:
        """Bind ``laddr`` and start a listener on it."""
        if self.backlog == 0:
            self.backlog = DEFAULT_LISTEN_BACKLOG
        pconn = await bind_udp(laddr)
        return UdpListener(pconn, self.backlog, self.accept_filter)


async def listen(laddr: AddressLike) -> UdpListener:
    """Start a listener on ``laddr`` with the default configuration."""
    return await ListenConfig().listen(laddr)