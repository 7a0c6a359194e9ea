"""Packet buffer that keeps writes separate and lets readers wait for data."""

from __future__ import annotations

import asyncio
from collections import deque

from .errors import ErrorKind, UtilError

MIN_SIZE = 2048
CUTOFF_SIZE = 128 * 1024
MAX_SIZE = 4 * 1024 * 1024
MAX_PACKET_SIZE = 0x10000

# Each stored packet is accounted with a two-byte length prefix.
_HEADER_SIZE = 2


class Buffer:
    """A FIFO of packets; each read returns exactly one written packet.

    ``limit_count`` caps the number of queued packets and ``limit_size`` the
    number of queued bytes; zero disables the limit (4 MiB for the size).
    """

    def __init__(self, limit_count: int = 0, limit_size: int = 0) -> None:
        self._packets: deque[bytes] = deque()
        self._size = 0
        self._capacity = 0
        self._closed = False
        self._limit_count = limit_count
        self._limit_size = limit_size
        self._waiters: deque[asyncio.Future] = deque()

    def _fits(self, length: int) -> bool:
        # One byte of slack is always kept free.
        return length + _HEADER_SIZE < self._capacity - self._size

    def _grow(self) -> None:
        cap = self._capacity
        new = 2 * cap if cap < CUTOFF_SIZE else 5 * cap // 4
        new = max(new, MIN_SIZE)
        if self._limit_size == 0:
            new = min(new, MAX_SIZE)
        else:
            new = min(new, self._limit_size + 1)
        if new <= cap:
            raise UtilError(ErrorKind.BUFFER_FULL)
        self._capacity = new

    def _wake_one(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return

    def write(self, packet: bytes) -> int:
        """Queue a copy of ``packet`` and return its length."""
        length = len(packet)
        if length >= MAX_PACKET_SIZE:
            raise UtilError(ErrorKind.PACKET_TOO_BIG)
        if self._closed:
            raise UtilError(ErrorKind.BUFFER_CLOSED)
        if (self._limit_count > 0 and len(self._packets) >= self._limit_count) or (
            self._limit_size > 0
            and self._size + _HEADER_SIZE + length > self._limit_size
        ):
            raise UtilError(ErrorKind.BUFFER_FULL)
        while not self._fits(length):
            self._grow()

        self._packets.append(bytes(packet))
        self._size += length + _HEADER_SIZE
        self._wake_one()
        return length

    async def read(self, size: int | None = None, timeout: float | None = None) -> bytes:
        """Return the next packet, waiting until one is written.

        A packet longer than ``size`` is discarded and ``BUFFER_SHORT`` raised.
        Once closed and drained, ``BUFFER_CLOSED`` is raised. ``timeout`` is
        in seconds and bounds each wait.
        """
        while True:
            if self._packets:
                packet = self._packets.popleft()
                self._size -= len(packet) + _HEADER_SIZE
                if size is not None and len(packet) > size:
                    raise UtilError(ErrorKind.BUFFER_SHORT)
                return packet
            if self._closed:
                raise UtilError(ErrorKind.BUFFER_CLOSED)

            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await asyncio.wait_for(waiter, timeout)
            except asyncio.TimeoutError:
                raise UtilError(ErrorKind.TIMEOUT) from None
            finally:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)

    def close(self) -> None:
        """Refuse further writes and wake every waiting reader."""
        if self._closed:
            return
        self._closed = True
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def count(self) -> int:
        """Number of queued packets."""
        return len(self._packets)

    @property
    def size(self) -> int:
        """Queued bytes, counting two bytes of overhead per packet."""
        return self._size

    @property
    def limit_count(self) -> int:
        return self._limit_count

    @limit_count.setter
    def limit_count(self, limit: int) -> None:
        self._limit_count = limit

    @property
    def limit_size(self) -> int:
        return self._limit_size

    @limit_size.setter
    def limit_size(self, limit: int) -> None:
        self._limit_size = limit