"""Simulated network between two endpoints, with drop, reorder and filter controls."""

from __future__ import annotations

import asyncio
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from .conn import UNSPECIFIED_ADDR, Address, AddressLike, Conn
from .errors import ErrorKind, UtilError

TICK_WAIT = 10e-6
INBOX_CAPACITY = 1024

FilterFn = Callable[[bytes], bool]


def inverse(queue: deque) -> bool:
    """Reverse ``queue`` in place; return False when it holds fewer than two items."""
    if len(queue) < 2:
        return False
    queue.reverse()
    return True


@dataclass
class _Side:
    filter_cb: Optional[FilterFn] = None
    queue: deque = field(default_factory=deque)
    stack: deque = field(default_factory=deque)
    drop_nwrites: int = 0
    reorder_nwrites: int = 0
    inbox: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(INBOX_CAPACITY))


class Bridge:
    """A network between two endpoints; packets sent on side ``i`` reach side ``1 - i``."""

    def __init__(self, filter_cb0: Optional[FilterFn] = None, filter_cb1: Optional[FilterFn] = None) -> None:
        self._sides = (_Side(filter_cb=filter_cb0), _Side(filter_cb=filter_cb1))

    def _inbox(self, side: int) -> asyncio.Queue:
        return self._sides[side].inbox

    def queue_len(self, side: int) -> int:
        """Number of packets queued on ``side``."""
        return len(self._sides[side].queue)

    async def push(self, data: bytes, side: int) -> int:
        """Queue ``data`` written by ``side``; return its length."""
        # Pace writes like ticks so the queue cannot run away.
        await asyncio.sleep(TICK_WAIT)
        s = self._sides[side]
        packet = bytes(data)
        if s.drop_nwrites > 0:
            s.drop_nwrites -= 1
        elif s.reorder_nwrites > 0:
            s.stack.append(packet)
            s.reorder_nwrites -= 1
            if s.reorder_nwrites == 0 and inverse(s.stack):
                s.queue.extend(s.stack)
                s.stack.clear()
        elif s.filter_cb is not None:
            if s.filter_cb(packet):
                s.queue.append(packet)
        else:
            s.queue.append(packet)
        return len(data)

    def reorder(self, side: int) -> bool:
        """Reverse the order of the packets queued on ``side``."""
        return inverse(self._sides[side].queue)

    def drop_offset(self, side: int, offset: int, n: int) -> None:
        """Drop ``n`` queued packets of ``side`` starting at ``offset``."""
        queue = self._sides[side].queue
        if offset + n > len(queue):
            raise IndexError(
                f"range end index {offset + n} out of range for queue of length {len(queue)}"
            )
        items = list(queue)
        del items[offset:offset + n]
        queue.clear()
        queue.extend(items)

    def drop_next_nwrites(self, side: int, n: int) -> None:
        """Drop the next ``n`` packets written by ``side``."""
        self._sides[side].drop_nwrites = n

    def reorder_next_nwrites(self, side: int, n: int) -> None:
        """Reverse the order of the next ``n`` packets written by ``side``."""
        self._sides[side].reorder_nwrites = n

    def clear(self) -> None:
        """Discard every queued packet on both sides."""
        for s in self._sides:
            s.queue.clear()

    async def tick(self) -> int:
        """Deliver at most one queued packet per direction; return how many moved."""
        moved = 0
        for side, s in enumerate(self._sides):
            if s.queue:
                packet = s.queue.popleft()
                moved += 1
                await self._sides[1 - side].inbox.put(packet)
        return moved

    async def process(self) -> None:
        """Tick until both queues are empty."""
        while True:
            await asyncio.sleep(TICK_WAIT)
            await self.tick()
            if self.queue_len(0) == 0 and self.queue_len(1) == 0:
                break


class BridgeConn(Conn):
    """One endpoint of a :class:`Bridge`."""

    def __init__(self, bridge: Bridge, side: int, loss_chance: int = 0) -> None:
        self._bridge = bridge
        self._side = side
        self._loss_chance = loss_chance

    async def connect(self, addr: AddressLike) -> None:
        raise UtilError(ErrorKind.IO, "Not applicable")

    async def recv(self, size: Optional[int] = None) -> bytes:
        data = await self._bridge._inbox(self._side).get()
        return data[:size]

    async def recv_from(self, size: Optional[int] = None) -> tuple[bytes, Address]:
        return await self.recv(size), UNSPECIFIED_ADDR

    async def send(self, data: bytes) -> int:
        if random.getrandbits(8) % 100 < self._loss_chance:
            return len(data)
        return await self._bridge.push(data, self._side)

    async def send_to(self, data: bytes, target: AddressLike) -> int:
        raise UtilError(ErrorKind.IO, "Not applicable")

    async def local_addr(self) -> Address:
        raise UtilError(ErrorKind.IO, "Addr Not Available")

    async def remote_addr(self) -> Optional[Address]:
        return None

    async def close(self) -> None:
        return None


def create_bridge(
    loss_chance: int = 0,
    filter_cb0: Optional[FilterFn] = None,
    filter_cb1: Optional[FilterFn] = None,
) -> tuple[Bridge, BridgeConn, BridgeConn]:
    """Return a bridge and its two endpoints.

    ``loss_chance`` is the percentage of sends silently lost; the filters
    decide per side whether a written packet is queued.
    """
    bridge = Bridge(filter_cb0, filter_cb1)
    return bridge, BridgeConn(bridge, 0, loss_chance), BridgeConn(bridge, 1, loss_chance)