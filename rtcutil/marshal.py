"""Interfaces for types with a binary wire form, plus sized buffer views."""

from __future__ import annotations

import abc
from typing import Sized, Union

from .errors import ErrorKind, UtilError

BytesLike = Union[bytes, bytearray, memoryview]


class Marshal(abc.ABC):
    """A value that writes itself into a buffer of known size."""

    @abc.abstractmethod
    def marshal_size(self) -> int:
        """Number of bytes the wire form takes."""

    @abc.abstractmethod
    def marshal_to(self, buf: bytearray) -> int:
        """Write the wire form into ``buf`` and return the bytes written."""

    def marshal(self) -> bytes:
        """Return the wire form; it must fill exactly :meth:`marshal_size` bytes."""
        expected = self.marshal_size()
        buf = bytearray(expected)
        written = self.marshal_to(buf)
        if written != expected:
            raise UtilError(
                ErrorKind.OTHER,
                f"marshal_to output size {written}, but expect {expected}",
            )
        return bytes(buf)


class Unmarshal(abc.ABC):
    """A value that can be read back from its wire form."""

    @classmethod
    @abc.abstractmethod
    def unmarshal(cls, buf: BytesLike):
        """Build an instance from ``buf``."""


def _is_empty(buf: Sized) -> bool:
    check = getattr(buf, "is_empty", None)
    if callable(check):
        return bool(check())
    return len(buf) == 0


class Chain:
    """Two buffers seen back to back; its length is the sum of both."""

    def __init__(self, first: Sized, last: Sized) -> None:
        self.first = first
        self.last = last

    def __len__(self) -> int:
        return len(self.first) + len(self.last)

    def is_empty(self) -> bool:
        return _is_empty(self.first) and _is_empty(self.last)

    def __bytes__(self) -> bytes:
        return bytes(self.first) + bytes(self.last)

    def __repr__(self) -> str:
        return f"Chain({self.first!r}, {self.last!r})"


class Take:
    """At most ``limit`` leading bytes of ``inner``."""

    def __init__(self, inner: Sized, limit: int) -> None:
        self.inner = inner
        self.limit = limit

    def __len__(self) -> int:
        return min(self.limit, len(self.inner))

    def is_empty(self) -> bool:
        return self.limit == 0 or _is_empty(self.inner)

    def __bytes__(self) -> bytes:
        return bytes(self.inner)[: self.limit]

    def __repr__(self) -> str:
        return f"Take({self.inner!r}, limit={self.limit})"