"""Fixed-width multi-word integer used for sliding-window bookkeeping."""

from __future__ import annotations

_WORD = 64


class FixedBigInt:
    """An unsigned integer of fixed width, shown as 64-bit hex words."""

    def __init__(self, n: int) -> None:
        self._n = n
        self._words = max((n + _WORD - 1) // _WORD, 1)
        top_bits = _WORD if n % _WORD == 0 else _WORD - n % _WORD
        self._width = (self._words - 1) * _WORD + top_bits
        self._mask = (1 << self._width) - 1
        self._value = 0

    def lsh(self, n: int) -> None:
        """Shift left by ``n`` bits, dropping bits beyond the width."""
        if n == 0:
            return
        if n >= self._width:
            self._value = 0
        else:
            self._value = (self._value << n) & self._mask

    def bit(self, i: int) -> int:
        """Return the ``i``-th bit, or 0 when ``i`` is out of range."""
        if i >= self._n:
            return 0
        return (self._value >> i) & 1

    def set_bit(self, i: int) -> None:
        """Set the ``i``-th bit to 1; out-of-range indices are ignored."""
        if i >= self._n:
            return
        self._value |= 1 << i

    def __str__(self) -> str:
        return format(self._value, f"0{self._words * 16}X")

    def __repr__(self) -> str:
        return f"FixedBigInt(n={self._n}, value=0x{self})"