"""Fixed-size bit set used to track which operations are linearized."""

from __future__ import annotations

_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1


class Bitset:
    """A set of bit positions stored in 64-bit words.

    The capacity is rounded up to a whole number of words; positions beyond
    the capacity raise IndexError.
    """

    __slots__ = ("_chunks", "_value")
    __hash__ = None  # mutable

    def __init__(self, bits: int) -> None:
        if bits < 0:
            raise ValueError("bitset size must not be negative")
        self._chunks = -(-bits // _WORD_BITS)
        self._value = 0

    def _check(self, pos: int) -> None:
        if not 0 <= pos < self._chunks * _WORD_BITS:
            raise IndexError(f"bit position {pos} out of range")

    def clone(self) -> Bitset:
        copy = Bitset(0)
        copy._chunks = self._chunks
        copy._value = self._value
        return copy

    def set(self, pos: int) -> Bitset:
        self._check(pos)
        self._value |= 1 << pos
        return self

    def clear(self, pos: int) -> Bitset:
        self._check(pos)
        self._value &= ~(1 << pos)
        return self

    def get(self, pos: int) -> bool:
        self._check(pos)
        return bool(self._value >> pos & 1)

    def popcount(self) -> int:
        return self._value.bit_count()

    def digest(self) -> int:
        """Cheap hash: the population count xor-ed with every word."""
        result = self.popcount()
        value = self._value
        while value:
            result ^= value & _WORD_MASK
            value >>= _WORD_BITS
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self._chunks == other._chunks and self._value == other._value

    def __repr__(self) -> str:
        return f"Bitset(words={self._chunks}, bits={self._value:#x})"