#!/usr/bin/env python3
"""
Groups of four bytes that are read as unsigned 32 bit integers.

The four bytes are stored exactly as they appear in a file. The byte order is
only applied when the value is read back, so the same group can be read
as big-endian or as little-endian.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ByteQuad:
    """
    Four bytes (each 0..255) in file order.

    Attributes:
        a: first byte
        b: second byte
        c: third byte
        d: fourth byte
    """
    a: int
    b: int
    c: int
    d: int

    def __post_init__(self):
        """Normalize signed byte values (-128..-1) to their unsigned counterparts."""
        for name in ("a", "b", "c", "d"):
            object.__setattr__(self, name, getattr(self, name) & 0xFF)

    @classmethod
    def from_significance(cls, big: int, bigish: int, lowish: int, low: int, big_endian: bool) -> "ByteQuad":
        """
        Build from bytes ordered from most significant to least significant.

        Args:
            big: most significant byte
            bigish: second most significant byte
            lowish: third most significant byte
            low: least significant byte
            big_endian: True to store the most significant byte first, False for the reverse order
        """
        if big_endian:
            return cls(big, bigish, lowish, low)
        return cls(low, lowish, bigish, big)

    @classmethod
    def from_uint(cls, value: int, big_endian: bool) -> "ByteQuad":
        """Build from an unsigned 32 bit integer, stored in the given byte order."""
        return cls.from_significance(
            (value >> 24) & 0xFF,
            (value >> 16) & 0xFF,
            (value >> 8) & 0xFF,
            value & 0xFF,
            big_endian,
        )

    def uint_value(self, big_endian: bool) -> int:
        """Read the four bytes as unsigned 32 bit integer in the given byte order."""
        if big_endian:
            return (self.a << 24) | (self.b << 16) | (self.c << 8) | self.d
        return (self.d << 24) | (self.c << 16) | (self.b << 8) | self.a

    def to_bytes(self) -> bytes:
        return bytes((self.a, self.b, self.c, self.d))


def quads_to_bytes(quads: list[ByteQuad]) -> bytes:
    """Concatenate the bytes of all quads."""
    return b"".join(quad.to_bytes() for quad in quads)


def bytes_to_quads(data: bytes) -> list[ByteQuad]:
    """
    Split bytes into consecutive groups of four.

    If the length is not a multiple of four, the remaining 1-3 bytes at the end are ignored.
    """
    return [ByteQuad(*data[i:i + 4]) for i in range(0, len(data) - 3, 4)]


def read_quad_at(data: bytes, offset: int) -> ByteQuad:
    """
    Read the four bytes starting at offset.

    Raises:
        IndexError: if fewer than four bytes are available at offset
    """
    if offset < 0 or offset + 4 > len(data):
        raise IndexError(f"Can't read four bytes at offset {offset}, only {len(data)} bytes available")
    return ByteQuad(*data[offset:offset + 4])
