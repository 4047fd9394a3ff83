"""Decoding of IBM code page 437 text, the legacy ZIP filename encoding."""

from __future__ import annotations


def to_char(byte: int) -> str:
    """Return the character that a single code page 437 byte stands for."""
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"byte value out of range: {byte}")
    return bytes((byte,)).decode("cp437")


def from_cp437(data: bytes | bytearray | memoryview) -> str:
    """Decode a byte string encoded in code page 437."""
    raw = bytes(data)
    if raw.isascii():
        return raw.decode("ascii")
    return raw.decode("cp437")