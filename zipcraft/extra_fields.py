"""Parsers for the extra fields carried in ZIP headers."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union

from zipcraft.errors import InvalidArchiveError, UnsupportedArchiveError


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if len(data) != size:
        raise InvalidArchiveError("unexpected end of extra field data")
    return data


def _read_u16(reader: BinaryIO) -> int:
    return struct.unpack("<H", _read_exact(reader, 2))[0]


def _read_u32(reader: BinaryIO) -> int:
    return struct.unpack("<I", _read_exact(reader, 4))[0]


def _read_u64(reader: BinaryIO) -> int:
    return struct.unpack("<Q", _read_exact(reader, 8))[0]


@dataclass(frozen=True)
class ExtendedTimestamp:
    """Extended timestamp extra field (0x5455); times are UNIX epoch seconds."""

    mod_time: Optional[int] = None
    ac_time: Optional[int] = None
    cr_time: Optional[int] = None

    @classmethod
    def from_reader(cls, reader: BinaryIO, length: int) -> "ExtendedTimestamp":
        """Parse the field body; ``length`` is the already-read field size."""
        flags = _read_exact(reader, 1)[0]
        # A length of 5 means only the modification time, whatever the flags say.
        if length != 5 and length != 1 + 4 * bin(flags).count("1"):
            raise UnsupportedArchiveError(
                "flags and len don't match in extended timestamp field"
            )
        if flags & 0b11111000:
            raise UnsupportedArchiveError(
                "found unsupported timestamps in the extended timestamp header"
            )
        mod_time = _read_u32(reader) if (flags & 0b001) or length == 5 else None
        ac_time = _read_u32(reader) if (flags & 0b010) and length > 5 else None
        cr_time = _read_u32(reader) if (flags & 0b100) and length > 5 else None
        return cls(mod_time=mod_time, ac_time=ac_time, cr_time=cr_time)


@dataclass(frozen=True)
class Ntfs:
    """NTFS extra field (0x000a); times are 100 ns intervals since 1601-01-01 UTC."""

    mtime: int
    atime: int
    ctime: int

    @classmethod
    def from_reader(cls, reader: BinaryIO, length: int) -> "Ntfs":
        """Parse the field body; ``length`` is the already-read field size."""
        if length != 32:
            raise UnsupportedArchiveError("NTFS extra field has an unsupported length")
        _read_u32(reader)  # reserved
        tag = _read_u16(reader)
        if tag != 0x0001:
            raise UnsupportedArchiveError(
                "NTFS extra field has an unsupported attribute tag"
            )
        size = _read_u16(reader)
        if size != 24:
            raise UnsupportedArchiveError(
                "NTFS extra field has an unsupported attribute size"
            )
        mtime = _read_u64(reader)
        atime = _read_u64(reader)
        ctime = _read_u64(reader)
        return cls(mtime=mtime, atime=atime, ctime=ctime)


@dataclass(frozen=True)
class UnicodeExtraField:
    """Info-ZIP Unicode path (0x7075) or comment (0x6375) extra field."""

    crc32: int
    content: bytes

    @classmethod
    def from_reader(cls, reader: BinaryIO, length: int) -> "UnicodeExtraField":
        """Parse the field body; ``length`` is the already-read field size."""
        _read_exact(reader, 1)  # version
        crc32 = _read_u32(reader)
        content_len = length - 5
        if content_len < 0:
            raise InvalidArchiveError("Unicode extra field is too small")
        content = _read_exact(reader, content_len)
        return cls(crc32=crc32, content=content)

    def unwrap_valid(self, ascii_field: bytes) -> bytes:
        """Check the CRC against the plain header field and return the content."""
        if zlib.crc32(ascii_field) != self.crc32:
            raise InvalidArchiveError("CRC32 checksum failed on Unicode extra field")
        return self.content


ExtraField = Union[Ntfs, ExtendedTimestamp]