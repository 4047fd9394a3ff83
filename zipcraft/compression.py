"""Compression methods defined for ZIP entries and a streaming decompressor."""

from __future__ import annotations

import bz2
import lzma
import zlib
from dataclasses import dataclass
from typing import BinaryIO, ClassVar

import zstandard

from zipcraft.errors import InvalidArchiveError, UnsupportedArchiveError

_NAMES = {
    0: "Stored",
    8: "Deflated",
    9: "Deflate64",
    12: "Bzip2",
    14: "Lzma",
    93: "Zstd",
    95: "Xz",
    99: "Aes",
}

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class CompressionMethod:
    """The storage format of one entry, identified by its 16-bit method code."""

    code: int

    STORE: ClassVar["CompressionMethod"]
    SHRINK: ClassVar["CompressionMethod"]
    REDUCE_1: ClassVar["CompressionMethod"]
    REDUCE_2: ClassVar["CompressionMethod"]
    REDUCE_3: ClassVar["CompressionMethod"]
    REDUCE_4: ClassVar["CompressionMethod"]
    IMPLODE: ClassVar["CompressionMethod"]
    DEFLATE: ClassVar["CompressionMethod"]
    DEFLATE64: ClassVar["CompressionMethod"]
    PKWARE_IMPLODE: ClassVar["CompressionMethod"]
    BZIP2: ClassVar["CompressionMethod"]
    LZMA: ClassVar["CompressionMethod"]
    IBM_ZOS_CMPSC: ClassVar["CompressionMethod"]
    IBM_TERSE: ClassVar["CompressionMethod"]
    ZSTD_DEPRECATED: ClassVar["CompressionMethod"]
    ZSTD: ClassVar["CompressionMethod"]
    MP3: ClassVar["CompressionMethod"]
    XZ: ClassVar["CompressionMethod"]
    JPEG: ClassVar["CompressionMethod"]
    WAVPACK: ClassVar["CompressionMethod"]
    PPMD: ClassVar["CompressionMethod"]
    AES: ClassVar["CompressionMethod"]

    def __post_init__(self) -> None:
        if not 0 <= self.code <= 0xFFFF:
            raise ValueError(f"compression method code out of range: {self.code}")

    @classmethod
    def from_u16(cls, value: int) -> "CompressionMethod":
        """Return the method for a 16-bit code as stored in a header."""
        return cls(value)

    def to_u16(self) -> int:
        """Return the 16-bit code written to headers."""
        return self.code

    @classmethod
    def default(cls) -> "CompressionMethod":
        """Return the method used when none is chosen."""
        return cls.DEFLATE

    @property
    def is_known(self) -> bool:
        """Whether the method has a name of its own rather than being unsupported."""
        return self.code in _NAMES

    def __str__(self) -> str:
        name = _NAMES.get(self.code)
        return name if name is not None else f"Unsupported({self.code})"

    def __repr__(self) -> str:
        return f"CompressionMethod.{self}"


CompressionMethod.STORE = CompressionMethod(0)
CompressionMethod.SHRINK = CompressionMethod(1)
CompressionMethod.REDUCE_1 = CompressionMethod(2)
CompressionMethod.REDUCE_2 = CompressionMethod(3)
CompressionMethod.REDUCE_3 = CompressionMethod(4)
CompressionMethod.REDUCE_4 = CompressionMethod(5)
CompressionMethod.IMPLODE = CompressionMethod(6)
CompressionMethod.DEFLATE = CompressionMethod(8)
CompressionMethod.DEFLATE64 = CompressionMethod(9)
CompressionMethod.PKWARE_IMPLODE = CompressionMethod(10)
CompressionMethod.BZIP2 = CompressionMethod(12)
CompressionMethod.LZMA = CompressionMethod(14)
CompressionMethod.IBM_ZOS_CMPSC = CompressionMethod(16)
CompressionMethod.IBM_TERSE = CompressionMethod(18)
CompressionMethod.ZSTD_DEPRECATED = CompressionMethod(20)
CompressionMethod.ZSTD = CompressionMethod(93)
CompressionMethod.MP3 = CompressionMethod(94)
CompressionMethod.XZ = CompressionMethod(95)
CompressionMethod.JPEG = CompressionMethod(96)
CompressionMethod.WAVPACK = CompressionMethod(97)
CompressionMethod.PPMD = CompressionMethod(98)
CompressionMethod.AES = CompressionMethod(99)

SUPPORTED_COMPRESSION_METHODS: tuple[CompressionMethod, ...] = (
    CompressionMethod.STORE,
    CompressionMethod.DEFLATE,
    CompressionMethod.BZIP2,
    CompressionMethod.ZSTD,
    CompressionMethod.XZ,
)

_DECODE_ERRORS = (zlib.error, lzma.LZMAError, OSError, EOFError, zstandard.ZstdError)


class Decompressor:
    """Readable stream that decompresses an entry's data with a given method."""

    def __init__(self, reader: BinaryIO, method: CompressionMethod) -> None:
        self.reader = reader
        self.method = method
        self._pending = bytearray()
        self._done = False
        self._engine = None
        self._zstd = None
        if method == CompressionMethod.STORE:
            pass
        elif method == CompressionMethod.DEFLATE:
            self._engine = zlib.decompressobj(-zlib.MAX_WBITS)
        elif method == CompressionMethod.BZIP2:
            self._engine = bz2.BZ2Decompressor()
        elif method == CompressionMethod.XZ:
            self._engine = lzma.LZMADecompressor(format=lzma.FORMAT_XZ)
        elif method == CompressionMethod.ZSTD:
            self._zstd = zstandard.ZstdDecompressor().stream_reader(reader)
        else:
            raise UnsupportedArchiveError("Compression method not supported")

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` decompressed bytes, or everything if ``size`` < 0."""
        if size is None:
            size = -1
        if size == 0:
            return b""
        try:
            if self._zstd is not None:
                return self._read_zstd(size)
            if self._engine is None:
                return self.reader.read(size)
            return self._read_engine(size)
        except _DECODE_ERRORS as exc:
            raise InvalidArchiveError(f"corrupt {self.method} data: {exc}") from exc

    def _read_zstd(self, size: int) -> bytes:
        if size > 0:
            return self._zstd.read(size)
        parts = []
        while True:
            chunk = self._zstd.read(_CHUNK_SIZE)
            if not chunk:
                return b"".join(parts)
            parts.append(chunk)

    def _read_engine(self, size: int) -> bytes:
        while not self._done and (size < 0 or len(self._pending) < size):
            chunk = self.reader.read(_CHUNK_SIZE)
            if not chunk:
                if not self._engine.eof:
                    raise InvalidArchiveError("compressed data ended unexpectedly")
                self._done = True
                break
            self._pending += self._engine.decompress(chunk)
            if self._engine.eof:
                self._done = True
        if size < 0:
            out = bytes(self._pending)
            self._pending.clear()
        else:
            out = bytes(self._pending[:size])
            del self._pending[:size]
        return out