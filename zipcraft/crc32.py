"""A reader that checks the CRC-32 of the data it passes through."""

from __future__ import annotations

import zlib
from typing import BinaryIO

from zipcraft.errors import InvalidArchiveError


class Crc32Reader:
    """Wrap a binary reader and verify a CRC-32 checksum at end of data.

    The check is switched off for AE-2 encrypted entries, which store no CRC.
    """

    def __init__(self, inner: BinaryIO, checksum: int, ae2_encrypted: bool = False) -> None:
        self.inner = inner
        self.checksum = checksum
        self.enabled = not ae2_encrypted
        self._crc = 0

    def _matches(self) -> bool:
        return self._crc == self.checksum

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes; raise once EOF shows a checksum mismatch."""
        if size is None or size < 0:
            return self.readall()
        data = self.inner.read(size)
        if self.enabled:
            if not data and size > 0 and not self._matches():
                raise InvalidArchiveError("Invalid checksum")
            self._crc = zlib.crc32(data, self._crc)
        return data

    def readall(self) -> bytes:
        """Read everything that is left and verify the checksum."""
        data = self.inner.read()
        if self.enabled:
            self._crc = zlib.crc32(data, self._crc)
            if not self._matches():
                raise InvalidArchiveError("Invalid checksum")
        return data