"""WinZip AES encryption and decryption of ZIP entry data.

An AES encrypted entry starts with a salt, whose length depends on the key
size, followed by a 2 byte password verification value, the encrypted data,
and a 10 byte authentication code (HMAC-SHA1-80 over the encrypted data).
With AE-2 the CRC field of the entry is not used.
"""

from __future__ import annotations

import enum
import hashlib
import hmac
import os
from typing import BinaryIO, Optional, Union

from zipcraft.aes_ctr import AesCtrZipKeyStream
from zipcraft.errors import InvalidArchiveError, InvalidPasswordError

PWD_VERIFY_LENGTH = 2
AUTH_CODE_LENGTH = 10
ITERATION_COUNT = 1000

_Password = Union[str, bytes, bytearray, memoryview]


class AesMode(enum.Enum):
    """AES key strength, with the values stored in the AES extra field."""

    AES128 = 1
    AES192 = 2
    AES256 = 3

    def key_length(self) -> int:
        """Return the AES key length in bytes."""
        return {AesMode.AES128: 16, AesMode.AES192: 24, AesMode.AES256: 32}[self]

    def salt_length(self) -> int:
        """Return the salt length in bytes, half the key length."""
        return self.key_length() // 2


def _password_bytes(password: _Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if len(data) != size:
        raise InvalidArchiveError("unexpected end of AES encrypted data")
    return data


def _derive_keys(mode: AesMode, password: bytes, salt: bytes) -> tuple[bytes, bytes, bytes]:
    key_length = mode.key_length()
    derived = hashlib.pbkdf2_hmac(
        "sha1", password, salt, ITERATION_COUNT, 2 * key_length + PWD_VERIFY_LENGTH
    )
    return (
        derived[:key_length],
        derived[key_length : 2 * key_length],
        derived[-PWD_VERIFY_LENGTH:],
    )


class AesReader:
    """Reader for AES encrypted entry data that has not been unlocked yet."""

    def __init__(self, reader: BinaryIO, aes_mode: AesMode, compressed_size: int) -> None:
        overhead = PWD_VERIFY_LENGTH + AUTH_CODE_LENGTH + aes_mode.salt_length()
        if compressed_size < overhead:
            raise InvalidArchiveError("AES encrypted data is too short")
        self.reader = reader
        self.aes_mode = aes_mode
        self.data_length = compressed_size - overhead

    def validate(self, password: _Password) -> "AesReaderValid":
        """Read the AES header and check the password against it.

        A wrong password still passes this check with a chance of 1 in 65536;
        the authentication code is checked once all data has been read.
        """
        salt = _read_exact(self.reader, self.aes_mode.salt_length())
        verification = _read_exact(self.reader, PWD_VERIFY_LENGTH)
        decrypt_key, hmac_key, pwd_verify = _derive_keys(
            self.aes_mode, _password_bytes(password), salt
        )
        if not hmac.compare_digest(verification, pwd_verify):
            raise InvalidPasswordError()
        return AesReaderValid(
            self.reader,
            self.data_length,
            AesCtrZipKeyStream(decrypt_key),
            hmac.new(hmac_key, digestmod=hashlib.sha1),
        )

    def verification_value_and_salt(self) -> tuple[bytes, bytes]:
        """Read the AES header and return the verification value and the salt."""
        salt = _read_exact(self.reader, self.aes_mode.salt_length())
        verification = _read_exact(self.reader, PWD_VERIFY_LENGTH)
        return verification, salt


class AesReaderValid:
    """Reader for AES encrypted data whose password passed the first check.

    The authentication code is verified when the last byte has been read.
    """

    def __init__(self, reader: BinaryIO, data_remaining: int, cipher: AesCtrZipKeyStream, mac) -> None:
        self.reader = reader
        self.data_remaining = data_remaining
        self._cipher = cipher
        self._mac = mac
        self._finalized = False
        if data_remaining == 0:
            self._finalize()

    def read(self, size: int = -1) -> bytes:
        """Read and decrypt up to ``size`` bytes, or all that is left if ``size`` < 0."""
        if size is None or size < 0:
            parts = []
            while self.data_remaining:
                chunk = self.read(self.data_remaining)
                if not chunk:
                    break
                parts.append(chunk)
            return b"".join(parts)
        if self.data_remaining == 0 or size == 0:
            return b""
        encrypted = self.reader.read(min(self.data_remaining, size))
        self.data_remaining -= len(encrypted)
        self._mac.update(encrypted)
        plain = self._cipher.crypt(encrypted)
        if self.data_remaining == 0:
            self._finalize()
        return plain

    def _finalize(self) -> None:
        if self._finalized:
            raise RuntimeError("authentication code was already checked")
        self._finalized = True
        stored = _read_exact(self.reader, AUTH_CODE_LENGTH)
        computed = self._mac.digest()[:AUTH_CODE_LENGTH]
        if not hmac.compare_digest(computed, stored):
            raise InvalidArchiveError(
                "Invalid authentication code, this could be due to an invalid "
                "password or errors in the data"
            )


class AesWriter:
    """Writer that AES encrypts entry data and appends the authentication code."""

    def __init__(self, writer: BinaryIO, aes_mode: AesMode, password: _Password) -> None:
        self.writer = writer
        self.aes_mode = aes_mode
        salt = os.urandom(aes_mode.salt_length())
        encryption_key, hmac_key, pwd_verify = _derive_keys(
            aes_mode, _password_bytes(password), salt
        )
        self._cipher = AesCtrZipKeyStream(encryption_key)
        self._mac = hmac.new(hmac_key, digestmod=hashlib.sha1)
        # Written lazily so that header metadata can be finished first.
        self._header: Optional[bytes] = salt + pwd_verify

    def _write_header(self) -> None:
        if self._header is not None:
            self.writer.write(self._header)
            self._header = None

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Encrypt and write ``data``; return the number of plaintext bytes taken."""
        self._write_header()
        encrypted = self._cipher.crypt(data)
        self._mac.update(encrypted)
        self.writer.write(encrypted)
        return len(encrypted)

    def flush(self) -> None:
        """Flush the underlying writer."""
        flush = getattr(self.writer, "flush", None)
        if flush is not None:
            flush()

    def finish(self) -> BinaryIO:
        """Write the authentication code and return the underlying writer."""
        self._write_header()
        self.writer.write(self._mac.digest()[:AUTH_CODE_LENGTH])
        return self.writer