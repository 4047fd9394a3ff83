"""The little-endian, nonce-free AES-CTR key stream used by WinZip AES."""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_BLOCK_SIZE = 16
_COUNTER_MASK = (1 << 128) - 1
_KEY_KINDS = {16: "Aes128", 24: "Aes192", 32: "Aes256"}


class AesCtrZipKeyStream:
    """AES-CTR key stream with a little-endian counter starting at 1.

    Encryption and decryption are the same operation: XOR with the stream.
    """

    def __init__(self, key: bytes) -> None:
        key = bytes(key)
        if len(key) not in _KEY_KINDS:
            raise ValueError(f"invalid AES key length: {len(key)}")
        self.kind = _KEY_KINDS[len(key)]
        self.counter = 1
        self._encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
        self._block = bytes(AES_BLOCK_SIZE)
        self._pos = AES_BLOCK_SIZE

    def __repr__(self) -> str:
        return f"AesCtrZipKeyStream<{self.kind}>(counter: {self.counter})"

    def crypt(self, data: bytes | bytearray | memoryview) -> bytes:
        """Return ``data`` XOR-ed with the next bytes of the key stream."""
        data = bytes(data)
        length = len(data)
        if not length:
            return b""
        stream = self._block[self._pos:]
        needed = length - len(stream)
        if needed > 0:
            blocks = -(-needed // AES_BLOCK_SIZE)
            counters = b"".join(
                ((self.counter + i) & _COUNTER_MASK).to_bytes(AES_BLOCK_SIZE, "little")
                for i in range(blocks)
            )
            fresh = self._encryptor.update(counters)
            self.counter = (self.counter + blocks) & _COUNTER_MASK
            stream += fresh
            self._block = fresh[-AES_BLOCK_SIZE:]
            self._pos = AES_BLOCK_SIZE - (len(stream) - length)
        else:
            self._pos += length
        mixed = int.from_bytes(data, "little") ^ int.from_bytes(stream[:length], "little")
        return mixed.to_bytes(length, "little")