"""Building blocks for ZIP archives: names, checksums, extra fields, compression and AES."""

__version__ = "2.6.1"

__all__ = [
    "aes",
    "aes_ctr",
    "compression",
    "cp437",
    "crc32",
    "errors",
    "extra_fields",
    "path",
]