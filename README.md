# zipcraft

Low-level pieces for working with ZIP archive data in Python.

## Modules

- `zipcraft.cp437`: `from_cp437` decodes names stored in IBM code page 437;
  `to_char` maps one byte to its character.
- `zipcraft.crc32`: `Crc32Reader` wraps a binary reader and checks a CRC-32
  once the data ends (`read`, `readall`). The check can be switched off for
  AE-2 encrypted entries with `ae2_encrypted=True`.
- `zipcraft.path`: `simplified_components` reduces an entry path to its normal
  components, resolving `..`, and returns `None` for absolute paths or paths
  that climb above their start.
- `zipcraft.extra_fields`: `ExtendedTimestamp`, `Ntfs` and `UnicodeExtraField`,
  each with a `from_reader(reader, length)` class method;
  `UnicodeExtraField.unwrap_valid` checks the stored CRC against the plain
  header field.
- `zipcraft.compression`: `CompressionMethod`, identified by its 16-bit code,
  with named constants such as `STORE`, `DEFLATE`, `BZIP2`, `LZMA`, `ZSTD`,
  `XZ` and `AES`, plus `SUPPORTED_COMPRESSION_METHODS`. `Decompressor` is a
  readable stream for the methods stored, deflate, bzip2, zstd and xz; any
  other method raises `UnsupportedArchiveError`.
- `zipcraft.aes_ctr`: `AesCtrZipKeyStream`, the little-endian, nonce-free
  AES-CTR key stream used by WinZip AES.
- `zipcraft.aes`: `AesMode` (`AES128`, `AES192`, `AES256`), `AesWriter`,
  `AesReader` and `AesReaderValid` for WinZip AES encrypted entry data with a
  PBKDF2 key, password verification value and HMAC-SHA1-80 authentication code.
- `zipcraft.errors`: `ZipError` and its subclasses `InvalidArchiveError`,
  `UnsupportedArchiveError` and `InvalidPasswordError`.

## Installation

```
pip install zipcraft
```

## Examples

Decode a CP437 file name:

```python
from zipcraft.cp437 import from_cp437

assert from_cp437(b"Cura\x87ao") == "Curaçao"
```

Check data against a CRC-32 while reading it:

```python
import io
from zipcraft.crc32 import Crc32Reader

reader = Crc32Reader(io.BytesIO(b"1234"), 0x9BE3E0A3)
data = reader.readall()  # raises InvalidArchiveError on a mismatch
```

Decompress deflate data:

```python
import io
import zlib
from zipcraft.compression import CompressionMethod, Decompressor

packer = zlib.compressobj(wbits=-zlib.MAX_WBITS)
raw = packer.compress(b"hello") + packer.flush()
assert Decompressor(io.BytesIO(raw), CompressionMethod.DEFLATE).read() == b"hello"
```

Encrypt and decrypt with WinZip AES:

```python
import io
from zipcraft.aes import AesMode, AesReader, AesWriter

password = b"password"
buffer = io.BytesIO()
writer = AesWriter(buffer, AesMode.AES256, password)
writer.write(b"hello")
writer.finish()

buffer.seek(0)
reader = AesReader(buffer, AesMode.AES256, len(buffer.getvalue())).validate(password)
assert reader.read() == b"hello"
```

A wrong password raises `InvalidPasswordError`; a failed authentication code or
truncated data raises `InvalidArchiveError`.

## What this package does not do

It has no archive reader or writer: it does not locate the central directory,
list entries, extract files or build new archives, and it has no command-line
tool. Its parts are meant to be used by code that handles the archive layout
itself. Deflate64 and LZMA entries cannot be decompressed, and writing
compressed data is left to the standard library's compressors.

## Running the tests

```
pip install -e .[test]
pytest
```