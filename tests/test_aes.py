import io

import pytest

from zipcraft.aes import (
    AUTH_CODE_LENGTH,
    PWD_VERIFY_LENGTH,
    AesMode,
    AesReader,
    AesWriter,
)
from zipcraft.errors import InvalidArchiveError, InvalidPasswordError

PASSWORD = b"password"
LOREM = b"Lorem ipsum dolor sit amet, consectetur\n"


def _encrypt(mode, plaintext, password=PASSWORD):
    buf = io.BytesIO()
    writer = AesWriter(buf, mode, password)
    writer.write(plaintext)
    result = writer.finish()
    assert result is buf
    return buf.getvalue()


def _decrypt(mode, data, password=PASSWORD):
    reader = AesReader(io.BytesIO(data), mode, len(data)).validate(password)
    return reader.read()


def _roundtrip(mode, plaintext):
    return _decrypt(mode, _encrypt(mode, plaintext)) == plaintext


@pytest.mark.parametrize(
    "mode, plaintext",
    [
        (AesMode.AES256, b""),
        (AesMode.AES128, b"asdf\n"),
        (AesMode.AES192, b"asdf\n"),
        (AesMode.AES256, b"asdf\n"),
        (AesMode.AES128, LOREM),
        (AesMode.AES192, LOREM),
        (AesMode.AES256, LOREM),
    ],
)
def test_roundtrip(mode, plaintext):
    assert _roundtrip(mode, plaintext)


@pytest.mark.parametrize(
    "mode, key_len, salt_len",
    [(AesMode.AES128, 16, 8), (AesMode.AES192, 24, 12), (AesMode.AES256, 32, 16)],
)
def test_lengths(mode, key_len, salt_len):
    assert mode.key_length() == key_len
    assert mode.salt_length() == salt_len


def test_output_layout_length():
    data = _encrypt(AesMode.AES256, LOREM)
    assert len(data) == 16 + PWD_VERIFY_LENGTH + len(LOREM) + AUTH_CODE_LENGTH


def test_ciphertext_differs_from_plaintext():
    data = _encrypt(AesMode.AES128, LOREM)
    body = data[8 + PWD_VERIFY_LENGTH : -AUTH_CODE_LENGTH]
    assert len(body) == len(LOREM)
    assert body != LOREM


def test_chunked_write_and_read():
    buf = io.BytesIO()
    writer = AesWriter(buf, AesMode.AES192, PASSWORD)
    for start in range(0, len(LOREM), 7):
        assert writer.write(LOREM[start : start + 7]) == len(LOREM[start : start + 7])
    writer.finish()
    data = buf.getvalue()
    reader = AesReader(io.BytesIO(data), AesMode.AES192, len(data)).validate(PASSWORD)
    parts = []
    while True:
        chunk = reader.read(3)
        if not chunk:
            break
        parts.append(chunk)
    assert b"".join(parts) == LOREM
    assert reader.data_remaining == 0


def test_str_password_equals_bytes():
    password = "password"
    data = _encrypt(AesMode.AES256, LOREM, password=password)
    assert _decrypt(AesMode.AES256, data, password=PASSWORD) == LOREM


def test_tampered_verification_value_rejected():
    data = bytearray(_encrypt(AesMode.AES128, LOREM))
    data[8] ^= 0xFF
    with pytest.raises(InvalidPasswordError):
        _decrypt(AesMode.AES128, bytes(data))


def test_tampered_data_fails_authentication():
    data = bytearray(_encrypt(AesMode.AES256, LOREM))
    data[16 + PWD_VERIFY_LENGTH] ^= 0x01
    with pytest.raises(InvalidArchiveError):
        _decrypt(AesMode.AES256, bytes(data))


def test_tampered_auth_code_fails():
    data = bytearray(_encrypt(AesMode.AES256, b"asdf\n"))
    data[-1] ^= 0x01
    with pytest.raises(InvalidArchiveError):
        _decrypt(AesMode.AES256, bytes(data))


def test_verification_value_and_salt():
    data = _encrypt(AesMode.AES192, LOREM)
    verification, salt = AesReader(
        io.BytesIO(data), AesMode.AES192, len(data)
    ).verification_value_and_salt()
    assert salt == data[:12]
    assert verification == data[12:14]


def test_salt_is_random():
    first = _encrypt(AesMode.AES256, LOREM)
    second = _encrypt(AesMode.AES256, LOREM)
    assert first[:16] != second[:16]


def test_too_short_data_rejected():
    with pytest.raises(InvalidArchiveError):
        AesReader(io.BytesIO(b"\x00" * 5), AesMode.AES128, 5)


def test_truncated_header_rejected():
    data = _encrypt(AesMode.AES256, LOREM)
    reader = AesReader(io.BytesIO(data[:10]), AesMode.AES256, len(data))
    with pytest.raises(InvalidArchiveError):
        reader.validate(PASSWORD)