"""Exceptions raised while reading or writing ZIP archives."""


class ZipError(Exception):
    """Base class for every error reported by this package."""


class InvalidArchiveError(ZipError):
    """The archive or one of its records is malformed."""


class UnsupportedArchiveError(ZipError):
    """The archive uses a feature that is not supported."""


class InvalidPasswordError(ZipError):
    """The password given for an encrypted entry is wrong."""

    def __init__(self, message: str = "invalid password for file in archive") -> None:
        super().__init__(message)