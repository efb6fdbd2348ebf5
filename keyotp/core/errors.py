"""Exceptions raised by the keyotp core and stores."""

from typing import Optional


class OtpError(Exception):
    """Base class for every keyotp failure. `name` is the entry involved, if any."""

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name


class InvalidSecret(OtpError, ValueError):
    """Malformed or empty Base32 secret."""


class InvalidName(OtpError, ValueError):
    """Empty or reserved entry name."""


class UnsupportedParameters(OtpError, ValueError):
    """digits / period / algorithm outside the supported range."""


class DuplicateName(OtpError):
    pass


class NotFound(OtpError):
    pass


class BackendUnavailable(OtpError):
    """The credential backend could not be reached, timed out, or failed."""
