"""
keyotp.core
===========

TOTP generation (RFC 4226 / RFC 6238, HMAC-SHA1) for named secrets.

Core algorithm
--------------
- HOTP value: Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(timestamp / period), 30 s by default
- Dynamic truncation: 4 bytes of the HMAC picked at offset (last byte & 0x0F)

Quick use
---------
>>> from keyotp.core import base32, otp_core
>>> otp_core.generate(b"12345678901234567890", 59, period=30, digits=8)
'94287082'
>>> otp_core.totp(base32.encode(b"12345678901234567890"), 59, digits=8)
('94287082', 1)
"""

from . import base32, otp_core
from .errors import (
    BackendUnavailable,
    DuplicateName,
    InvalidName,
    InvalidSecret,
    NotFound,
    OtpError,
    UnsupportedParameters,
)
from .generation import GenerationOrchestrator, GenerationResult
from .models import SecretEntry

__all__ = [
    "base32",
    "otp_core",
    "BackendUnavailable",
    "DuplicateName",
    "InvalidName",
    "InvalidSecret",
    "NotFound",
    "OtpError",
    "UnsupportedParameters",
    "GenerationOrchestrator",
    "GenerationResult",
    "SecretEntry",
]
