"""
otp_core.py — TOTP engine (RFC 4226 derivation, RFC 6238 time counter).

Goals:
- Pure functions only: no clock reads, no files, no keyring. The caller
  passes the unix time in, which keeps every code reproducible in tests.
- HMAC-SHA1 is the only supported hash (what Google Authenticator and most
  issuers use with the default otpauth parameters).

Flow for one code:
    key bytes + counter (8-byte big-endian)
        -> HMAC-SHA1                       20-byte digest
        -> dynamic truncation              31-bit integer
        -> mod 10^digits, zero-padded      "094287"
"""

import hashlib
import hmac
import struct
from typing import Optional, Tuple

import pyotp

from .. import config
from . import base32
from .errors import UnsupportedParameters


# --- Parameter checks ------------------------------------------------------
def check_parameters(digits: int, period: int, algorithm: str = config.DEFAULT_ALGORITHM) -> None:
    """
    Validate the code parameters of an entry.

    Raises:
        UnsupportedParameters: digits outside 6-8, a period that is not a
            positive integer, or an algorithm other than SHA1
    """
    if isinstance(digits, bool) or not isinstance(digits, int) or digits not in config.SUPPORTED_DIGITS:
        raise UnsupportedParameters("digits must be between 6 and 8, got {!r}".format(digits))
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise UnsupportedParameters("period must be a positive integer, got {!r}".format(period))
    if str(algorithm).upper() != config.DEFAULT_ALGORITHM:
        raise UnsupportedParameters("unsupported algorithm {!r}, only SHA1 is available".format(algorithm))


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Convert the counter to the 8-byte big-endian message RFC 4226 expects.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 section 5.3 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes from offset, clear the MSB (0x7F) of the first one
    - return them as an unsigned 31-bit integer

    Arguments:
        hmac_digest: HMAC digest (SHA1 -> 20 bytes)
    """
    # offset in range 0..15, the 4 bytes always fit in a 20-byte SHA1 digest
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def counter_for(unix_time: int, period: int = config.DEFAULT_TIME_STEP) -> int:
    """TOTP counter: floor(unix_time / period)."""
    if unix_time < 0:
        raise UnsupportedParameters("unix_time must not be negative, got {!r}".format(unix_time))
    return int(unix_time) // period


def seconds_remaining(unix_time: int, period: int = config.DEFAULT_TIME_STEP) -> int:
    """Seconds until the code for `unix_time` expires (1..period)."""
    return period - (int(unix_time) % period)


def derive_code(key: bytes, counter: int, digits: int = config.DEFAULT_DIGITS) -> str:
    """
    HOTP value of `key` at `counter` (RFC 4226), as a zero-padded string.

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC-SHA1(key, message); hmac pads keys shorter than the block size
    3. Dynamic truncate -> dbc
    4. otp = dbc % 10^digits
    5. Zero-pad to exactly `digits` characters
    """
    digest = hmac.new(key, int_to_bytes(counter), hashlib.sha1).digest()
    dbc = dynamic_truncate(digest)
    return str(dbc % (10 ** digits)).zfill(digits)


def generate(
    key: bytes,
    unix_time: int,
    period: int = config.DEFAULT_TIME_STEP,
    digits: int = config.DEFAULT_DIGITS,
) -> str:
    """
    TOTP code of `key` at `unix_time` (RFC 6238, T0 = 0).

    Arguments:
        key: raw key bytes (already Base32-decoded)
        unix_time: absolute epoch seconds from a reliable clock
        period: time step X in seconds, default 30
        digits: code length, 6 to 8

    Returns:
        str: the code, exactly `digits` decimal characters

    Raises:
        UnsupportedParameters: bad digits/period or a negative unix_time
    """
    check_parameters(digits, period)
    return derive_code(key, counter_for(unix_time, period), digits)


def totp(
    secret_b32: str,
    timestamp: int,
    timestep: int = config.DEFAULT_TIME_STEP,
    digits: int = config.DEFAULT_DIGITS,
) -> Tuple[str, int]:
    """
    Decode a Base32 secret and compute its TOTP code.

    Returns:
        (code, remaining_seconds)

    Raises:
        InvalidSecret: if the secret is not valid Base32
        UnsupportedParameters: bad digits/period or a negative timestamp
    """
    key = base32.decode(secret_b32)
    code = generate(key, timestamp, timestep, digits)
    return code, seconds_remaining(timestamp, timestep)


# --- Provisioning helpers --------------------------------------------------
def generate_base32_secret() -> str:
    """A fresh random secret of SECRET_BYTES bytes as unpadded Base32 (32 characters)."""
    return pyotp.random_base32(length=config.SECRET_BYTES * 8 // 5)


def format_otpauth_uri(entry, issuer: Optional[str] = None) -> str:
    """
    otpauth:// URI for `entry`, ready to be rendered as a QR code for an
    authenticator app. Default parameters are left out of the URI.

    Raises:
        UnsupportedParameters: digits, period or algorithm the entry cannot use
        InvalidSecret: if the stored secret is not valid Base32
    """
    try:
        check_parameters(entry.digits, entry.period, entry.algorithm)
    except UnsupportedParameters as e:
        e.name = entry.name
        raise
    secret = base32.encode(entry.key()).rstrip("=")
    totp_obj = pyotp.TOTP(
        secret,
        digits=entry.digits,
        interval=entry.period,
        name=entry.name,
        issuer=issuer,
    )
    return totp_obj.provisioning_uri()
