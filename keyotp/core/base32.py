"""
base32.py — RFC 4648 Base32 codec for user-supplied OTP secrets.

Authenticator apps hand out secrets as Base32 text, usually without the
`=` padding and sometimes in lower case. `decode` accepts both forms but is
strict about everything else: only the 32-symbol alphabet is allowed and the
last 8-symbol group must be one of the lengths RFC 4648 can produce
(2, 4, 5, 7 or 8 symbols, i.e. 1, 2, 3, 4 or 5 bytes).
"""

import base64
import binascii
import re

from .errors import InvalidSecret

_ALPHABET_RE = re.compile(r"[A-Za-z2-7]+")

# rfc4648: the last quantum is completed with 0, 1, 3, 4 or 6 padding
# characters, so it holds 8, 7, 5, 4 or 2 data characters.
_VALID_TAIL_LENGTHS = (0, 2, 4, 5, 7)


def decode(text: str) -> bytes:
    """
    Decode Base32 text into raw key bytes.

    - case-insensitive
    - trailing '=' padding is stripped, missing padding is tolerated

    Arguments:
        text: Base32 secret, e.g. "JBSWY3DPEHPK3PXP" or "jbswy3dpehpk3pxp"

    Raises:
        InvalidSecret: empty input, a character outside the alphabet, or a
            last group of 1, 3 or 6 symbols
    """
    if not isinstance(text, str):
        raise InvalidSecret("Secret must be text, got {}".format(type(text).__name__))
    body = text.rstrip("=")
    if not body:
        raise InvalidSecret("Secret is empty")
    if not _ALPHABET_RE.fullmatch(body):
        raise InvalidSecret("Secret {!r} contains characters outside the Base32 alphabet".format(text))

    tail = len(body) % 8
    if tail not in _VALID_TAIL_LENGTHS:
        raise InvalidSecret(
            "Secret {!r} is not valid Base32: last group has {} symbols".format(text, tail)
        )

    padded = body.upper() + "=" * (-len(body) % 8)
    try:
        return base64.b32decode(padded)
    except binascii.Error as e:
        raise InvalidSecret("Invalid Base32 secret {!r}".format(text)) from e


def encode(data: bytes) -> str:
    """Encode raw bytes as upper-case Base32, padded to a multiple of 8 symbols."""
    return base64.b32encode(bytes(data)).decode("ascii")


def is_valid(text: str) -> bool:
    try:
        decode(text)
    except InvalidSecret:
        return False
    return True
