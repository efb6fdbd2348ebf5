import os

import pyotp
import pytest

from keyotp.core import base32, otp_core
from keyotp.core.errors import InvalidSecret, UnsupportedParameters
from keyotp.core.models import SecretEntry

from conftest import HELLO_B32, RFC_SECRET, RFC_SECRET_B32


# RFC 6238 appendix B, SHA1 column
@pytest.mark.parametrize("unix_time, expected", [
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
])
def test_rfc6238_sha1_vectors(unix_time, expected):
    assert otp_core.generate(RFC_SECRET, unix_time, period=30, digits=8) == expected


# RFC 4226 appendix D
@pytest.mark.parametrize("counter, expected", [
    (0, "755224"),
    (1, "287082"),
    (2, "359152"),
    (9, "520489"),
])
def test_rfc4226_derivation(counter, expected):
    assert otp_core.derive_code(RFC_SECRET, counter, 6) == expected


def test_int_to_bytes_is_8_byte_big_endian():
    assert otp_core.int_to_bytes(1) == b"\x00" * 7 + b"\x01"
    assert otp_core.int_to_bytes(0x0102) == b"\x00" * 6 + b"\x01\x02"


def test_dynamic_truncate_rfc4226_example():
    digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
    assert otp_core.dynamic_truncate(digest) == 0x50EF7F19


def test_dynamic_truncate_masks_top_bit():
    digest = bytes([0xFF] * 19 + [0x00])
    assert otp_core.dynamic_truncate(digest) == 0x7FFFFFFF


def test_generate_is_deterministic():
    key = os.urandom(20)
    assert otp_core.generate(key, 1700000000) == otp_core.generate(key, 1700000000)


@pytest.mark.parametrize("digits", [6, 7, 8])
def test_code_shape(digits):
    key = os.urandom(20)
    for t in range(0, 3000, 30):
        code = otp_core.generate(key, t, digits=digits)
        assert len(code) == digits
        assert code.isdigit()


def test_leading_zeros_are_kept():
    assert otp_core.generate(RFC_SECRET, 1111111109, digits=8).startswith("0")


def test_same_window_same_code():
    key = os.urandom(20)
    assert otp_core.generate(key, 60) == otp_core.generate(key, 89)


def test_next_window_changes_code():
    assert otp_core.generate(RFC_SECRET, 59, digits=8) != otp_core.generate(RFC_SECRET, 60, digits=8)


def test_matches_pyotp():
    key = os.urandom(20)
    reference = pyotp.TOTP(base32.encode(key))
    for t in (0, 59, 1111111109, 1700000000):
        assert otp_core.generate(key, t) == reference.at(t)


def test_short_key_is_accepted():
    assert len(otp_core.generate(b"k", 59)) == 6


@pytest.mark.parametrize("digits", [0, 5, 9, 10, "6", 6.0, True])
def test_unsupported_digits(digits):
    with pytest.raises(UnsupportedParameters):
        otp_core.generate(RFC_SECRET, 59, digits=digits)


@pytest.mark.parametrize("period", [0, -30, 30.5, "30"])
def test_unsupported_period(period):
    with pytest.raises(UnsupportedParameters):
        otp_core.generate(RFC_SECRET, 59, period=period)


def test_negative_time_is_rejected():
    with pytest.raises(UnsupportedParameters):
        otp_core.generate(RFC_SECRET, -1)


def test_unsupported_algorithm():
    with pytest.raises(UnsupportedParameters):
        otp_core.check_parameters(6, 30, "SHA256")
    otp_core.check_parameters(6, 30, "sha1")


@pytest.mark.parametrize("unix_time, remaining", [(0, 30), (59, 1), (60, 30), (75, 15)])
def test_seconds_remaining(unix_time, remaining):
    assert otp_core.seconds_remaining(unix_time, 30) == remaining


def test_counter_for():
    assert otp_core.counter_for(59, 30) == 1
    assert otp_core.counter_for(1111111109, 30) == 37037036


def test_totp_decodes_secret():
    assert otp_core.totp(RFC_SECRET_B32, 59, digits=8) == ("94287082", 1)


def test_totp_rejects_bad_secret():
    with pytest.raises(InvalidSecret):
        otp_core.totp("not base32", 59)


def test_generate_base32_secret():
    secret = otp_core.generate_base32_secret()
    assert len(secret) == 32
    assert len(base32.decode(secret)) == 20


def test_otpauth_uri():
    entry = SecretEntry(name="alice", encoded_secret=HELLO_B32.lower(), digits=8, period=60)
    uri = otp_core.format_otpauth_uri(entry, issuer="Example")
    assert uri.startswith("otpauth://totp/Example:alice?")
    assert "secret=" + HELLO_B32 in uri
    assert "digits=8" in uri
    assert "period=60" in uri

    parsed = pyotp.parse_uri(uri)
    assert parsed.at(59) == otp_core.generate(entry.key(), 59, period=60, digits=8)


@pytest.mark.parametrize("entry", [
    SecretEntry("x", HELLO_B32, algorithm="SHA256"),
    SecretEntry("x", HELLO_B32, digits=9),
    SecretEntry("x", HELLO_B32, digits=12),
    SecretEntry("x", HELLO_B32, period=0),
])
def test_otpauth_uri_rejects_unsupported_entry(entry):
    with pytest.raises(UnsupportedParameters):
        otp_core.format_otpauth_uri(entry)
