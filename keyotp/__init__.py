"""keyotp — TOTP codes for named secrets kept in the system keyring."""

__version__ = "0.1.0"
