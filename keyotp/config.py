"""
config.py — defaults and environment overrides for keyotp.

Every value has a module-level default; `Settings.from_env()` collects the
effective configuration, letting KEYOTP_* environment variables override
the defaults. CLI flags override the environment (see core/otp_cli.py).
"""

import os
from dataclasses import dataclass

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_ALGORITHM = "SHA1"  # the only supported HMAC hash
SUPPORTED_DIGITS = range(6, 9)
SECRET_BYTES = 20           # 160-bit secret (common practice)

DEFAULT_BACKEND = "keyring"
DATABASE_FILE = os.path.join(os.path.expanduser("~"), ".keyotp", "secrets.db")
KEYRING_SERVICE = "keyotp"
BACKEND_TIMEOUT = 10.0      # seconds per backend call


@dataclass
class Settings:
    backend: str = DEFAULT_BACKEND
    database_file: str = DATABASE_FILE
    keyring_service: str = KEYRING_SERVICE
    timeout: float = BACKEND_TIMEOUT

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from KEYOTP_BACKEND, KEYOTP_DB, KEYOTP_SERVICE and
        KEYOTP_TIMEOUT, falling back to the module defaults.

        Raises:
            ValueError: if KEYOTP_TIMEOUT is not a number
        """
        env = os.environ if environ is None else environ
        return cls(
            backend=env.get("KEYOTP_BACKEND", DEFAULT_BACKEND),
            database_file=env.get("KEYOTP_DB", DATABASE_FILE),
            keyring_service=env.get("KEYOTP_SERVICE", KEYRING_SERVICE),
            timeout=float(env.get("KEYOTP_TIMEOUT", BACKEND_TIMEOUT)),
        )
