"""
Secret stores. `open_store` picks the backend once, at start-up:

    from keyotp.config import Settings
    from keyotp.database import open_store

    store = open_store(Settings.from_env())
"""

from typing import Optional

from ..config import Settings
from ..core.errors import UnsupportedParameters
from .base import BackendKind, SecretStore
from .memory_store import MemoryStore
from .sqlite_store import SqliteStore


def open_store(settings: Optional[Settings] = None) -> SecretStore:
    """
    Build the SecretStore named by `settings.backend`.

    Raises:
        UnsupportedParameters: unknown backend name
    """
    settings = settings or Settings.from_env()
    try:
        kind = BackendKind(settings.backend)
    except ValueError:
        raise UnsupportedParameters(
            "Unknown backend {!r}, expected one of: {}".format(
                settings.backend, ", ".join(k.value for k in BackendKind)
            )
        ) from None

    if kind is BackendKind.KEYRING:
        from .keyring_store import KeyringStore
        return KeyringStore(service=settings.keyring_service, timeout=settings.timeout)
    if kind is BackendKind.SQLITE:
        return SqliteStore(path=settings.database_file, timeout=settings.timeout)
    return MemoryStore()


__all__ = ["BackendKind", "SecretStore", "MemoryStore", "SqliteStore", "open_store"]
