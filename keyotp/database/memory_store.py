from typing import Dict, List

from ..core.errors import DuplicateName, NotFound
from ..core.models import SecretEntry
from .base import BackendKind, SecretStore


class MemoryStore(SecretStore):
    """Process-local store. Nothing survives the process; used for tests and dry runs."""

    kind = BackendKind.MEMORY

    def __init__(self) -> None:
        self._entries: Dict[str, SecretEntry] = {}

    def _insert(self, entry: SecretEntry) -> None:
        if entry.name in self._entries:
            raise DuplicateName("Secret {!r} already exists".format(entry.name), name=entry.name)
        self._entries[entry.name] = entry

    def list(self) -> List[SecretEntry]:
        return list(self._entries.values())

    def get(self, name: str) -> SecretEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise NotFound("Secret {!r} not found".format(name), name=name) from None

    def remove(self, name: str) -> None:
        if self._entries.pop(name, None) is None:
            raise NotFound("Secret {!r} not found".format(name), name=name)
