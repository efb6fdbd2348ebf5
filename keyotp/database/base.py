"""
base.py — the SecretStore interface shared by every backend.

A store maps unique names to SecretEntry records. Backends implement the
raw persistence (`_insert`, `list`, `get`, `remove`); validation of new
entries happens once here so every backend rejects the same inputs.
"""

import abc
import enum
import logging
from typing import FrozenSet, List

from .. import config
from ..core import base32
from ..core.errors import InvalidName, NotFound
from ..core.models import SecretEntry
from ..core.otp_core import check_parameters

logger = logging.getLogger(__name__)


class BackendKind(str, enum.Enum):
    KEYRING = "keyring"
    SQLITE = "sqlite"
    MEMORY = "memory"


class SecretStore(abc.ABC):
    """
    Named secret storage over one backend.

    Error contract:
    - add: InvalidName, InvalidSecret, UnsupportedParameters, DuplicateName
    - get / remove: NotFound
    - any operation: BackendUnavailable when the backend fails
    """

    kind: BackendKind
    reserved_names: FrozenSet[str] = frozenset()

    def add(
        self,
        name: str,
        encoded_secret: str,
        digits: int = config.DEFAULT_DIGITS,
        period: int = config.DEFAULT_TIME_STEP,
    ) -> SecretEntry:
        """Validate and persist a new entry. Nothing is written if a check fails."""
        self.check_name(name)
        base32.decode(encoded_secret)
        check_parameters(digits, period)

        entry = SecretEntry(name=name, encoded_secret=encoded_secret, digits=digits, period=period)
        self._insert(entry)
        logger.info("Secret %r added to the %s store", name, self.kind.value)
        return entry

    def check_name(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidName("Secret name must be a non-empty string", name=name)
        if name in self.reserved_names:
            raise InvalidName("Secret name {!r} is reserved".format(name), name=name)

    def __contains__(self, name: str) -> bool:
        try:
            self.get(name)
        except NotFound:
            return False
        return True

    @abc.abstractmethod
    def _insert(self, entry: SecretEntry) -> None:
        """Persist `entry` atomically; raise DuplicateName if the name exists."""

    @abc.abstractmethod
    def list(self) -> List[SecretEntry]:
        """All entries, metadata only, in insertion order where the backend keeps it."""

    @abc.abstractmethod
    def get(self, name: str) -> SecretEntry:
        """The entry called `name`; NotFound if absent."""

    @abc.abstractmethod
    def remove(self, name: str) -> None:
        """Delete the entry called `name`; NotFound if absent."""
