"""
keyring_store.py — SecretStore on top of the system keyring (`keyring` library).

Layout inside the keyring:
- service  = settings.keyring_service ("keyotp" by default)
- username = entry name, password = SecretEntry payload (JSON)
- username INDEX_NAME holds a JSON list of entry names in insertion order,
  since keyring backends offer no way to enumerate items.

Each store operation opens one session that runs every blocking keyring
call on a daemon thread bounded by `timeout`. The session is closed when
the operation returns, whatever the outcome. A failed add is rolled back
from a fresh session, since the failing one may be stuck on a hung call.
"""

import json
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

import keyring
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from .. import config
from ..core.errors import BackendUnavailable, DuplicateName, NotFound
from ..core.models import SecretEntry
from .base import BackendKind, SecretStore

logger = logging.getLogger(__name__)

INDEX_NAME = "__keyotp_index__"


class KeyringSession:
    """
    Backend calls for one store operation, each bounded by `timeout`.

    Every call runs on its own daemon thread, so a backend that never
    answers cannot keep the process alive. Once a call has timed out the
    session refuses further calls; cleanup needs a fresh session.
    """

    def __init__(self, backend: KeyringBackend, service: str, timeout: float) -> None:
        self.backend = backend
        self.service = service
        self.timeout = timeout
        self.usable = True

    def _call(self, method, *args):
        if not self.usable:
            raise BackendUnavailable("Keyring session is closed or timed out")

        outcome = {}

        def run():
            try:
                outcome["value"] = method(self.service, *args)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=run, name="keyotp-keyring", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            self.usable = False
            raise BackendUnavailable("Keyring did not answer within {}s".format(self.timeout))

        error = outcome.get("error")
        if error is None:
            return outcome.get("value")
        if isinstance(error, PasswordDeleteError):
            raise error
        if isinstance(error, KeyringError):
            raise BackendUnavailable("Keyring error: {}".format(error)) from error
        raise error

    def get_password(self, name: str) -> Optional[str]:
        return self._call(self.backend.get_password, name)

    def set_password(self, name: str, value: str) -> None:
        self._call(self.backend.set_password, name, value)

    def delete_password(self, name: str) -> None:
        self._call(self.backend.delete_password, name)

    def close(self) -> None:
        # a hung call keeps running on its daemon thread; nothing waits for it
        self.usable = False


class KeyringStore(SecretStore):

    kind = BackendKind.KEYRING
    reserved_names = frozenset([INDEX_NAME])

    def __init__(
        self,
        service: str = config.KEYRING_SERVICE,
        backend: Optional[KeyringBackend] = None,
        timeout: float = config.BACKEND_TIMEOUT,
    ) -> None:
        self.service = service
        self.backend = backend if backend is not None else keyring.get_keyring()
        self.timeout = timeout
        logger.debug("Using keyring backend %s (service %r)", type(self.backend).__name__, service)

    @contextmanager
    def _session(self) -> Iterator[KeyringSession]:
        session = KeyringSession(self.backend, self.service, self.timeout)
        try:
            yield session
        finally:
            session.close()

    # --- index -------------------------------------------------------------
    def _read_index(self, session: KeyringSession) -> List[str]:
        raw = session.get_password(INDEX_NAME)
        if raw is None:
            return []
        try:
            names = json.loads(raw)
        except ValueError as e:
            raise BackendUnavailable("Keyring index of {!r} is corrupt".format(self.service)) from e
        if not isinstance(names, list):
            raise BackendUnavailable("Keyring index of {!r} is corrupt".format(self.service))
        return [str(n) for n in names]

    def _write_index(self, session: KeyringSession, names: List[str]) -> None:
        session.set_password(INDEX_NAME, json.dumps(names))

    # --- SecretStore -------------------------------------------------------
    def _insert(self, entry: SecretEntry) -> None:
        with self._session() as session:
            names = self._read_index(session)
            if entry.name in names or session.get_password(entry.name) is not None:
                raise DuplicateName("Secret {!r} already exists".format(entry.name), name=entry.name)

            try:
                session.set_password(entry.name, entry.to_payload())
                self._write_index(session, names + [entry.name])
            except BackendUnavailable:
                logger.warning("Adding secret %r failed, rolling it back", entry.name)
                self._discard(entry.name)
                raise

    def _discard(self, name: str) -> None:
        """Best-effort delete of a half-added entry, in a session of its own."""
        with self._session() as cleanup:
            try:
                cleanup.delete_password(name)
            except PasswordDeleteError:
                logger.debug("Secret %r was never written, nothing to roll back", name)
            except BackendUnavailable as e:
                logger.error("Rollback of secret %r failed: %s", name, e)

    def list(self) -> List[SecretEntry]:
        entries = []
        with self._session() as session:
            for name in self._read_index(session):
                payload = session.get_password(name)
                if payload is None:
                    logger.warning("Secret %r is indexed but missing from the keyring", name)
                    continue
                entries.append(SecretEntry.from_payload(name, payload))
        return entries

    def get(self, name: str) -> SecretEntry:
        if name in self.reserved_names:
            raise NotFound("Secret {!r} not found".format(name), name=name)
        with self._session() as session:
            payload = session.get_password(name)
        if payload is None:
            raise NotFound("Secret {!r} not found".format(name), name=name)
        return SecretEntry.from_payload(name, payload)

    def remove(self, name: str) -> None:
        if name in self.reserved_names:
            raise NotFound("Secret {!r} not found".format(name), name=name)
        with self._session() as session:
            names = self._read_index(session)
            try:
                session.delete_password(name)
            except PasswordDeleteError:
                if name not in names:
                    raise NotFound("Secret {!r} not found".format(name), name=name) from None
                logger.warning("Secret %r was already gone from the keyring", name)
            if name in names:
                self._write_index(session, [n for n in names if n != name])
        logger.info("Secret %r removed from keyring service %r", name, self.service)
