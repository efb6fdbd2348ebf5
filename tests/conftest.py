import threading

import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from keyotp.backend import create_app
from keyotp.database import MemoryStore, SqliteStore
from keyotp.database.keyring_store import KeyringStore

RFC_SECRET = b"12345678901234567890"
RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
HELLO_B32 = "JBSWY3DPEHPK3PXP"


class DictKeyring(KeyringBackend):
    """In-memory keyring backend. `fail_on` makes set_password fail for given usernames."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}
        self.fail_on = set()
        self.unavailable = False

    def _check(self):
        if self.unavailable:
            raise KeyringError("Secret service is not running")

    def get_password(self, service, username):
        self._check()
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self._check()
        if username in self.fail_on:
            raise KeyringError("write refused for {}".format(username))
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        self._check()
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


class HangingKeyring(DictKeyring):
    """Blocks reads (unless `hang_reads` is off) and writes to `hang_writes_for` until `release` is set."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.hang_reads = True
        self.hang_writes_for = set()

    def set_password(self, service, username, password):
        if username in self.hang_writes_for:
            self.release.wait(5)
        super().set_password(service, username, password)

    def get_password(self, service, username):
        if self.hang_reads:
            self.release.wait(5)
        return super().get_password(service, username)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("KEYOTP_BACKEND", "KEYOTP_DB", "KEYOTP_SERVICE", "KEYOTP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_keyring():
    return DictKeyring()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SqliteStore(path=str(tmp_path / "secrets.db"), timeout=1.0)


@pytest.fixture
def keyring_store(fake_keyring):
    return KeyringStore(service="keyotp-test", backend=fake_keyring, timeout=2.0)


@pytest.fixture(params=["memory", "sqlite", "keyring"])
def store(request):
    return request.getfixturevalue(request.param + "_store")


@pytest.fixture
def fixed_clock():
    return lambda: 59


@pytest.fixture
def client(memory_store, fixed_clock):
    app = create_app(memory_store, clock=fixed_clock)
    app.config["TESTING"] = True
    return app.test_client()
