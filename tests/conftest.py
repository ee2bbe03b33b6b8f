"""Shared pytest fixtures for Aura Vault tests."""

from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

# Low iteration count keeps PBKDF2 fast in tests
TEST_ITERATIONS = 1_000


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback as the timer thread would, unless cancelled."""
        if self.started and not self.cancelled:
            self.function(*self.args, **self.kwargs)

    def fire_anyway(self) -> None:
        """Run the callback even if cancelled (a deadline racing a cancel)."""
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    """Records every timer a session creates."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None) -> FakeTimer:
        timer = FakeTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    @property
    def latest(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture(autouse=True)
def reset_vault_config():
    """Drop any global configuration a test installed."""
    from aura_vault.vault.config import set_vault_config

    yield
    set_vault_config(None)


@pytest.fixture
def vault_config(tmp_path: Path):
    """Vault configuration with fast key derivation."""
    from aura_vault.vault.config import VaultConfig

    return VaultConfig(
        pbkdf2_iterations=TEST_ITERATIONS,
        auto_lock_seconds=300,
        owner="u1",
        records_file=tmp_path / "vault.json",
    )


@pytest.fixture
def fake_timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def seal_records(vault_config) -> Callable[..., list]:
    """
    Build records encrypted under a passphrase and one of the named salts.

    Timestamps are fixed in the past so re-encryption visibly bumps them.
    """
    from aura_vault.vault.crypto import AeadCipher, KeyDerivation
    from aura_vault.vault.models import VaultRecord

    def seal(passphrase: str, secrets: dict[str, str], legacy: bool = False) -> list:
        salt = vault_config.legacy_salt_bytes if legacy else vault_config.current_salt_bytes
        key = KeyDerivation.derive_key(passphrase, salt, vault_config.pbkdf2_iterations)
        created = datetime(2023, 11, 20, 9, 30)

        records = []
        for i, (title, content) in enumerate(secrets.items(), 1):
            ciphertext, nonce = AeadCipher.encrypt_text(key, content)
            record = VaultRecord.create("u1", title, ciphertext, nonce)
            records.append(
                VaultRecord(
                    id=f"v{i}",
                    owner=record.owner,
                    title=record.title,
                    ciphertext=record.ciphertext,
                    nonce=record.nonce,
                    created_at=created,
                    updated_at=created,
                )
            )
        return records

    return seal


@pytest.fixture
def sample_secrets() -> dict[str, str]:
    return {
        "WiFi Password": "Aura-WiFi-5G!",
        "Bank PIN": "9876",
    }


@pytest.fixture
def memory_store():
    from aura_vault.vault.storage import MemoryRecordStore

    return MemoryRecordStore()


@pytest.fixture
def make_session(vault_config, fake_timers):
    """Factory for sessions wired to the fast config and fake timers."""
    from aura_vault.vault.session import VaultSession

    sessions = []

    def make(store, activity=None):
        session = VaultSession(
            store,
            activity=activity,
            config=vault_config,
            timer_factory=fake_timers,
        )
        sessions.append(session)
        return session

    yield make

    for session in sessions:
        session.close()
