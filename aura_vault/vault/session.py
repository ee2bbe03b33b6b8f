"""Vault session state machine.

A VaultSession owns the in-memory session key and the decrypted record
cache for one vault. Every operation that reads records, derives or checks
a key and then mutates records or the key runs under the session's lock,
so unlock, add, update, rotation and auto-lock never interleave.
"""

import threading
from enum import Enum
from typing import Callable, Optional

from ..utils.logging import get_logger
from .activity import ActivitySource
from .config import VaultConfig, get_vault_config
from .crypto import AeadCipher, KeyDerivation
from .exceptions import (
    AuthenticationError,
    NotUnlocked,
    RecordNotFoundError,
    RotationFailed,
    UnlockFailed,
    VaultError,
)
from .migration import decrypt_records, reencrypt_records
from .models import DecryptedRecord, VaultRecord
from .storage import RecordStore
from .timer import AutoLockTimer

logger = get_logger(__name__)

# Failures that end an unlock or rotation attempt without side effects
_OPERATION_ERRORS = (VaultError, OSError, ValueError)


class VaultState(str, Enum):
    """Lock state of a vault session."""

    LOCKED = "locked"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"


class VaultSession:
    """
    Lock/unlock state machine for a single vault.

    Usage:
        session = VaultSession(JsonRecordStore(path), activity=source)
        session.unlock(passphrase)
        session.add_secret("WiFi Password", "Aura-WiFi-5G!")
        for item in session.decrypted_records:
            ...
        session.lock()

    The session key never leaves this object. Callers only see
    DecryptedRecord views, which are dropped again on lock.
    """

    def __init__(
        self,
        store: RecordStore,
        activity: Optional[ActivitySource] = None,
        config: Optional[VaultConfig] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        """
        Initialize a locked session.

        Args:
            store: Persistence for the encrypted records
            activity: Activity source that postpones auto-lock
            config: Vault configuration (uses global if not provided)
            timer_factory: threading.Timer compatible factory for auto-lock
        """
        self.store = store
        self.config = config or get_vault_config()

        self._lock = threading.RLock()
        self._state = VaultState.LOCKED
        self._key: Optional[bytes] = None
        self._cache: list[DecryptedRecord] = []
        self._last_error: Optional[str] = None
        self._listeners: list[Callable[[VaultState], None]] = []

        self._timer = AutoLockTimer(
            self._on_timeout,
            self.config.auto_lock_seconds,
            timer_factory=timer_factory,
        )

        self._unsubscribe_activity: Optional[Callable[[], None]] = None
        if activity is not None:
            self._unsubscribe_activity = activity.on_activity(self.touch)

    def __repr__(self) -> str:
        return f"VaultSession(state={self._state.value}, records={len(self._cache)})"

    def __enter__(self) -> "VaultSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Observation

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def is_unlocked(self) -> bool:
        return self._state is VaultState.UNLOCKED

    @property
    def decrypted_records(self) -> tuple[DecryptedRecord, ...]:
        """Plaintext records while unlocked, empty while locked."""
        return tuple(self._cache)

    @property
    def last_error(self) -> Optional[str]:
        """User-facing message of the last failed unlock or rotation."""
        return self._last_error

    @property
    def record_count(self) -> int:
        """Number of persisted records (readable while locked)."""
        with self._lock:
            return len(self.store.load_records())

    def on_state_change(self, callback: Callable[[VaultState], None]) -> Callable[[], None]:
        """
        Subscribe to state transitions.

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    # Operations

    def unlock(self, passphrase: str) -> tuple[DecryptedRecord, ...]:
        """
        Unlock the vault.

        Records that only decrypt under the legacy salt are re-encrypted
        under the current salt and saved before the session opens.

        Args:
            passphrase: Vault passphrase

        Returns:
            Decrypted records

        Raises:
            UnlockFailed: Wrong passphrase, corrupted data, or I/O failure
        """
        with self._lock:
            if self._state is not VaultState.LOCKED:
                self._discard()
                self._set_state(VaultState.LOCKED)
            self._set_state(VaultState.UNLOCKING)

            try:
                key, decrypted = self._open(passphrase)
            except _OPERATION_ERRORS as e:
                logger.warning(f"Unlock failed ({type(e).__name__})")
                self._abort_unlock()
                error = UnlockFailed()
                self._last_error = str(error)
                raise error from None
            except BaseException:
                self._abort_unlock()
                raise

            self._key = key
            self._cache = decrypted
            self._last_error = None
            self._set_state(VaultState.UNLOCKED)
            self._timer.arm()

            logger.info(f"Vault unlocked ({len(decrypted)} records)")
            return tuple(decrypted)

    def lock(self) -> None:
        """Discard the session key and decrypted records. Never fails."""
        with self._lock:
            was_open = self._state is not VaultState.LOCKED
            self._discard()
            self._last_error = None
            self._set_state(VaultState.LOCKED)
            if was_open:
                logger.info("Vault locked")

    def add_secret(self, title: str, content: str) -> DecryptedRecord:
        """
        Encrypt and store a new secret.

        Args:
            title: Plaintext label
            content: Secret content

        Returns:
            The new record's plaintext view

        Raises:
            NotUnlocked: If the vault is locked
        """
        with self._lock:
            key = self._require_key()

            ciphertext, nonce = AeadCipher.encrypt_text(key, content)
            record = VaultRecord.create(self.config.owner, title, ciphertext, nonce)

            records = self.store.load_records()
            records.append(record)
            self.store.save_records(records)

            item = DecryptedRecord(id=record.id, title=record.title, content=content)
            self._cache = self._cache + [item]
            self._timer.reset()

            logger.info(f"Added vault record {record.id}")
            return item

    def update_secret(self, record_id: str, content: str) -> DecryptedRecord:
        """
        Replace the content of an existing secret.

        Raises:
            NotUnlocked: If the vault is locked
            RecordNotFoundError: If no record has ``record_id``
        """
        with self._lock:
            key = self._require_key()

            records = self.store.load_records()
            for index, record in enumerate(records):
                if record.id == record_id:
                    break
            else:
                raise RecordNotFoundError(record_id)

            ciphertext, nonce = AeadCipher.encrypt_text(key, content)
            records[index] = record.reencrypted(ciphertext, nonce)
            self.store.save_records(records)

            item = DecryptedRecord(id=record.id, title=record.title, content=content)
            self._cache = [item if r.id == record_id else r for r in self._cache]
            self._timer.reset()

            logger.info(f"Updated vault record {record_id}")
            return item

    def rotate_passphrase(self, old_passphrase: str, new_passphrase: str) -> bool:
        """
        Re-encrypt every record under a new passphrase.

        Works whether the session is locked or unlocked. If unlocked, the
        session continues under the new key.

        Args:
            old_passphrase: Passphrase the records are currently encrypted with
            new_passphrase: Replacement passphrase

        Returns:
            True on success. False if nothing was changed; the reason is
            kept in last_error.
        """
        with self._lock:
            try:
                self._rotate(old_passphrase, new_passphrase)
            except RotationFailed as e:
                logger.warning(f"Passphrase rotation failed: {e}")
                self._last_error = str(e)
                return False

            self._last_error = None
            return True

    def touch(self) -> None:
        """Activity signal: push the auto-lock deadline forward."""
        with self._lock:
            if self._state is VaultState.UNLOCKED:
                self._timer.reset()

    def close(self) -> None:
        """Lock and detach from the activity source."""
        self.lock()
        if self._unsubscribe_activity is not None:
            self._unsubscribe_activity()
            self._unsubscribe_activity = None

    # Internals

    def _derive(self, passphrase: str, salt: bytes) -> bytes:
        return KeyDerivation.derive_key(
            passphrase, salt, self.config.pbkdf2_iterations, self.config.key_bits
        )

    def _open(self, passphrase: str) -> tuple[bytes, list[DecryptedRecord]]:
        """Derive the session key and decrypt all records, migrating if needed."""
        if not passphrase:
            raise UnlockFailed()

        records = self.store.load_records()
        key = self._derive(passphrase, self.config.current_salt_bytes)
        try:
            return key, decrypt_records(records, key)
        except AuthenticationError:
            logger.debug("Records did not authenticate under the current salt, trying legacy salt")

        legacy_key = self._derive(passphrase, self.config.legacy_salt_bytes)
        decrypted = decrypt_records(records, legacy_key)

        migrated = reencrypt_records(records, decrypted, key)
        self.store.save_records(migrated)
        logger.info(f"Migrated {len(migrated)} records off the legacy salt")

        return key, decrypted

    def _rotate(self, old_passphrase: str, new_passphrase: str) -> None:
        if not new_passphrase:
            raise RotationFailed("New passphrase must not be empty.")

        try:
            records = self.store.load_records()
            old_key = self._derive(old_passphrase, self.config.current_salt_bytes)
            plaintexts = decrypt_records(records, old_key)

            new_key = self._derive(new_passphrase, self.config.current_salt_bytes)
            rotated = reencrypt_records(records, plaintexts, new_key)
            self.store.save_records(rotated)
        except _OPERATION_ERRORS as e:
            logger.debug(f"Rotation aborted ({type(e).__name__})")
            raise RotationFailed() from None

        if self._state is VaultState.UNLOCKED:
            self._key = new_key
            self._cache = plaintexts
            self._timer.reset()

        logger.info(f"Passphrase rotated for {len(rotated)} records")

    def _require_key(self) -> bytes:
        if self._state is not VaultState.UNLOCKED or self._key is None:
            raise NotUnlocked()
        return self._key

    def _discard(self) -> None:
        self._timer.disarm()
        self._key = None
        self._cache = []

    def _abort_unlock(self) -> None:
        self._discard()
        self._set_state(VaultState.LOCKED)

    def _set_state(self, state: VaultState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            if not self._timer.is_current(generation):
                return
            logger.info("Vault auto-locked due to inactivity.")
            self.lock()
