"""Zero-knowledge vault engine for Aura Vault.

A passphrase is turned into an AES-256-GCM key with PBKDF2 and never leaves
the process. Secrets are stored as ciphertext records; plaintext exists only
in the session cache while the vault is unlocked.

Usage:
    from aura_vault.vault import ActivitySource, JsonRecordStore, VaultSession

    activity = ActivitySource()
    session = VaultSession(JsonRecordStore(path), activity=activity)
    session.unlock(passphrase)
    session.add_secret("Bank PIN", "9876")
    activity.signal()  # postpones auto-lock
    session.rotate_passphrase(passphrase, new_passphrase)
    session.lock()
"""

# Exceptions
from .exceptions import (
    AuthenticationError,
    DerivationError,
    NotUnlocked,
    RecordNotFoundError,
    RotationFailed,
    UnlockFailed,
    VaultCorruptedError,
    VaultError,
)

# Configuration
from .config import (
    VaultConfig,
    get_vault_config,
    set_vault_config,
)

# Primitives
from .crypto import (
    AeadCipher,
    KeyDerivation,
)

# Records and persistence
from .models import (
    DecryptedRecord,
    VaultRecord,
)
from .storage import (
    JsonRecordStore,
    MemoryRecordStore,
    RecordStore,
)

# Session
from .activity import ActivitySource
from .session import (
    VaultSession,
    VaultState,
)
from .timer import AutoLockTimer

# Bulk re-encryption
from .migration import (
    decrypt_records,
    reencrypt_records,
    verify_vault_integrity,
)

__all__ = [
    # Exceptions
    "VaultError",
    "DerivationError",
    "AuthenticationError",
    "UnlockFailed",
    "NotUnlocked",
    "RotationFailed",
    "VaultCorruptedError",
    "RecordNotFoundError",
    # Configuration
    "VaultConfig",
    "get_vault_config",
    "set_vault_config",
    # Primitives
    "KeyDerivation",
    "AeadCipher",
    # Records
    "VaultRecord",
    "DecryptedRecord",
    "RecordStore",
    "MemoryRecordStore",
    "JsonRecordStore",
    # Session
    "VaultSession",
    "VaultState",
    "AutoLockTimer",
    "ActivitySource",
    # Migration
    "decrypt_records",
    "reencrypt_records",
    "verify_vault_integrity",
]
