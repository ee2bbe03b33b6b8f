"""Bulk re-encryption helpers.

Shared by legacy-salt migration on unlock and by passphrase rotation.
Both work on whole record lists: every record is processed before anything
is returned, so callers can persist the result in a single save or discard
it entirely.
"""

from typing import Optional

from ..utils.logging import get_logger
from .config import VaultConfig, get_vault_config
from .crypto import AeadCipher, KeyDerivation
from .exceptions import AuthenticationError, VaultCorruptedError
from .models import DecryptedRecord, VaultRecord
from .storage import RecordStore

logger = get_logger(__name__)


def decrypt_records(records: list[VaultRecord], key: bytes) -> list[DecryptedRecord]:
    """
    Decrypt every record with one key.

    Args:
        records: Persisted records
        key: Candidate key

    Returns:
        Plaintext views in record order

    Raises:
        AuthenticationError: If any record fails authentication under ``key``
        VaultCorruptedError: If any record is malformed
    """
    decrypted = []
    for record in records:
        content = AeadCipher.decrypt_text(key, record.ciphertext_bytes, record.nonce_bytes)
        decrypted.append(DecryptedRecord(id=record.id, title=record.title, content=content))
    return decrypted


def reencrypt_records(
    records: list[VaultRecord],
    plaintexts: list[DecryptedRecord],
    key: bytes,
) -> list[VaultRecord]:
    """
    Re-encrypt records under a new key.

    Each record gets a fresh nonce and updated_at; id, owner, title and
    created_at are kept.

    Args:
        records: Records as currently persisted
        plaintexts: Their decrypted contents, in the same order
        key: Key to encrypt under

    Returns:
        New record list, same order
    """
    if len(records) != len(plaintexts):
        raise ValueError("Record and plaintext lists differ in length")

    updated = []
    for record, plain in zip(records, plaintexts):
        if record.id != plain.id:
            raise ValueError(f"Plaintext for {plain.id} does not match record {record.id}")
        ciphertext, nonce = AeadCipher.encrypt_text(key, plain.content)
        updated.append(record.reencrypted(ciphertext, nonce))
    return updated


def verify_vault_integrity(
    store: RecordStore,
    passphrase: str,
    config: Optional[VaultConfig] = None,
) -> dict:
    """
    Check which records decrypt under a passphrase.

    Does not write anything. Records that only decrypt under the legacy
    salt are counted separately; unlocking the vault will migrate them.

    Args:
        store: Record store to inspect
        passphrase: Vault passphrase
        config: Vault configuration (uses global if not provided)

    Returns:
        Dict with verification results
    """
    config = config or get_vault_config()
    records = store.load_records()

    stats = {
        "records_total": len(records),
        "records_verified": 0,
        "records_legacy": 0,
        "records_failed": 0,
        "errors": [],
    }
    if not records:
        return stats

    current_key = KeyDerivation.derive_key(
        passphrase, config.current_salt_bytes, config.pbkdf2_iterations, config.key_bits
    )
    legacy_key: Optional[bytes] = None

    for record in records:
        try:
            decrypt_records([record], current_key)
            stats["records_verified"] += 1
            continue
        except AuthenticationError:
            pass
        except VaultCorruptedError as e:
            stats["records_failed"] += 1
            stats["errors"].append(f"{record.id}: {e}")
            continue

        if legacy_key is None:
            legacy_key = KeyDerivation.derive_key(
                passphrase, config.legacy_salt_bytes, config.pbkdf2_iterations, config.key_bits
            )
        try:
            decrypt_records([record], legacy_key)
            stats["records_legacy"] += 1
        except (AuthenticationError, VaultCorruptedError) as e:
            stats["records_failed"] += 1
            stats["errors"].append(f"{record.id}: {e}")

    logger.info(
        f"Verified {stats['records_verified']}/{stats['records_total']} records "
        f"({stats['records_legacy']} legacy, {stats['records_failed']} failed)"
    )
    return stats
