"""Vault exceptions for Aura Vault."""


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class DerivationError(VaultError):
    """Raised when the key derivation primitive is unavailable or fails."""

    def __init__(self, message: str = "Key derivation failed."):
        super().__init__(message)


class AuthenticationError(VaultError):
    """Raised when a ciphertext fails its integrity check under a key."""

    def __init__(self, message: str = "Ciphertext failed authentication."):
        super().__init__(message)


class UnlockFailed(VaultError):
    """Raised when the vault cannot be unlocked.

    The message is the same for a wrong passphrase and for corrupted data.
    """

    def __init__(self, message: str = "Decryption failed. Incorrect passphrase or corrupted data."):
        super().__init__(message)


class NotUnlocked(VaultError):
    """Raised when an operation needs an unlocked vault."""

    def __init__(self, message: str = "Vault is not unlocked."):
        super().__init__(message)


class RotationFailed(VaultError):
    """Raised when a passphrase rotation is aborted. The store is unchanged."""

    def __init__(self, message: str = "Failed to change passphrase. The old passphrase might be incorrect."):
        super().__init__(message)


class VaultCorruptedError(VaultError):
    """Raised when persisted vault records are malformed."""

    def __init__(self, message: str = "Vault data is corrupted."):
        super().__init__(message)


class RecordNotFoundError(VaultError):
    """Raised when a record id is not present in the vault."""

    def __init__(self, record_id: str = ""):
        message = f"Vault record not found: {record_id}" if record_id else "Vault record not found."
        super().__init__(message)
