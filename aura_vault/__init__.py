"""Aura Vault - zero-knowledge secret vault."""

__version__ = "0.1.0"

from .vault import (
    DecryptedRecord,
    VaultRecord,
    VaultSession,
    VaultState,
)

__all__ = [
    "__version__",
    "DecryptedRecord",
    "VaultRecord",
    "VaultSession",
    "VaultState",
]
