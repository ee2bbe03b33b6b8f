"""Vault configuration for Aura Vault."""

import os
from dataclasses import dataclass, field
from pathlib import Path

CURRENT_SALT = "aura-secure-memory-vault-salt-v2"
LEGACY_SALT = "aura-secure-memory-vault-salt"


@dataclass
class VaultConfig:
    """Configuration for vault encryption operations."""

    # Key derivation
    pbkdf2_iterations: int = 100_000
    key_bits: int = 256  # AES-256

    # Named salts. Records under the legacy salt are migrated on unlock.
    current_salt: str = CURRENT_SALT
    legacy_salt: str = LEGACY_SALT

    # Session management
    auto_lock_seconds: float = 5 * 60  # 0 = never auto-lock

    # Records
    owner: str = "local"
    records_file: Path = field(
        default_factory=lambda: Path.home() / ".aura-vault" / "vault.json"
    )

    log_level: str = "INFO"

    @property
    def current_salt_bytes(self) -> bytes:
        return self.current_salt.encode("utf-8")

    @property
    def legacy_salt_bytes(self) -> bytes:
        return self.legacy_salt.encode("utf-8")

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            VAULT_PBKDF2_ITERATIONS: PBKDF2 iteration count (default: 100000)
            VAULT_AUTO_LOCK_SECONDS: Inactivity timeout in seconds (default: 300)
            VAULT_OWNER: Owner id stamped on new records (default: local)
            VAULT_RECORDS_FILE: JSON file holding the records
            VAULT_LOG_LEVEL: Log level for the CLI (default: INFO)
        """
        config = cls()

        if iterations := os.getenv("VAULT_PBKDF2_ITERATIONS"):
            config.pbkdf2_iterations = int(iterations)

        if timeout := os.getenv("VAULT_AUTO_LOCK_SECONDS"):
            config.auto_lock_seconds = float(timeout)

        if owner := os.getenv("VAULT_OWNER"):
            config.owner = owner

        if records_file := os.getenv("VAULT_RECORDS_FILE"):
            config.records_file = Path(records_file).expanduser()

        if log_level := os.getenv("VAULT_LOG_LEVEL"):
            config.log_level = log_level

        return config


# Global configuration instance
_config: VaultConfig | None = None


def get_vault_config() -> VaultConfig:
    """Get the global vault configuration."""
    global _config
    if _config is None:
        _config = VaultConfig.from_env()
    return _config


def set_vault_config(config: VaultConfig | None) -> None:
    """Set the global vault configuration (None reloads from the environment)."""
    global _config
    _config = config
