"""Vault record data models."""

import base64
import binascii
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .exceptions import VaultCorruptedError


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: str, name: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise VaultCorruptedError(f"Invalid base64 in {name}: {e}")


def new_record_id() -> str:
    """Generate an opaque record id."""
    return f"v{uuid.uuid4().hex}"


@dataclass(frozen=True)
class VaultRecord:
    """
    A persisted secret.

    Only ``title`` is plaintext. ``ciphertext`` and ``nonce`` are base64
    strings and must only be decrypted with the key that produced them.
    Records are immutable; re-encryption returns a new record with the
    same id.
    """

    id: str
    owner: str
    title: str
    ciphertext: str
    nonce: str
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, owner: str, title: str, ciphertext: bytes, nonce: bytes) -> "VaultRecord":
        """Create a new record from raw cipher output."""
        now = datetime.now()
        return cls(
            id=new_record_id(),
            owner=owner,
            title=title,
            ciphertext=_b64encode(ciphertext),
            nonce=_b64encode(nonce),
            created_at=now,
            updated_at=now,
        )

    @property
    def ciphertext_bytes(self) -> bytes:
        return _b64decode(self.ciphertext, "ciphertext")

    @property
    def nonce_bytes(self) -> bytes:
        return _b64decode(self.nonce, "nonce")

    def reencrypted(self, ciphertext: bytes, nonce: bytes) -> "VaultRecord":
        """Return a copy holding new cipher output and a fresh updated_at."""
        return replace(
            self,
            ciphertext=_b64encode(ciphertext),
            nonce=_b64encode(nonce),
            updated_at=datetime.now(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "owner": self.owner,
            "title": self.title,
            "ciphertext": self.ciphertext,
            "nonce": self.nonce,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VaultRecord":
        """
        Create from dictionary.

        Also reads the key names written by the browser build of the vault
        (``userId``, ``ciphertext_base64``).

        Raises:
            VaultCorruptedError: If a required field is missing or malformed
        """
        try:
            created_at = datetime.fromisoformat(data["createdAt"])
            ciphertext = data["ciphertext"] if "ciphertext" in data else data["ciphertext_base64"]
            nonce = data["nonce"]
            if not isinstance(ciphertext, str) or not isinstance(nonce, str):
                raise VaultCorruptedError(
                    f"Invalid vault record {data.get('id')!r}: ciphertext and nonce must be base64 strings"
                )
            return cls(
                id=str(data["id"]),
                owner=str(data.get("owner", data.get("userId", ""))),
                title=str(data["title"]),
                ciphertext=ciphertext,
                nonce=nonce,
                created_at=created_at,
                updated_at=datetime.fromisoformat(data.get("updatedAt", data["createdAt"])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise VaultCorruptedError(f"Invalid vault record: {e}")


@dataclass(frozen=True)
class DecryptedRecord:
    """Plaintext view of a record. Held in memory only while unlocked."""

    id: str
    title: str
    content: str

    def __repr__(self) -> str:
        return f"DecryptedRecord(id={self.id!r}, title={self.title!r}, content=<hidden>)"
