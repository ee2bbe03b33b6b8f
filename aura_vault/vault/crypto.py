"""Core cryptographic primitives for the vault.

Uses the cryptography library for:
- PBKDF2-HMAC-SHA256 key derivation (100,000 iterations, 256-bit keys)
- AES-256-GCM authenticated encryption with a random 96-bit nonce per message

Parameters match the browser WebCrypto build of the vault so existing
records stay readable.
"""

import os

from cryptography.exceptions import InternalError, InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import AuthenticationError, DerivationError, VaultCorruptedError

# Key derivation parameters
PBKDF2_ITERATIONS = 100_000
KEY_BITS = 256
KEY_SIZE = KEY_BITS // 8  # 32 bytes for AES-256

# AEAD parameters
NONCE_SIZE = 12  # 96 bits for AES-GCM
TAG_SIZE = 16  # 128-bit authentication tag


class KeyDerivation:
    """Derives encryption keys from a passphrase using PBKDF2."""

    @staticmethod
    def derive_key(
        passphrase: str,
        salt: bytes,
        iterations: int = PBKDF2_ITERATIONS,
        key_bits: int = KEY_BITS,
    ) -> bytes:
        """
        Derive a 256-bit key from a passphrase using PBKDF2-HMAC-SHA256.

        Args:
            passphrase: Vault passphrase
            salt: Salt bytes (one of the configured named salts)
            iterations: PBKDF2 iteration count
            key_bits: Output key size in bits, must be 256

        Returns:
            32-byte derived key

        Raises:
            DerivationError: If the PBKDF2 primitive is unavailable or fails
        """
        if key_bits != KEY_BITS:
            raise ValueError(f"Key size must be {KEY_BITS} bits, got {key_bits}")
        if iterations < 1:
            raise ValueError(f"Iterations must be positive, got {iterations}")

        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=key_bits // 8,
                salt=salt,
                iterations=iterations,
            )
            return kdf.derive(passphrase.encode("utf-8"))
        except (UnsupportedAlgorithm, InternalError) as e:
            raise DerivationError(f"PBKDF2 key derivation failed: {e}")


class AeadCipher:
    """
    AES-256-GCM authenticated encryption.

    Every call to encrypt() draws a fresh random nonce. Callers never supply
    one, so a nonce cannot be reused under the same key by mistake.
    The ciphertext returned has the GCM tag appended, as WebCrypto does.
    """

    @staticmethod
    def _aesgcm(key: bytes) -> AESGCM:
        if len(key) != KEY_SIZE:
            raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
        return AESGCM(key)

    @staticmethod
    def encrypt(key: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
        """
        Encrypt data under a key.

        Args:
            key: 32-byte key
            plaintext: Data to encrypt

        Returns:
            (ciphertext with tag, nonce)
        """
        aesgcm = AeadCipher._aesgcm(key)
        nonce = os.urandom(NONCE_SIZE)
        return aesgcm.encrypt(nonce, plaintext, None), nonce

    @staticmethod
    def decrypt(key: bytes, ciphertext: bytes, nonce: bytes) -> bytes:
        """
        Decrypt and authenticate data.

        Args:
            key: 32-byte key
            ciphertext: Ciphertext with appended tag
            nonce: Nonce used for that encryption

        Returns:
            Decrypted plaintext

        Raises:
            AuthenticationError: Wrong key, tampered data or mismatched nonce
        """
        aesgcm = AeadCipher._aesgcm(key)
        if len(nonce) != NONCE_SIZE:
            raise AuthenticationError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        if len(ciphertext) < TAG_SIZE:
            raise AuthenticationError("Ciphertext is shorter than the authentication tag")
        try:
            return aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag:
            raise AuthenticationError("Invalid ciphertext or wrong key")

    @staticmethod
    def encrypt_text(key: bytes, plaintext: str) -> tuple[bytes, bytes]:
        """Encrypt a UTF-8 string."""
        return AeadCipher.encrypt(key, plaintext.encode("utf-8"))

    @staticmethod
    def decrypt_text(key: bytes, ciphertext: bytes, nonce: bytes) -> str:
        """Decrypt to a UTF-8 string."""
        plaintext = AeadCipher.decrypt(key, ciphertext, nonce)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise VaultCorruptedError("Decrypted content is not valid UTF-8")
