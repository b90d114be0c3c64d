"""
Record Encryption
=================

Authenticated symmetric encryption of serializable record lists.

Keys are opaque strings. Each encryption derives a 256-bit AES key from
the key string with PBKDF2-HMAC-SHA256 and a fresh salt, then seals the
JSON payload with AES-256-GCM. The salt, nonce and tag travel in a small
header so the ciphertext is a single self-describing base64 string.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from syntra_core.config import get_settings
from syntra_core.exceptions import DecryptionError

logger = structlog.get_logger(__name__)

# Upper bound accepted from an envelope header
MAX_KDF_ITERATIONS = 1_000_000


class EncryptionAlgorithm(str, Enum):
    """Supported encryption algorithms."""

    AES_256_GCM = "aes-256-gcm"


@dataclass
class EncryptedData:
    """Container for encrypted data."""

    ciphertext: bytes
    key_id: str
    salt: bytes
    iv: bytes
    tag: bytes
    algorithm: EncryptionAlgorithm = EncryptionAlgorithm.AES_256_GCM
    iterations: int = 100_000
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_bytes(self) -> bytes:
        """Serialize to bytes for storage."""
        header = {
            "algorithm": self.algorithm.value,
            "key_id": self.key_id,
            "salt": base64.b64encode(self.salt).decode(),
            "iv": base64.b64encode(self.iv).decode(),
            "tag": base64.b64encode(self.tag).decode(),
            "iterations": self.iterations,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
        }
        header_bytes = json.dumps(header).encode()
        header_len = len(header_bytes).to_bytes(4, "big")
        return header_len + header_bytes + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedData":
        """Deserialize from bytes."""
        header_len = int.from_bytes(data[:4], "big")
        header_bytes = data[4:4 + header_len]
        ciphertext = data[4 + header_len:]
        header = json.loads(header_bytes)
        iterations = header.get("iterations", 100_000)
        if isinstance(iterations, bool) or not isinstance(iterations, int):
            raise ValueError("Envelope iteration count must be an integer")
        if not 1 <= iterations <= MAX_KDF_ITERATIONS:
            raise ValueError(f"Envelope iteration count out of range: {iterations}")
        return cls(
            ciphertext=ciphertext,
            key_id=header["key_id"],
            salt=base64.b64decode(header["salt"]),
            iv=base64.b64decode(header["iv"]),
            tag=base64.b64decode(header["tag"]),
            algorithm=EncryptionAlgorithm(header["algorithm"]),
            iterations=iterations,
            version=header.get("version", 1),
            created_at=datetime.fromisoformat(header["created_at"]),
        )

    def to_base64(self) -> str:
        """Encode as base64 string."""
        return base64.b64encode(self.to_bytes()).decode()

    @classmethod
    def from_base64(cls, data: str) -> "EncryptedData":
        """Decode from base64 string."""
        return cls.from_bytes(base64.b64decode(data, validate=True))


class RecordEncryptor:
    """
    Encrypts and decrypts JSON-serializable record lists.

    Decryption fails closed: a wrong key or a damaged payload raises
    DecryptionError and never yields partial records.
    """

    def __init__(self, iterations: Optional[int] = None):
        self._iterations = iterations or get_settings().security.kdf_iterations

    @staticmethod
    def _derive_key_id(key: bytes) -> str:
        """Derive key ID from key material."""
        return hashlib.sha256(key).hexdigest()[:16]

    @staticmethod
    def derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
        """Derive a 256-bit AES key from a key string."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
            backend=default_backend(),
        )
        return kdf.derive(passphrase.encode())

    def encrypt_bytes(self, plaintext: bytes, key: str) -> EncryptedData:
        """Encrypt raw bytes under the key string."""
        if not key:
            raise ValueError("Encryption key must not be empty")

        salt = os.urandom(16)
        iv = os.urandom(12)  # 96-bit IV for GCM
        aes_key = self.derive_key(key, salt, self._iterations)

        cipher = Cipher(
            algorithms.AES(aes_key),
            modes.GCM(iv),
            backend=default_backend(),
        )
        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()

        return EncryptedData(
            ciphertext=ciphertext,
            key_id=self._derive_key_id(aes_key),
            salt=salt,
            iv=iv,
            tag=encryptor.tag,
            iterations=self._iterations,
        )

    def decrypt_bytes(self, encrypted: EncryptedData, key: str) -> bytes:
        """Decrypt an envelope with the key string."""
        try:
            aes_key = self.derive_key(key or "", encrypted.salt, encrypted.iterations)
        except (ValueError, OverflowError, TypeError) as e:
            raise DecryptionError("Key derivation parameters are invalid") from e
        if self._derive_key_id(aes_key) != encrypted.key_id:
            raise DecryptionError("Encryption key does not match this data")

        try:
            cipher = Cipher(
                algorithms.AES(aes_key),
                modes.GCM(encrypted.iv, encrypted.tag),
                backend=default_backend(),
            )
            decryptor = cipher.decryptor()
            return decryptor.update(encrypted.ciphertext) + decryptor.finalize()
        except (InvalidTag, ValueError) as e:
            raise DecryptionError("Ciphertext failed authentication") from e

    def encrypt_records(self, records: List[Any], key: str) -> str:
        """Encrypt a record list into an opaque base64 string."""
        payload = json.dumps(records, ensure_ascii=False, default=str).encode("utf-8")
        return self.encrypt_bytes(payload, key).to_base64()

    def decrypt_records(self, ciphertext: str, key: str) -> List[Any]:
        """Decrypt an opaque string produced by encrypt_records."""
        try:
            encrypted = EncryptedData.from_base64(ciphertext)
        except (binascii.Error, ValueError, KeyError, TypeError) as e:
            raise DecryptionError(
                "Ciphertext is malformed",
                details={"reason": type(e).__name__},
            ) from e

        plaintext = self.decrypt_bytes(encrypted, key)

        try:
            records = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecryptionError("Decrypted payload is not a record list") from e
        if not isinstance(records, list):
            raise DecryptionError("Decrypted payload is not a record list")
        return records
