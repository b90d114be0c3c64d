"""
Security Vault
==============

Owns the active encryption key, the audit trail and the redaction
keyword set for a conversation history.

The key is kept in memory only. It is never logged; audit entries carry
its length at most. Redaction keywords are stored here but applied by
the history display/export path.
"""

from __future__ import annotations

import json
import secrets
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from syntra_core.config import get_settings
from syntra_core.exceptions import DecryptionError, ExportError, ImportValidationError
from syntra_core.security.audit import AuditAction, AuditEntry, AuditTrail, Clock, utc_now
from syntra_core.security.encryption import RecordEncryptor

logger = structlog.get_logger(__name__)


SUPPORTED_BUNDLE_VERSIONS = ("1.0",)
KEY_BYTES = 32  # 256 bits


class KeyBundle(BaseModel):
    """Exported key material: {encryptionKey, timestamp, version}."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    encryption_key: str = Field(alias="encryptionKey", min_length=1)
    timestamp: datetime
    version: str

    @field_validator("encryption_key")
    @classmethod
    def _no_inner_whitespace(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("encryption key must not contain whitespace")
        return value

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: str) -> str:
        if value not in SUPPORTED_BUNDLE_VERSIONS:
            raise ValueError(f"unsupported key bundle version: {value}")
        return value

    def to_json(self) -> str:
        return json.dumps(
            {
                "encryptionKey": self.encryption_key,
                "timestamp": self.timestamp.isoformat(),
                "version": self.version,
            },
            indent=2,
        )


class SecurityVault:
    """
    Key management, record encryption, audit trail and redaction list.

    Encryption is active only when it is enabled AND a key is present.
    """

    def __init__(
        self,
        audit_trail: Optional[AuditTrail] = None,
        encryptor: Optional[RecordEncryptor] = None,
        clock: Clock = utc_now,
        encryption_enabled: bool = True,
    ):
        self._clock = clock
        self._audit = audit_trail or AuditTrail(clock=clock)
        self._encryptor = encryptor or RecordEncryptor()
        self._key: Optional[str] = None
        self._encryption_enabled = encryption_enabled
        self._redactions: List[str] = []
        self._settings = get_settings().security

    # -------------------------------------------------------------------------
    # Key management
    # -------------------------------------------------------------------------

    @property
    def has_key(self) -> bool:
        return bool(self._key)

    @property
    def active_key(self) -> Optional[str]:
        """The in-memory key. Callers must not log it."""
        return self._key

    @property
    def encryption_enabled(self) -> bool:
        return self._encryption_enabled

    @property
    def is_active(self) -> bool:
        """True when new writes will be encrypted."""
        return self._encryption_enabled and self.has_key

    def generate_key(self) -> str:
        """Generate a random 256-bit key, hex-encoded, and make it active."""
        key = secrets.token_hex(KEY_BYTES)
        self._key = key
        self.append_audit(AuditAction.KEY_GENERATED, {"keyLength": len(key)})
        logger.info("Encryption key generated", key_length=len(key))
        return key

    def set_key(self, key: Optional[str]) -> None:
        """Adopt a caller-supplied key (or drop the key with None)."""
        self._key = key or None

    def enable_encryption(self) -> None:
        if not self._encryption_enabled:
            self._encryption_enabled = True
            self.append_audit(AuditAction.ENCRYPTION_ENABLED, {"hasKey": self.has_key})

    def disable_encryption(self) -> None:
        if self._encryption_enabled:
            self._encryption_enabled = False
            self.append_audit(AuditAction.ENCRYPTION_DISABLED, {})

    def export_key_material(self) -> bytes:
        """Serialize the active key as a versioned JSON bundle."""
        if not self._key:
            raise ExportError("No encryption key to export")

        bundle = KeyBundle(
            encryption_key=self._key,
            timestamp=self._clock(),
            version=self._settings.key_bundle_version,
        )
        self.append_audit(AuditAction.KEYS_EXPORTED, {"timestamp": bundle.timestamp.isoformat()})
        return bundle.to_json().encode("utf-8")

    def import_key_material(self, blob: Union[str, bytes]) -> str:
        """
        Parse a key bundle and adopt its key.

        Raises:
            ImportValidationError: The bundle is not valid JSON or fails
                shape validation. The current key is left untouched.
        """
        try:
            raw = blob.decode("utf-8") if isinstance(blob, bytes) else blob
        except UnicodeDecodeError as e:
            raise ImportValidationError("Key bundle is not valid UTF-8") from e
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ImportValidationError("Key bundle is not valid JSON") from e
        if not isinstance(data, dict):
            raise ImportValidationError("Key bundle must be a JSON object")

        try:
            bundle = KeyBundle.model_validate(data)
        except ValidationError as e:
            raise ImportValidationError(
                "Key bundle failed validation",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e

        self._key = bundle.encryption_key
        self.append_audit(AuditAction.KEYS_IMPORTED, {"fileSize": len(raw.encode("utf-8"))})
        logger.info("Encryption key imported", bundle_version=bundle.version)
        return bundle.encryption_key

    # -------------------------------------------------------------------------
    # Encryption
    # -------------------------------------------------------------------------

    def encrypt(self, records: List[Any], key: Optional[str] = None) -> str:
        """Encrypt a record list with the given key or the active key."""
        key = key or self._key
        if not key:
            raise ValueError("No encryption key available")
        return self._encryptor.encrypt_records(records, key)

    def decrypt(self, ciphertext: str, key: Optional[str] = None) -> List[Any]:
        """
        Decrypt a record list.

        Raises:
            DecryptionError: No key, wrong key, or corrupted ciphertext.
        """
        key = key or self._key
        if not key:
            raise DecryptionError("No encryption key available")
        return self._encryptor.decrypt_records(ciphertext, key)

    # -------------------------------------------------------------------------
    # Audit trail
    # -------------------------------------------------------------------------

    @property
    def audit_trail(self) -> List[AuditEntry]:
        """Audit entries, newest first."""
        return self._audit.entries

    def append_audit(
        self,
        action: Union[AuditAction, str],
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        return self._audit.append(action, details)

    def export_audit_csv(self) -> bytes:
        """Render the audit trail as CSV and record the export."""
        count = len(self._audit)
        payload = self._audit.to_csv()
        self.append_audit(AuditAction.AUDIT_LOG_EXPORTED, {"entryCount": count})
        return payload

    # -------------------------------------------------------------------------
    # Redaction keywords
    # -------------------------------------------------------------------------

    @property
    def redactions(self) -> List[str]:
        """Active redaction keywords in insertion order."""
        return list(self._redactions)

    @property
    def redaction_mask(self) -> str:
        return self._settings.redaction_mask

    def add_redaction(self, keyword: str) -> bool:
        """Add a keyword. Returns False for blank or duplicate keywords."""
        keyword = (keyword or "").strip()
        if not keyword or keyword in self._redactions:
            return False
        self._redactions.append(keyword)
        self.append_audit(AuditAction.KEYWORD_FILTER_ADDED, {"keyword": keyword})
        return True

    def remove_redaction(self, keyword: str) -> bool:
        """Remove a keyword. Returns False when it was not present."""
        if keyword not in self._redactions:
            return False
        self._redactions.remove(keyword)
        self.append_audit(AuditAction.KEYWORD_FILTER_REMOVED, {"keyword": keyword})
        return True
