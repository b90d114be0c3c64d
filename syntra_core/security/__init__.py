"""
Security
========

Encryption, audit trail and redaction keywords for conversation history.
"""

from syntra_core.security.audit import (
    AuditAction,
    AuditEntry,
    AuditTrail,
    compute_audit_hash,
)
from syntra_core.security.encryption import (
    EncryptedData,
    EncryptionAlgorithm,
    RecordEncryptor,
)
from syntra_core.security.vault import KeyBundle, SecurityVault

__all__ = [
    # Audit
    "AuditAction",
    "AuditEntry",
    "AuditTrail",
    "compute_audit_hash",
    # Encryption
    "EncryptedData",
    "EncryptionAlgorithm",
    "RecordEncryptor",
    # Vault
    "SecurityVault",
    "KeyBundle",
]
