"""
Exceptions for the Syntra conversation pipeline.

Every error raised by the core is recoverable: callers catch it, keep the
previous valid state and may retry. Classification never raises.
"""

from typing import Any, Dict, Optional


class SyntraError(Exception):
    """
    Base exception for all Syntra errors.

    Attributes:
        message: Human-readable error description
        code: Short machine-readable error code
        details: Optional additional error details
    """

    code = "syntra_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


# =============================================================================
# Security Errors
# =============================================================================


class DecryptionError(SyntraError):
    """
    Raised when ciphertext cannot be opened with the given key.

    Covers both a wrong key and corrupted ciphertext. Never accompanied
    by partial plaintext.
    """

    code = "decryption_failed"


class ImportValidationError(SyntraError):
    """Raised when an imported key bundle is malformed. The active key is untouched."""

    code = "invalid_key_bundle"


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(SyntraError):
    """Raised by storage backends when a read or write fails."""

    code = "storage_error"


class PersistenceError(SyntraError):
    """
    Recorded when the history snapshot could not be saved.

    In-memory state remains authoritative; the next mutation retries.
    """

    code = "persistence_failed"


class ExportError(SyntraError):
    """Raised when an export file could not be produced. Nothing partial is left behind."""

    code = "export_failed"
