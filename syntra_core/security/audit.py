"""
Audit Trail
===========

Hash-stamped record of security-relevant actions.

Each entry carries a SHA-256 digest of its own timestamp, action and
details, so an entry can be checked in isolation. Entries are NOT linked
to one another: removing or reordering entries is not detectable.
"""

from __future__ import annotations

import csv
import hashlib
import io
import json
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Union

import structlog

from syntra_core.config import get_settings

logger = structlog.get_logger(__name__)


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditAction(str, Enum):
    """Known audit action kinds."""

    # Key management
    KEY_GENERATED = "KEY_GENERATED"
    KEYS_IMPORTED = "KEYS_IMPORTED"
    KEYS_EXPORTED = "KEYS_EXPORTED"

    # Redaction filters
    KEYWORD_FILTER_ADDED = "KEYWORD_FILTER_ADDED"
    KEYWORD_FILTER_REMOVED = "KEYWORD_FILTER_REMOVED"

    # Encryption
    ENCRYPTION_ENABLED = "ENCRYPTION_ENABLED"
    ENCRYPTION_DISABLED = "ENCRYPTION_DISABLED"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"

    # History and exports
    AUDIT_LOG_EXPORTED = "AUDIT_LOG_EXPORTED"
    HISTORY_EXPORTED = "HISTORY_EXPORTED"
    ENTRY_DELETED = "ENTRY_DELETED"
    HISTORY_CLEARED = "HISTORY_CLEARED"


def compute_audit_hash(timestamp: datetime, action: AuditAction, details: Any) -> str:
    """SHA-256 over "{timestamp}-{action}-{details as JSON}"."""
    serialized = json.dumps(details, sort_keys=True, default=str)
    data = f"{timestamp.isoformat()}-{action.value}-{serialized}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AuditEntry:
    """One audit trail entry."""

    timestamp: datetime
    action: AuditAction
    hash: str
    details: Dict[str, Any] = field(default_factory=dict)

    def verify_integrity(self) -> bool:
        """Recompute the digest and compare."""
        return self.hash == compute_audit_hash(self.timestamp, self.action, self.details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "hash": self.hash,
            "details": self.details,
        }


class AuditTrail:
    """
    Bounded, newest-first audit window.

    Appending beyond the window evicts the oldest entry.
    """

    def __init__(self, window: Optional[int] = None, clock: Clock = utc_now):
        self._window = window or get_settings().security.audit_window
        self._entries: Deque[AuditEntry] = deque(maxlen=self._window)
        self._clock = clock
        self._hooks: List[Callable[[AuditEntry], None]] = []

    @property
    def window(self) -> int:
        return self._window

    @property
    def entries(self) -> List[AuditEntry]:
        """Entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_hook(self, hook: Callable[[AuditEntry], None]) -> None:
        """Add a hook to be called for each entry."""
        self._hooks.append(hook)

    def append(
        self,
        action: Union[AuditAction, str],
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        """Stamp and store a new entry."""
        action = AuditAction(action)
        details = dict(details or {})
        timestamp = self._clock()

        entry = AuditEntry(
            timestamp=timestamp,
            action=action,
            hash=compute_audit_hash(timestamp, action, details),
            details=details,
        )
        self._entries.appendleft(entry)

        logger.info("Audit entry recorded", action=action.value, hash=entry.hash[:12])

        for hook in self._hooks:
            try:
                hook(entry)
            except Exception as e:
                logger.error("Audit hook error", error=str(e))

        return entry

    def to_csv(self) -> bytes:
        """Render the trail as CSV: Timestamp, Action, Hash, Details (JSON)."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(["Timestamp", "Action", "Hash", "Details"])
        for entry in self._entries:
            writer.writerow([
                entry.timestamp.isoformat(),
                entry.action.value,
                entry.hash,
                json.dumps(entry.details, sort_keys=True, default=str),
            ])
        return buffer.getvalue().encode("utf-8")
