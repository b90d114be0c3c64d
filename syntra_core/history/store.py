"""
History Store
=============

Ordered conversation history with filtered queries, CSV export and
persistence through the security vault.

Mutations are synchronous. Each one marks the store dirty and schedules a
background save on the running event loop; saves run one at a time under
a lock and always write the full entry list, so the last completed write
is the latest snapshot. Without a running loop the save waits for
``flush()``.
"""

from __future__ import annotations

import asyncio
import csv
import io
import math
from collections import Counter
from typing import Callable, Dict, List, Optional, Union

import structlog

from syntra_core.config import get_settings
from syntra_core.emotion import EmotionLabel
from syntra_core.exceptions import DecryptionError, PersistenceError, StorageError
from syntra_core.history.base import ConversationEntry, HistoryFilter
from syntra_core.history.storage import HistoryStorage, InMemoryHistoryStorage
from syntra_core.security.audit import AuditAction
from syntra_core.security.vault import SecurityVault

logger = structlog.get_logger(__name__)


CSV_HEADER = [
    "Timestamp",
    "Speaker",
    "Original Text",
    "Translated Text",
    "Emotion",
    "Confidence",
    "Source Lang",
    "Target Lang",
    "Session ID",
]

LOCKED_PLACEHOLDER = "Encrypted history: key required"

HistoryListener = Callable[[List[ConversationEntry]], None]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class HistoryStore:
    """
    Newest-first conversation history.

    When the stored history cannot be decrypted the store is *locked*: the
    entry list shows only what was added this session, saves are held back
    so the stored ciphertext is not overwritten, and ``unlock()`` retries
    with another key.
    """

    def __init__(
        self,
        vault: SecurityVault,
        storage: Optional[HistoryStorage] = None,
        slot: Optional[str] = None,
    ):
        self._vault = vault
        self._storage = storage or InMemoryHistoryStorage()
        self._slot = slot or get_settings().history.storage_slot

        self._entries: List[ConversationEntry] = []
        self._listeners: List[HistoryListener] = []

        self._locked_payload: Optional[str] = None
        self._save_lock = asyncio.Lock()
        self._save_task: Optional[asyncio.Task] = None
        self._dirty = False
        self.last_error: Optional[PersistenceError] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def vault(self) -> SecurityVault:
        return self._vault

    @property
    def slot(self) -> str:
        return self._slot

    @property
    def entries(self) -> List[ConversationEntry]:
        """Entries, newest first."""
        return list(self._entries)

    @property
    def is_locked(self) -> bool:
        return self._locked_payload is not None

    @property
    def has_pending_save(self) -> bool:
        return self._dirty

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Optional[ConversationEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add_listener(self, listener: HistoryListener) -> None:
        """Register a callback invoked with the entry list after every change."""
        self._listeners.append(listener)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def append(self, entry: ConversationEntry) -> ConversationEntry:
        """Insert an entry at the head, stamping the vault's current state."""
        entry = entry.with_encryption_flag(self._vault.is_active)
        self._entries.insert(0, entry)

        logger.info(
            "History entry appended",
            entry_id=entry.id,
            emotion=entry.emotion.value,
            encrypted=entry.encrypted,
        )
        self._changed()
        return entry

    def delete(self, entry_id: str) -> bool:
        """Delete one entry. Returns False when the id is unknown."""
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                self._vault.append_audit(AuditAction.ENTRY_DELETED, {"entryId": entry_id})
                self._changed()
                return True
        return False

    def clear(self) -> int:
        """Delete every entry. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        self._vault.append_audit(AuditAction.HISTORY_CLEARED, {"entryCount": count})
        self._changed()
        return count

    def _changed(self) -> None:
        self._notify()
        self._request_save()

    def _notify(self) -> None:
        snapshot = self.entries
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("History listener error", error=str(e))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(
        self,
        filter: Optional[HistoryFilter] = None,
        *,
        search: Optional[str] = None,
        emotion: Optional[Union[EmotionLabel, str]] = None,
        speaker: Optional[str] = None,
    ) -> List[ConversationEntry]:
        """Entries matching every active criterion, newest first."""
        if filter is None:
            filter = HistoryFilter(search=search, emotion=emotion, speaker=speaker)
        return [entry for entry in self._entries if filter.matches(entry)]

    def display(self, entry: ConversationEntry) -> ConversationEntry:
        """The entry as it should be shown, with redaction keywords masked."""
        return entry.masked(self._vault.redactions, self._vault.redaction_mask)

    def unique_emotions(self) -> List[EmotionLabel]:
        return list(dict.fromkeys(entry.emotion for entry in self._entries))

    def unique_speakers(self) -> List[str]:
        return list(dict.fromkeys(entry.speaker for entry in self._entries))

    def session_counts(self) -> Dict[str, int]:
        """Number of entries per session id."""
        return dict(Counter(entry.session_id for entry in self._entries))

    def export_csv(self, filter: Optional[HistoryFilter] = None, redact: bool = True) -> bytes:
        """
        Render the filtered history as CSV.

        Every field is quoted. Rows follow query order (newest first).
        Confidence is rendered as an integer percentage.
        """
        rows = self.query(filter)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for entry in rows:
            if redact:
                entry = self.display(entry)
            writer.writerow([
                entry.timestamp.isoformat(),
                entry.speaker,
                entry.original_text,
                entry.translated_text,
                entry.emotion.value,
                _round_half_up(entry.emotion_confidence),
                entry.source_language,
                entry.target_language,
                entry.session_id,
            ])

        self._vault.append_audit(AuditAction.HISTORY_EXPORTED, {"entryCount": len(rows)})
        return buffer.getvalue().encode("utf-8")

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> int:
        """
        Restore entries from storage, replacing the in-memory list.

        Returns:
            Number of entries loaded.

        Raises:
            DecryptionError: The stored history is encrypted and the vault
                key cannot open it. The store is left locked.
            StorageError: The slot could not be read or holds malformed
                records.
        """
        payload = await self._storage.read(self._slot)
        if payload is None:
            self._entries = []
            self._locked_payload = None
            self._notify()
            return 0

        if isinstance(payload, str):
            try:
                records = self._vault.decrypt(payload)
            except DecryptionError:
                self._locked_payload = payload
                self._entries = []
                self._vault.append_audit(AuditAction.DECRYPTION_FAILED, {"slot": self._slot})
                logger.warning("Stored history could not be decrypted", slot=self._slot)
                self._notify()
                raise
        else:
            records = payload

        self._entries = self._restore(records)
        self._locked_payload = None
        logger.info("History loaded", slot=self._slot, entry_count=len(self._entries))
        self._notify()
        return len(self._entries)

    def unlock(self, key: str) -> int:
        """
        Retry decryption of the stored history with ``key``.

        On success the key becomes the vault's active key and the stored
        entries are placed after anything added while locked.

        Raises:
            DecryptionError: The key does not open the stored history.
        """
        if self._locked_payload is None:
            return len(self._entries)

        try:
            records = self._vault.decrypt(self._locked_payload, key)
        except DecryptionError:
            self._vault.append_audit(AuditAction.DECRYPTION_FAILED, {"slot": self._slot})
            raise

        self._vault.set_key(key)
        restored = self._restore(records)
        self._entries = self._entries + restored
        self._locked_payload = None

        logger.info("History unlocked", slot=self._slot, entry_count=len(restored))
        self._changed()
        return len(restored)

    def _restore(self, records) -> List[ConversationEntry]:
        try:
            return [ConversationEntry.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(
                "Stored history contains malformed records",
                details={"slot": self._slot, "reason": f"{type(e).__name__}: {e}"},
            ) from e

    def _request_save(self) -> None:
        self._dirty = True
        if self.is_locked:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._save_task is None or self._save_task.done():
            self._save_task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        async with self._save_lock:
            while self._dirty and not self.is_locked:
                self._dirty = False
                await self._save_snapshot()

    async def _save_snapshot(self) -> None:
        records = [entry.to_dict() for entry in self._entries]
        encrypted = self._vault.is_active

        try:
            payload = self._vault.encrypt(records) if encrypted else records
            await self._storage.write(self._slot, payload)
        except StorageError as e:
            self.last_error = PersistenceError(
                "Failed to persist history",
                details={"slot": self._slot, "reason": e.message},
            )
            logger.error(
                "History persistence failed",
                slot=self._slot,
                entry_count=len(records),
                error=e.message,
            )
            return

        self.last_error = None
        logger.debug(
            "History persisted",
            slot=self._slot,
            entry_count=len(records),
            encrypted=encrypted,
        )

    async def flush(self) -> bool:
        """
        Wait for pending saves to finish.

        Returns:
            True when the latest snapshot is persisted.
        """
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        if self._dirty and not self.is_locked:
            await self._drain()
        return self.last_error is None and not self._dirty
