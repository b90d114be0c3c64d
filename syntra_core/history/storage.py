"""
History Storage Providers
=========================

Durable slots for the serialized conversation history. A slot holds
either the plain record list or the opaque ciphertext string produced by
the vault; providers do not look inside the payload.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from syntra_core.exceptions import StorageError

logger = structlog.get_logger(__name__)


Payload = Union[str, List[Dict[str, Any]]]


# =============================================================================
# Storage Provider Interface
# =============================================================================


class HistoryStorage(ABC):
    """Abstract base class for history storage providers."""

    @abstractmethod
    async def read(self, slot: str) -> Optional[Payload]:
        """
        Read a slot.

        Returns:
            The stored payload, or None when the slot is empty.

        Raises:
            StorageError: The slot exists but could not be read.
        """
        pass

    @abstractmethod
    async def write(self, slot: str, payload: Payload) -> None:
        """
        Replace the slot contents with a full snapshot.

        Raises:
            StorageError: The write did not complete.
        """
        pass

    @abstractmethod
    async def delete(self, slot: str) -> bool:
        """Delete a slot. Returns False when it did not exist."""
        pass


# =============================================================================
# In-Memory Provider
# =============================================================================


class InMemoryHistoryStorage(HistoryStorage):
    """Process-local storage, used for tests and ephemeral sessions."""

    def __init__(self):
        self._slots: Dict[str, str] = {}
        self.write_count = 0

    async def read(self, slot: str) -> Optional[Payload]:
        raw = self._slots.get(slot)
        return json.loads(raw) if raw is not None else None

    async def write(self, slot: str, payload: Payload) -> None:
        # Stored serialized so callers cannot mutate the snapshot afterwards
        self._slots[slot] = json.dumps(payload)
        self.write_count += 1

    async def delete(self, slot: str) -> bool:
        return self._slots.pop(slot, None) is not None


# =============================================================================
# Local Filesystem Provider
# =============================================================================


class FileHistoryStorage(HistoryStorage):
    """One JSON file per slot under a base directory."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir).expanduser()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, slot: str) -> Path:
        return self.base_dir / f"{slot}.json"

    async def read(self, slot: str) -> Optional[Payload]:
        full_path = self._get_full_path(slot)
        if not full_path.exists():
            return None
        try:
            return json.loads(full_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Failed to read slot: {slot}",
                details={"path": str(full_path), "reason": str(e)},
            ) from e

    async def write(self, slot: str, payload: Payload) -> None:
        full_path = self._get_full_path(slot)
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.base_dir), prefix=f".{slot}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False)
                os.replace(tmp_path, full_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(
                f"Failed to write slot: {slot}",
                details={"path": str(full_path), "reason": str(e)},
            ) from e

        logger.debug("History slot written", slot=slot, path=str(full_path))

    async def delete(self, slot: str) -> bool:
        full_path = self._get_full_path(slot)
        if full_path.exists():
            full_path.unlink()
            logger.info("History slot deleted", slot=slot)
            return True
        return False
