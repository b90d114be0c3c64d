"""Shared pytest fixtures for testing."""

import os
import random
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

# Set test environment before settings are first read
os.environ["SYNTRA_ENVIRONMENT"] = "test"
os.environ["SYNTRA_SECURITY_KDF_ITERATIONS"] = "1000"
os.environ["SYNTRA_CLASSIFIER_LATENCY_S"] = "0"
os.environ["SYNTRA_HISTORY_TRANSLATION_LATENCY_S"] = "0"
os.environ.pop("SYNTRA_HISTORY_STORAGE_DIR", None)

from syntra_core.emotion import EmotionLabel  # noqa: E402
from syntra_core.feedback import FeedbackEngine  # noqa: E402
from syntra_core.history import ConversationEntry, HistoryStore, InMemoryHistoryStorage  # noqa: E402
from syntra_core.security import AuditTrail, SecurityVault  # noqa: E402


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> FakeClock:
    """Create a deterministic clock."""
    return FakeClock()


# =============================================================================
# Security Fixtures
# =============================================================================


@pytest.fixture
def audit_trail(clock) -> AuditTrail:
    """Create an audit trail on the fake clock."""
    return AuditTrail(clock=clock)


@pytest.fixture
def vault(audit_trail, clock) -> SecurityVault:
    """Create a vault without a key."""
    return SecurityVault(audit_trail=audit_trail, clock=clock)


@pytest.fixture
def keyed_vault(vault) -> SecurityVault:
    """Create a vault with a generated key."""
    vault.generate_key()
    return vault


# =============================================================================
# History Fixtures
# =============================================================================


@pytest.fixture
def storage() -> InMemoryHistoryStorage:
    """Create in-memory history storage."""
    return InMemoryHistoryStorage()


@pytest.fixture
def store(vault, storage) -> HistoryStore:
    """Create a history store over in-memory storage."""
    return HistoryStore(vault, storage)


@pytest.fixture
def make_entry() -> Callable[..., ConversationEntry]:
    """Factory for conversation entries with sensible defaults."""

    def _make(
        original_text: str = "Hello there",
        translated_text: str = "Hola",
        speaker: str = "alice",
        emotion: EmotionLabel = EmotionLabel.NEUTRAL,
        confidence: float = 0.0,
        session_id: str = "session-1",
        **kwargs,
    ) -> ConversationEntry:
        return ConversationEntry(
            speaker=speaker,
            original_text=original_text,
            translated_text=translated_text,
            emotion=emotion,
            emotion_confidence=confidence,
            source_language=kwargs.pop("source_language", "en"),
            target_language=kwargs.pop("target_language", "es"),
            session_id=session_id,
            **kwargs,
        )

    return _make


# =============================================================================
# Feedback Fixtures
# =============================================================================


@pytest.fixture
def seeded_engine() -> FeedbackEngine:
    """Create a feedback engine with pinned phrasing."""
    return FeedbackEngine(rng=random.Random(42))
