"""
Conversation history data types.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from syntra_core.emotion import EmotionLabel


def new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ConversationEntry:
    """
    One translated utterance.

    Entries are never edited in place. The ``encrypted`` flag records
    whether the vault was active when the entry was written and does not
    change afterwards.
    """

    speaker: str
    original_text: str
    translated_text: str
    emotion: EmotionLabel
    emotion_confidence: float
    source_language: str
    target_language: str
    session_id: str
    id: str = field(default_factory=new_entry_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    encrypted: bool = False
    audio_url: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "emotion", EmotionLabel.parse(self.emotion))
        object.__setattr__(
            self, "emotion_confidence", max(0.0, min(100.0, float(self.emotion_confidence)))
        )

    def with_encryption_flag(self, encrypted: bool) -> "ConversationEntry":
        return replace(self, encrypted=encrypted)

    def masked(self, keywords: Iterable[str], mask: str = "*") -> "ConversationEntry":
        """Copy with redaction keywords masked in the free-text fields."""
        keywords = list(keywords)
        if not keywords:
            return self
        return replace(
            self,
            speaker=mask_keywords(self.speaker, keywords, mask),
            original_text=mask_keywords(self.original_text, keywords, mask),
            translated_text=mask_keywords(self.translated_text, keywords, mask),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted record shape."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "speaker": self.speaker,
            "originalText": self.original_text,
            "translatedText": self.translated_text,
            "emotion": self.emotion.value,
            "emotionConfidence": self.emotion_confidence,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "sessionId": self.session_id,
            "encrypted": self.encrypted,
            "audioUrl": self.audio_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationEntry":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return cls(
            id=str(data["id"]),
            timestamp=timestamp,
            speaker=data.get("speaker", ""),
            original_text=data.get("originalText", ""),
            translated_text=data.get("translatedText", ""),
            emotion=data.get("emotion", EmotionLabel.NEUTRAL.value),
            emotion_confidence=data.get("emotionConfidence", 0),
            source_language=data.get("sourceLanguage", ""),
            target_language=data.get("targetLanguage", ""),
            session_id=data.get("sessionId", ""),
            encrypted=bool(data.get("encrypted", False)),
            audio_url=data.get("audioUrl"),
        )


@dataclass
class HistoryFilter:
    """
    Conjunctive query over history entries.

    ``search`` is a case-insensitive substring match against the original
    text, translated text and speaker. ``emotion`` and ``speaker`` are exact
    matches. Unset criteria match everything.
    """

    search: Optional[str] = None
    emotion: Optional[EmotionLabel] = None
    speaker: Optional[str] = None

    def __post_init__(self):
        if self.emotion is not None:
            self.emotion = EmotionLabel.parse(self.emotion)

    @property
    def is_empty(self) -> bool:
        return not self.search and self.emotion is None and not self.speaker

    def matches(self, entry: ConversationEntry) -> bool:
        if self.search:
            needle = self.search.lower()
            haystacks = (entry.original_text, entry.translated_text, entry.speaker)
            if not any(needle in text.lower() for text in haystacks):
                return False

        if self.emotion is not None and entry.emotion != self.emotion:
            return False

        if self.speaker and entry.speaker != self.speaker:
            return False

        return True


def mask_keywords(text: str, keywords: Iterable[str], mask: str = "*") -> str:
    """Replace each keyword occurrence with ``mask`` repeated to its length."""
    for keyword in keywords:
        if keyword:
            text = text.replace(keyword, mask * len(keyword))
    return text
