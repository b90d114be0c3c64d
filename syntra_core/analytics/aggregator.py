"""
Session Aggregator
==================

Running statistics over tutor sessions and conversation history.

``recompute`` is pure. ``attach`` wires the aggregator to a tutor
history and a history store so the cached ``latest`` stats follow every
change.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from syntra_core.config import get_settings
from syntra_core.emotion.base import SCORED_EMOTIONS, EmotionLabel
from syntra_core.feedback.sessions import TutorSession, TutorSessionHistory
from syntra_core.history.base import ConversationEntry
from syntra_core.history.store import HistoryStore

logger = structlog.get_logger(__name__)


# Enumeration order for dominant-label ties
_DISTRIBUTION_ORDER = SCORED_EMOTIONS + (EmotionLabel.NEUTRAL,)


@dataclass(frozen=True)
class EmotionDistribution:
    """Entry counts per emotion label."""

    counts: Dict[EmotionLabel, int] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Sequence[ConversationEntry]) -> "EmotionDistribution":
        counter = Counter(entry.emotion for entry in entries)
        return cls(counts={label: counter.get(label, 0) for label in _DISTRIBUTION_ORDER})

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def dominant(self) -> EmotionLabel:
        """Most frequent label; ties go to the earlier label, empty is neutral."""
        best = EmotionLabel.NEUTRAL
        best_count = 0
        for label in _DISTRIBUTION_ORDER:
            count = self.counts.get(label, 0)
            if count > best_count:
                best, best_count = label, count
        return best

    def to_dict(self) -> Dict[str, int]:
        return {label.value: self.counts.get(label, 0) for label in _DISTRIBUTION_ORDER}


@dataclass(frozen=True)
class SessionStats:
    """Aggregated statistics."""

    total_sessions: int = 0
    average_score: int = 0
    distinct_emotion_count: int = 0
    streak_days: int = 0
    distribution: EmotionDistribution = field(default_factory=EmotionDistribution)

    @property
    def dominant_emotion(self) -> EmotionLabel:
        return self.distribution.dominant

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "averageScore": self.average_score,
            "distinctEmotionCount": self.distinct_emotion_count,
            "streakDays": self.streak_days,
            "dominantEmotion": self.dominant_emotion.value,
            "distribution": self.distribution.to_dict(),
        }


StatsListener = Callable[[SessionStats], None]


class SessionAggregator:
    """Derives SessionStats from sessions and history entries."""

    def __init__(self, streak_cap: Optional[int] = None):
        self._streak_cap = streak_cap or get_settings().tutor.streak_cap
        self._sessions: List[TutorSession] = []
        self._entries: List[ConversationEntry] = []
        self._listeners: List[StatsListener] = []
        self.latest = SessionStats()

    def recompute(
        self,
        sessions: Sequence[TutorSession],
        entries: Sequence[ConversationEntry] = (),
    ) -> SessionStats:
        total = len(sessions)
        average = 0
        if total:
            # Half rounds up
            average = int(math.floor(sum(s.score for s in sessions) / total + 0.5))

        # Streak is a session-count heuristic, not calendar days
        return SessionStats(
            total_sessions=total,
            average_score=average,
            distinct_emotion_count=len({s.emotion for s in sessions}),
            streak_days=min(total, self._streak_cap),
            distribution=EmotionDistribution.from_entries(entries),
        )

    def add_listener(self, listener: StatsListener) -> None:
        self._listeners.append(listener)

    def attach(
        self,
        tutor_history: Optional[TutorSessionHistory] = None,
        history_store: Optional[HistoryStore] = None,
    ) -> SessionStats:
        """Follow a tutor history and/or a history store."""
        if tutor_history is not None:
            self._sessions = tutor_history.sessions
            tutor_history.add_listener(self._on_sessions)
        if history_store is not None:
            self._entries = history_store.entries
            history_store.add_listener(self._on_entries)
        return self._refresh()

    def _on_sessions(self, sessions: List[TutorSession]) -> None:
        self._sessions = sessions
        self._refresh()

    def _on_entries(self, entries: List[ConversationEntry]) -> None:
        self._entries = entries
        self._refresh()

    def _refresh(self) -> SessionStats:
        self.latest = self.recompute(self._sessions, self._entries)
        logger.debug(
            "Session stats recomputed",
            total_sessions=self.latest.total_sessions,
            average_score=self.latest.average_score,
        )
        for listener in self._listeners:
            try:
                listener(self.latest)
            except Exception as e:
                logger.error("Stats listener error", error=str(e))
        return self.latest
