"""
Tutor session history.

A bounded, newest-first window of immutable TutorSession records.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple, Union

import structlog

from syntra_core.config import get_settings
from syntra_core.emotion.base import EmotionLabel
from syntra_core.feedback.engine import FeedbackEngine, FeedbackResult

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TutorSession:
    """One feedback request and its result."""

    id: str
    emotion: str
    original_text: str
    feedback: str
    suggestion: str
    score: int
    improvements: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "emotion": self.emotion,
            "originalText": self.original_text,
            "feedback": self.feedback,
            "suggestion": self.suggestion,
            "score": self.score,
            "improvements": list(self.improvements),
        }


SessionListener = Callable[[List[TutorSession]], None]


class TutorSessionHistory:
    """
    Rolling window of tutor sessions, newest first.

    Appending beyond the window evicts the oldest session.
    """

    def __init__(
        self,
        engine: Optional[FeedbackEngine] = None,
        window: Optional[int] = None,
        id_source: Callable[[], int] = time.time_ns,
    ):
        self._engine = engine or FeedbackEngine()
        self._window = window or get_settings().tutor.session_window
        self._sessions: Deque[TutorSession] = deque(maxlen=self._window)
        self._id_source = id_source
        self._last_id = 0
        self._listeners: List[SessionListener] = []

    @property
    def window(self) -> int:
        return self._window

    @property
    def sessions(self) -> List[TutorSession]:
        """Sessions, newest first."""
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback invoked with the session list after every change."""
        self._listeners.append(listener)

    def _next_id(self) -> str:
        # Time-derived and strictly increasing even when the clock repeats
        candidate = self._id_source()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def record(
        self,
        text: str,
        emotion: Union[EmotionLabel, str],
        result: Optional[FeedbackResult] = None,
    ) -> TutorSession:
        """Score the text (unless a result is given) and store the session."""
        if result is None:
            result = self._engine.score(text, emotion)

        session = TutorSession(
            id=self._next_id(),
            emotion=emotion.value if isinstance(emotion, EmotionLabel) else str(emotion),
            original_text=text,
            feedback=result.feedback,
            suggestion=result.suggestion,
            score=result.score,
            improvements=tuple(result.improvements),
        )
        self._sessions.appendleft(session)

        logger.info(
            "Tutor session recorded",
            session_id=session.id,
            emotion=session.emotion,
            score=session.score,
        )
        self._notify()
        return session

    def clear(self) -> None:
        self._sessions.clear()
        self._notify()

    def _notify(self) -> None:
        snapshot = self.sessions
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Session listener error", error=str(e))
