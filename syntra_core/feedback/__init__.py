"""
Communication feedback.

- FeedbackEngine: deterministic scoring plus coaching output
- TutorSessionHistory: rolling window of scored sessions
"""

from syntra_core.feedback.engine import (
    FEEDBACK_TEMPLATES,
    SUGGESTIONS,
    FeedbackEngine,
    FeedbackResult,
    ScoreBand,
    emotion_advice,
    score_band,
)
from syntra_core.feedback.sessions import TutorSession, TutorSessionHistory

__all__ = [
    "FeedbackEngine",
    "FeedbackResult",
    "ScoreBand",
    "score_band",
    "emotion_advice",
    "FEEDBACK_TEMPLATES",
    "SUGGESTIONS",
    "TutorSession",
    "TutorSessionHistory",
]
