"""
Communication Feedback Engine

Grades how effectively a message communicates given its detected
emotion, and produces coaching output: a feedback line, a suggestion
and an ordered list of improvements.

Score and improvements are deterministic for identical inputs. Only the
feedback phrasing is drawn at random, through an injectable source.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import structlog

from syntra_core.emotion.base import EmotionLabel

logger = structlog.get_logger(__name__)


BASE_SCORE = 70
LENGTH_BONUS = 10
WORD_COUNT_BONUS = 10
MIN_SCORE = 0
MAX_SCORE = 100

EMOTION_ADJUSTMENTS: Dict[str, int] = {
    "happy": 5,
    "neutral": 0,
    "sad": -5,
    "angry": -10,
    "fear": -15,
    "surprise": 0,
    "disgust": -15,
}

FEEDBACK_TEMPLATES: Dict[str, List[str]] = {
    "happy": [
        "Your positive energy comes through clearly! This creates a welcoming atmosphere.",
        "Great enthusiasm! Make sure it matches the formality of your situation.",
        "Your joy is infectious! Consider if this level of excitement fits your context.",
    ],
    "sad": [
        "Your emotion is clearly communicated. This can help others understand your feelings.",
        "The sadness in your voice is evident. Consider if you want to project more strength.",
        "Your emotional honesty is valuable. Think about your audience's ability to support you.",
    ],
    "angry": [
        "Strong emotion detected. Consider taking a moment to cool down before communicating.",
        "Your frustration is clear. Try rephrasing to be more constructive.",
        "Intense feelings come through. Consider softening your approach for better reception.",
    ],
    "neutral": [
        "Clear and professional tone. Consider adding more emotional nuance if appropriate.",
        "Balanced communication. You might want to inject more personality.",
        "Steady delivery. Think about whether more emotion would enhance your message.",
    ],
}

SUGGESTIONS: Dict[str, str] = {
    "happy": "Try adding specific examples to your enthusiasm to make it more credible.",
    "sad": "Consider ending with a hopeful note or call to action.",
    "angry": "Replace strong words with more diplomatic alternatives.",
    "neutral": "Add personal touches or emotional words to engage your audience.",
    "surprise": "Build up to your surprise for maximum impact.",
    "fear": "Use confident language like 'I will' instead of 'I might'.",
    "disgust": "Focus on solutions rather than problems.",
}

ADVICE: Dict[str, str] = {
    "happy": "Great energy! Consider if this level of enthusiasm is appropriate for your context.",
    "sad": "Your sadness comes through clearly. Ensure this aligns with your intended message.",
    "angry": "Strong emotion detected. Consider softening your tone for better reception.",
    "surprise": "Your surprise is evident. Make sure it enhances rather than distracts from your message.",
    "fear": "Anxiety detected. Try using more confident language to project assurance.",
    "disgust": "Strong negative emotion. Consider reframing more constructively.",
    "neutral": "Neutral tone detected. Consider adding more emotional nuance if appropriate.",
}

DEFAULT_SUGGESTION = "Keep practicing emotional expression!"

IMPROVE_CLARITY = "Work on emotional clarity in your expression"
IMPROVE_CALMING = "Practice calming techniques before speaking"
IMPROVE_I_STATEMENTS = "Use 'I' statements instead of 'you' statements"
IMPROVE_BALANCE = "Balance vulnerability with strength"
IMPROVE_VARIETY = "Add more emotional variety to engage listeners"

CLARITY_THRESHOLD = 60


class ScoreBand(str, Enum):
    """Coarse grading of a feedback score."""

    EXCELLENT = "excellent"    # >= 80
    FAIR = "fair"              # 60 - 79
    NEEDS_WORK = "needs_work"  # < 60


def _emotion_key(emotion: Union[EmotionLabel, str, None]) -> str:
    if isinstance(emotion, EmotionLabel):
        return emotion.value
    return (emotion or "").strip().lower()


def score_band(score: int) -> ScoreBand:
    """Map a 0-100 score to its band."""
    if score >= 80:
        return ScoreBand.EXCELLENT
    if score >= CLARITY_THRESHOLD:
        return ScoreBand.FAIR
    return ScoreBand.NEEDS_WORK


def emotion_advice(emotion: Union[EmotionLabel, str]) -> str:
    """General advice for an emotion."""
    return ADVICE.get(_emotion_key(emotion), DEFAULT_SUGGESTION)


@dataclass
class FeedbackResult:
    """Output of a single scoring call."""

    score: int
    feedback: str
    suggestion: str
    improvements: List[str] = field(default_factory=list)

    @property
    def band(self) -> ScoreBand:
        return score_band(self.score)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "band": self.band.value,
            "feedback": self.feedback,
            "suggestion": self.suggestion,
            "improvements": list(self.improvements),
        }


class FeedbackEngine:
    """
    Scores a (text, emotion) pair.

    Formula:
    - base 70
    - +10 when 10 < character length < 200
    - +10 when 3 < word count < 50
    - fixed per-emotion adjustment, 0 for unknown labels
    - clamped to [0, 100]
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source for feedback phrasing. Pin a seeded
                instance to make the phrasing reproducible.
        """
        self._rng = rng or random.Random()

    @staticmethod
    def word_count(text: str) -> int:
        """Number of pieces when splitting on a single space."""
        return len(text.split(" "))

    def calculate_score(self, text: str, emotion: Union[EmotionLabel, str]) -> int:
        """Deterministic numeric score."""
        score = BASE_SCORE

        if 10 < len(text) < 200:
            score += LENGTH_BONUS
        if 3 < self.word_count(text) < 50:
            score += WORD_COUNT_BONUS

        score += EMOTION_ADJUSTMENTS.get(_emotion_key(emotion), 0)

        return max(MIN_SCORE, min(MAX_SCORE, score))

    def select_feedback(self, emotion: Union[EmotionLabel, str]) -> str:
        """Pick one feedback template for the emotion."""
        templates = FEEDBACK_TEMPLATES.get(_emotion_key(emotion), FEEDBACK_TEMPLATES["neutral"])
        return self._rng.choice(templates)

    @staticmethod
    def feedback_candidates(emotion: Union[EmotionLabel, str]) -> List[str]:
        """All templates the engine may return for the emotion."""
        return list(FEEDBACK_TEMPLATES.get(_emotion_key(emotion), FEEDBACK_TEMPLATES["neutral"]))

    @staticmethod
    def suggestion_for(emotion: Union[EmotionLabel, str]) -> str:
        """Fixed suggestion for the emotion."""
        return SUGGESTIONS.get(_emotion_key(emotion), DEFAULT_SUGGESTION)

    @staticmethod
    def improvements_for(emotion: Union[EmotionLabel, str], score: int) -> List[str]:
        """Ordered improvement list. Rules are independent and may all apply."""
        key = _emotion_key(emotion)
        improvements: List[str] = []

        if score < CLARITY_THRESHOLD:
            improvements.append(IMPROVE_CLARITY)

        if key == "angry":
            improvements.append(IMPROVE_CALMING)
            improvements.append(IMPROVE_I_STATEMENTS)

        if key == "sad":
            improvements.append(IMPROVE_BALANCE)

        if key == "neutral":
            improvements.append(IMPROVE_VARIETY)

        return improvements

    def score(self, text: Optional[str], emotion: Union[EmotionLabel, str]) -> FeedbackResult:
        """Score a message and build the coaching output."""
        text = text or ""
        numeric = self.calculate_score(text, emotion)

        result = FeedbackResult(
            score=numeric,
            feedback=self.select_feedback(emotion),
            suggestion=self.suggestion_for(emotion),
            improvements=self.improvements_for(emotion, numeric),
        )

        logger.debug(
            "Feedback generated",
            emotion=_emotion_key(emotion),
            score=numeric,
            improvements=len(result.improvements),
        )
        return result
