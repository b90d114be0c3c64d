"""
Lexical emotion classifier.

Maps text to one of the closed emotion labels by counting exact token
matches against fixed keyword lists. No statistics, no model: the
confidence is keyword density, capped below 100.
"""

from typing import Dict, FrozenSet, List, Optional

import structlog

from syntra_core.config import get_settings
from syntra_core.emotion.base import SCORED_EMOTIONS, EmotionLabel, EmotionResult

logger = structlog.get_logger(__name__)


EMOTION_KEYWORDS: Dict[EmotionLabel, FrozenSet[str]] = {
    EmotionLabel.HAPPY: frozenset([
        "happy", "joy", "excited", "wonderful", "great", "amazing", "love",
        "fantastic", "awesome", "perfect",
    ]),
    EmotionLabel.SAD: frozenset([
        "sad", "depressed", "down", "upset", "disappointed", "hurt", "cry",
        "terrible", "awful", "worst",
    ]),
    EmotionLabel.ANGRY: frozenset([
        "angry", "mad", "furious", "hate", "disgusted", "annoyed", "frustrated",
        "rage", "livid", "pissed",
    ]),
    EmotionLabel.SURPRISE: frozenset([
        "surprised", "shocked", "wow", "amazing", "incredible", "unbelievable",
        "astonished", "stunned",
    ]),
    EmotionLabel.FEAR: frozenset([
        "afraid", "scared", "worried", "anxious", "nervous", "terrified",
        "panic", "frightened",
    ]),
    EmotionLabel.DISGUST: frozenset([
        "disgusting", "gross", "sick", "nasty", "revolting", "repulsive",
        "horrible",
    ]),
}


class EmotionClassifier:
    """
    Keyword-count emotion classifier.

    Classification is a pure function of the keyword table: the instance
    holds configuration only and is safe to share.
    """

    def __init__(
        self,
        keywords: Optional[Dict[EmotionLabel, FrozenSet[str]]] = None,
        confidence_cap: Optional[float] = None,
    ):
        self._keywords = keywords or EMOTION_KEYWORDS
        if confidence_cap is None:
            confidence_cap = get_settings().classifier.confidence_cap
        self._confidence_cap = confidence_cap

    @staticmethod
    def tokenize(text: str) -> List[str]:
        """Lower-case and split on whitespace."""
        return text.lower().split()

    def match_counts(self, tokens: List[str]) -> Dict[EmotionLabel, int]:
        """Count distinct keywords of each emotion present in the tokens."""
        present = set(tokens)
        return {
            emotion: len(self._keywords.get(emotion, frozenset()) & present)
            for emotion in SCORED_EMOTIONS
        }

    def classify(self, text: Optional[str]) -> EmotionResult:
        """
        Classify text into an emotion label.

        Ties go to the earliest emotion in SCORED_EMOTIONS; no match at
        all resolves to neutral with zero confidence.
        """
        tokens = self.tokenize(text or "")
        counts = self.match_counts(tokens)

        best_label = EmotionLabel.NEUTRAL
        best_count = 0
        for emotion in SCORED_EMOTIONS:
            if counts[emotion] > best_count:
                best_label = emotion
                best_count = counts[emotion]

        if best_count == 0:
            return EmotionResult.neutral()

        confidence = min(
            self._confidence_cap,
            best_count / max(len(tokens), 1) * 100,
        )
        logger.debug(
            "Emotion classified",
            emotion=best_label.value,
            matches=best_count,
            tokens=len(tokens),
        )
        return EmotionResult(label=best_label, confidence=confidence)


# Global classifier
_classifier: Optional[EmotionClassifier] = None


def get_classifier() -> EmotionClassifier:
    """Get or create the global classifier."""
    global _classifier
    if _classifier is None:
        _classifier = EmotionClassifier()
    return _classifier
