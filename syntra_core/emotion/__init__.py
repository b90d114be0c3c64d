"""
Emotion classification.

- EmotionClassifier: lexical keyword matcher producing an EmotionResult
- tag_translation / describe_context: emotional context for translations
"""

from syntra_core.emotion.base import SCORED_EMOTIONS, EmotionLabel, EmotionResult
from syntra_core.emotion.classifier import EMOTION_KEYWORDS, EmotionClassifier, get_classifier
from syntra_core.emotion.context import (
    CONTEXT_DESCRIPTIONS,
    EMOTIONAL_PREFIXES,
    describe_context,
    tag_translation,
)

__all__ = [
    "EmotionLabel",
    "EmotionResult",
    "SCORED_EMOTIONS",
    "EmotionClassifier",
    "EMOTION_KEYWORDS",
    "get_classifier",
    "tag_translation",
    "describe_context",
    "EMOTIONAL_PREFIXES",
    "CONTEXT_DESCRIPTIONS",
]
