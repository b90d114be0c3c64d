"""
Emotion data models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class EmotionLabel(str, Enum):
    """Closed set of emotion labels."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    SURPRISE = "surprise"
    FEAR = "fear"
    DISGUST = "disgust"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value: Optional[Union["EmotionLabel", str]]) -> "EmotionLabel":
        """Resolve a raw label, falling back to neutral for anything unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NEUTRAL


# Fixed iteration order used for tie-breaking
SCORED_EMOTIONS: Tuple[EmotionLabel, ...] = (
    EmotionLabel.HAPPY,
    EmotionLabel.SAD,
    EmotionLabel.ANGRY,
    EmotionLabel.SURPRISE,
    EmotionLabel.FEAR,
    EmotionLabel.DISGUST,
)


@dataclass(frozen=True)
class EmotionResult:
    """Classification result: one label plus a 0-100 heuristic confidence."""

    label: EmotionLabel
    confidence: float

    def __post_init__(self):
        object.__setattr__(self, "confidence", max(0.0, min(100.0, float(self.confidence))))

    @classmethod
    def neutral(cls) -> "EmotionResult":
        return cls(label=EmotionLabel.NEUTRAL, confidence=0.0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "emotion": self.label.value,
            "confidence": round(self.confidence, 2),
        }
