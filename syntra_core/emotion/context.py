"""Emotional context for translations."""

from typing import Dict, Union

from syntra_core.emotion.base import EmotionLabel


# Localized tone markers prepended to a translation
EMOTIONAL_PREFIXES: Dict[EmotionLabel, Dict[str, str]] = {
    EmotionLabel.HAPPY: {
        "ur": "(خوشی سے) ",
        "ar": "(بسعادة) ",
        "es": "(con alegría) ",
        "fr": "(avec joie) ",
    },
    EmotionLabel.SAD: {
        "ur": "(افسوس سے) ",
        "ar": "(بحزن) ",
        "es": "(con tristeza) ",
        "fr": "(avec tristesse) ",
    },
    EmotionLabel.ANGRY: {
        "ur": "(غصے سے) ",
        "ar": "(بغضب) ",
        "es": "(con ira) ",
        "fr": "(avec colère) ",
    },
}

CONTEXT_DESCRIPTIONS: Dict[EmotionLabel, str] = {
    EmotionLabel.HAPPY: "Positive sentiment detected. Translation will convey joy and enthusiasm.",
    EmotionLabel.SAD: "Melancholic tone identified. Translation will preserve emotional depth.",
    EmotionLabel.ANGRY: "Strong negative emotion found. Translation will maintain intensity.",
    EmotionLabel.SURPRISE: "Astonishment detected. Translation will capture the element of surprise.",
    EmotionLabel.FEAR: "Anxiety or concern identified. Translation will convey caution.",
    EmotionLabel.DISGUST: "Disapproval detected. Translation will express distaste.",
    EmotionLabel.NEUTRAL: "Balanced emotional state. Translation will be straightforward.",
}


def tag_translation(
    translated_text: str,
    emotion: Union[EmotionLabel, str],
    target_language: str,
) -> str:
    """Prefix a translation with the tone marker for its emotion, when one exists."""
    label = EmotionLabel.parse(emotion)
    prefix = EMOTIONAL_PREFIXES.get(label, {}).get(target_language.lower())
    if prefix:
        return prefix + translated_text
    return translated_text


def describe_context(emotion: Union[EmotionLabel, str]) -> str:
    """Sentence describing how the emotion shapes the translation."""
    return CONTEXT_DESCRIPTIONS[EmotionLabel.parse(emotion)]
