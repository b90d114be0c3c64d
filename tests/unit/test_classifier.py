"""
Unit Tests for Emotion Classification

Tests for keyword matching, tie-breaking, confidence bounds and the
emotional context helpers.
"""

import pytest

from syntra_core.emotion import (
    EMOTION_KEYWORDS,
    SCORED_EMOTIONS,
    EmotionClassifier,
    EmotionLabel,
    EmotionResult,
    describe_context,
    tag_translation,
)


@pytest.fixture
def classifier():
    """Create classifier with the default cap."""
    return EmotionClassifier(confidence_cap=95.0)


# =============================================================================
# EmotionLabel Tests
# =============================================================================


class TestEmotionLabel:
    """Tests for label parsing."""

    def test_parse_known_labels(self):
        """Test parsing each known value."""
        for label in EmotionLabel:
            assert EmotionLabel.parse(label.value) is label

    def test_parse_is_case_insensitive(self):
        """Test parsing ignores case and surrounding whitespace."""
        assert EmotionLabel.parse("  HAPPY ") is EmotionLabel.HAPPY

    @pytest.mark.parametrize("value", ["joyful", "", None, 42])
    def test_parse_unknown_resolves_to_neutral(self, value):
        """Test unknown input falls back to neutral."""
        assert EmotionLabel.parse(value) is EmotionLabel.NEUTRAL

    def test_result_confidence_is_clamped(self):
        """Test confidence is clamped to 0..100."""
        assert EmotionResult(EmotionLabel.HAPPY, 250).confidence == 100.0
        assert EmotionResult(EmotionLabel.HAPPY, -3).confidence == 0.0


# =============================================================================
# Classification Tests
# =============================================================================


class TestEmotionClassifier:
    """Tests for keyword classification."""

    def test_happy_example(self, classifier):
        """Test the canonical happy sentence."""
        result = classifier.classify("I am so happy and excited today")

        assert result.label == EmotionLabel.HAPPY
        assert result.confidence > 0
        # 2 keywords out of 7 tokens
        assert result.confidence == pytest.approx(2 / 7 * 100)

    def test_empty_text_is_neutral_zero(self, classifier):
        """Test empty input."""
        result = classifier.classify("")

        assert result.label == EmotionLabel.NEUTRAL
        assert result.confidence == 0

    def test_none_text_is_neutral_zero(self, classifier):
        """Test missing input."""
        assert classifier.classify(None) == EmotionResult.neutral()

    def test_no_keywords_is_neutral_zero(self, classifier):
        """Test text without any keyword."""
        result = classifier.classify("The meeting is at three on Tuesday")

        assert result.label == EmotionLabel.NEUTRAL
        assert result.confidence == 0

    @pytest.mark.parametrize("emotion", SCORED_EMOTIONS)
    def test_single_emotion_keywords(self, classifier, emotion):
        """Test a keyword unique to one emotion selects that emotion."""
        others = set().union(*(EMOTION_KEYWORDS[e] for e in SCORED_EMOTIONS if e != emotion))
        keyword = sorted(EMOTION_KEYWORDS[emotion] - others)[0]

        result = classifier.classify(f"well that was {keyword} indeed")

        assert result.label == emotion
        assert result.confidence > 0

    def test_case_insensitive_matching(self, classifier):
        """Test keywords match regardless of case."""
        assert classifier.classify("I am FURIOUS").label == EmotionLabel.ANGRY

    def test_tokens_must_match_exactly(self, classifier):
        """Test punctuation-attached words do not match."""
        assert classifier.classify("happy!").label == EmotionLabel.NEUTRAL

    def test_tie_goes_to_earlier_emotion(self, classifier):
        """Test one sad and one angry keyword resolves to sad."""
        assert classifier.classify("I am upset and annoyed").label == EmotionLabel.SAD

    def test_tie_between_fear_and_disgust(self, classifier):
        """Test fear precedes disgust in tie-breaking."""
        assert classifier.classify("scared and gross").label == EmotionLabel.FEAR

    def test_shared_keyword_resolves_to_happy(self, classifier):
        """Test 'amazing' counts for happy and surprise; happy wins the tie."""
        assert classifier.classify("amazing").label == EmotionLabel.HAPPY

    def test_higher_count_beats_order(self, classifier):
        """Test a later emotion wins when it has strictly more matches."""
        result = classifier.classify("happy but scared worried and nervous")
        assert result.label == EmotionLabel.FEAR

    def test_repeated_keyword_counts_once(self, classifier):
        """Test matches count distinct keywords."""
        result = classifier.classify("sad sad sad sad")
        assert result.confidence == pytest.approx(25.0)

    def test_confidence_is_capped(self, classifier):
        """Test confidence never exceeds the cap."""
        result = classifier.classify("happy")
        assert result.label == EmotionLabel.HAPPY
        assert result.confidence == 95.0

    def test_custom_cap(self):
        """Test a configured cap is applied."""
        result = EmotionClassifier(confidence_cap=50.0).classify("great wonderful")
        assert result.confidence == 50.0

    def test_classify_does_not_mutate_state(self, classifier):
        """Test repeated calls return equal results."""
        first = classifier.classify("I hate this, I am livid")
        second = classifier.classify("I hate this, I am livid")
        assert first == second


# =============================================================================
# Context Tests
# =============================================================================


class TestEmotionalContext:
    """Tests for translation tagging."""

    def test_tags_happy_spanish(self):
        """Test happy prefix for Spanish."""
        tagged = tag_translation("Hola", EmotionLabel.HAPPY, "es")
        assert tagged != "Hola"
        assert tagged.endswith("Hola")

    def test_language_code_case_insensitive(self):
        """Test language codes are normalized."""
        assert tag_translation("Bonjour", "sad", "FR") == tag_translation("Bonjour", "sad", "fr")

    def test_neutral_passes_through(self):
        """Test neutral text is unchanged."""
        assert tag_translation("Hola", EmotionLabel.NEUTRAL, "es") == "Hola"

    def test_unknown_language_passes_through(self):
        """Test languages without markers are unchanged."""
        assert tag_translation("Hallo", EmotionLabel.ANGRY, "de") == "Hallo"

    def test_describe_context_for_every_label(self):
        """Test each label has a description."""
        for label in EmotionLabel:
            assert describe_context(label)

    def test_describe_context_unknown_uses_neutral(self):
        """Test unknown labels fall back to the neutral description."""
        assert describe_context("bogus") == describe_context(EmotionLabel.NEUTRAL)
