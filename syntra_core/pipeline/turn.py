"""
Conversation Turn Pipeline
==========================

Runs one conversational turn end to end:

    text -> classify -> translate -> tag -> score -> history entry

Classification and translation are the two asynchronous steps. Only one
turn is in flight at a time: submitting a new turn cancels the previous
one, and a turn that has been superseded never commits anything to the
tutor history or the history store.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol

import structlog

from syntra_core.config import get_settings
from syntra_core.emotion import EmotionClassifier, EmotionLabel, EmotionResult, get_classifier, tag_translation
from syntra_core.feedback.engine import FeedbackResult
from syntra_core.feedback.sessions import TutorSession, TutorSessionHistory
from syntra_core.history.base import ConversationEntry
from syntra_core.history.store import HistoryStore

logger = structlog.get_logger(__name__)


class Translator(Protocol):
    """Translation collaborator."""

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        emotion: EmotionLabel,
    ) -> str:
        ...


class PassthroughTranslator:
    """Returns the input unchanged. Stands in when no translator is wired."""

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        emotion: EmotionLabel,
    ) -> str:
        return text


@dataclass(frozen=True)
class TurnRequest:
    text: str
    speaker: str
    source_language: str
    target_language: str
    session_id: str


@dataclass(frozen=True)
class TurnResult:
    """Everything a completed turn produced."""

    turn_id: int
    emotion: EmotionResult
    feedback: FeedbackResult
    session: TutorSession
    entry: ConversationEntry


TurnListener = Callable[[TurnResult], None]
Sleep = Callable[[float], Awaitable[None]]


class ConversationPipeline:
    """
    Last-write-wins turn runner.

    Args:
        store: History store receiving one entry per completed turn
        tutor_history: Tutor session window receiving one session per turn
        classifier: Emotion classifier (shared instance by default)
        translator: Translation collaborator
        classification_latency: Delay before classification, seconds
        translation_latency: Delay after translation, seconds
        sleep: Awaitable delay function, replaceable in tests
    """

    def __init__(
        self,
        store: HistoryStore,
        tutor_history: Optional[TutorSessionHistory] = None,
        classifier: Optional[EmotionClassifier] = None,
        translator: Optional[Translator] = None,
        classification_latency: Optional[float] = None,
        translation_latency: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        settings = get_settings()
        self._store = store
        self._tutor = tutor_history or TutorSessionHistory()
        self._classifier = classifier or get_classifier()
        self._translator = translator or PassthroughTranslator()
        self._classification_latency = (
            settings.classifier.latency_s if classification_latency is None else classification_latency
        )
        self._translation_latency = (
            settings.history.translation_latency_s if translation_latency is None else translation_latency
        )
        self._sleep = sleep

        self._turn_ids = itertools.count(1)
        self._current_turn = 0
        self._current_task: Optional[asyncio.Task] = None
        self._listeners: List[TurnListener] = []

    @property
    def tutor_history(self) -> TutorSessionHistory:
        return self._tutor

    @property
    def store(self) -> HistoryStore:
        return self._store

    @property
    def current_turn(self) -> int:
        return self._current_turn

    @property
    def in_flight(self) -> bool:
        return self._current_task is not None and not self._current_task.done()

    def add_listener(self, listener: TurnListener) -> None:
        """Register a callback invoked with each completed turn."""
        self._listeners.append(listener)

    def submit(
        self,
        text: str,
        *,
        speaker: str = "user",
        source_language: str = "en",
        target_language: str = "en",
        session_id: str = "default",
    ) -> asyncio.Task:
        """
        Start a new turn, superseding any turn still in flight.

        Must be called from a running event loop. The returned task
        resolves to the TurnResult, or None if the turn was superseded.
        """
        self.cancel()

        turn_id = next(self._turn_ids)
        self._current_turn = turn_id
        request = TurnRequest(
            text=text or "",
            speaker=speaker,
            source_language=source_language,
            target_language=target_language,
            session_id=session_id,
        )
        self._current_task = asyncio.get_running_loop().create_task(self._run(turn_id, request))
        logger.debug("Turn submitted", turn_id=turn_id)
        return self._current_task

    async def run(self, text: str, **kwargs) -> Optional[TurnResult]:
        """Submit a turn and wait for it. None when it was cancelled or superseded."""
        task = self.submit(text, **kwargs)
        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def cancel(self) -> bool:
        """Cancel the in-flight turn, if any. Never raises."""
        task = self._current_task
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("Turn cancelled", turn_id=self._current_turn)
        return True

    def _is_current(self, turn_id: int) -> bool:
        return turn_id == self._current_turn

    async def _run(self, turn_id: int, request: TurnRequest) -> Optional[TurnResult]:
        if self._classification_latency:
            await self._sleep(self._classification_latency)
        emotion = self._classifier.classify(request.text)

        translated = await self._translator.translate(
            request.text,
            request.source_language,
            request.target_language,
            emotion.label,
        )
        if self._translation_latency:
            await self._sleep(self._translation_latency)

        if not self._is_current(turn_id):
            logger.debug("Superseded turn discarded", turn_id=turn_id)
            return None

        # No awaits below: a turn commits all of its outputs or none
        session = self._tutor.record(request.text, emotion.label)
        feedback = FeedbackResult(
            score=session.score,
            feedback=session.feedback,
            suggestion=session.suggestion,
            improvements=list(session.improvements),
        )
        entry = self._store.append(
            ConversationEntry(
                speaker=request.speaker,
                original_text=request.text,
                translated_text=tag_translation(translated, emotion.label, request.target_language),
                emotion=emotion.label,
                emotion_confidence=emotion.confidence,
                source_language=request.source_language,
                target_language=request.target_language,
                session_id=request.session_id,
            )
        )

        result = TurnResult(
            turn_id=turn_id,
            emotion=emotion,
            feedback=feedback,
            session=session,
            entry=entry,
        )
        logger.info(
            "Turn completed",
            turn_id=turn_id,
            emotion=emotion.label.value,
            score=session.score,
        )

        for listener in self._listeners:
            try:
                listener(result)
            except Exception as e:
                logger.error("Turn listener error", error=str(e))

        return result
