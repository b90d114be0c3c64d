"""
Conversation turn pipeline.
"""

from syntra_core.pipeline.turn import (
    ConversationPipeline,
    PassthroughTranslator,
    Translator,
    TurnRequest,
    TurnResult,
)

__all__ = [
    "ConversationPipeline",
    "Translator",
    "PassthroughTranslator",
    "TurnRequest",
    "TurnResult",
]
