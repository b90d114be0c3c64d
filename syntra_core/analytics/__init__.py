"""
Session analytics.
"""

from syntra_core.analytics.aggregator import (
    EmotionDistribution,
    SessionAggregator,
    SessionStats,
)

__all__ = [
    "SessionAggregator",
    "SessionStats",
    "EmotionDistribution",
]
