"""
Syntra Core
===========

Emotion-aware conversation pipeline.

This package provides:
- Lexical emotion classification
- Communication scoring and coaching feedback
- Encrypted, audited, searchable conversation history
- Session statistics
"""

__version__ = "1.0.0"
