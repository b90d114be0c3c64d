"""Syntra CLI - emotion-aware conversation history from the command line."""

__version__ = "1.0.0"
