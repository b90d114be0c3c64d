"""CLI command modules."""

from .history import history

__all__ = [
    "history",
]
