"""
Shared infrastructure.
"""

from syntra_core.core.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
