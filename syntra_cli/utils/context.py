"""Wiring of the vault and history store for CLI commands."""

import asyncio
from pathlib import Path
from typing import Any, Coroutine, Optional, TypeVar

import click

from syntra_core.config import get_settings
from syntra_core.exceptions import ImportValidationError
from syntra_core.history import FileHistoryStorage, HistoryStore
from syntra_core.security import SecurityVault

T = TypeVar("T")


def get_storage_dir(storage_dir: Optional[str] = None) -> Path:
    """Storage directory: explicit option, then settings, then ~/.syntra."""
    configured = storage_dir or get_settings().history.storage_dir
    return Path(configured) if configured else Path.home() / ".syntra"


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def build_vault(key_file: Optional[str]) -> SecurityVault:
    """A vault holding the key from ``key_file``, if one was given."""
    vault = SecurityVault()
    if key_file:
        try:
            blob = Path(key_file).read_bytes()
        except OSError as e:
            raise click.ClickException(f"Cannot read key file: {e}")
        try:
            vault.import_key_material(blob)
        except ImportValidationError as e:
            raise click.ClickException(f"Invalid key file: {e.message}")
    return vault


def build_store(ctx: click.Context) -> HistoryStore:
    """History store over the CLI's storage directory."""
    vault = build_vault(ctx.obj.get("key_file"))
    storage = FileHistoryStorage(get_storage_dir(ctx.obj.get("storage_dir")))
    return HistoryStore(vault, storage)
