"""
Export file writing.
"""

import os
import tempfile
from pathlib import Path
from typing import Union

import structlog

from syntra_core.exceptions import ExportError

logger = structlog.get_logger(__name__)


def write_export(path: Union[str, Path], data: bytes) -> Path:
    """
    Write an export file atomically.

    The bytes go to a temporary file in the target directory which is then
    renamed over ``path``. On failure the temporary file is removed and any
    existing file at ``path`` is left as it was.

    Raises:
        ExportError: The file could not be written.
    """
    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")
    tmp_path = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(directory), prefix=f".{target.name}.", suffix=".part")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise ExportError(
            f"Failed to write export: {target}",
            details={"path": str(target), "reason": str(e)},
        ) from e

    logger.info("Export written", path=str(target), size=len(data))
    return target
