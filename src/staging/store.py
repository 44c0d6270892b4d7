from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger


@dataclass(frozen=True, slots=True)
class CleanupWarning:
    """
    Non-fatal cleanup problem.

    Cleanup failures never escalate; they are logged and reported on this
    channel, separate from the primary result or error.
    """

    code: str
    message: str
    path: str
    detail: dict[str, Any] | None = None


def ensure_dir(path: Path) -> Path:
    """Create `path` (and parents) if absent. Idempotent."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def clear_dir(path: Path) -> list[CleanupWarning]:
    """
    Best-effort delete of the direct-child files of `path`.

    - no-op when `path` does not exist
    - subdirectories are left alone (no recursion)
    - a file that cannot be deleted is logged and skipped
    """

    warnings: list[CleanupWarning] = []
    if not path.is_dir():
        return warnings

    for child in sorted(path.iterdir()):
        if child.is_dir() and not child.is_symlink():
            continue
        try:
            child.unlink()
        except OSError as e:
            logger.warning("Could not delete staged file {}: {!r}", child, e)
            warnings.append(
                CleanupWarning(
                    code="STAGING_FILE_DELETE_FAILED",
                    message="Failed to delete staged file",
                    path=str(child),
                    detail={"error": repr(e)},
                )
            )
    return warnings


def remove_all(path: Path) -> bool:
    """
    Recursively delete `path`. Returns False (not an error) when it did not exist.

    Raises OSError when the tree exists but cannot be removed; callers that
    must stay best-effort convert that into a CleanupWarning.
    """

    if not path.exists() and not path.is_symlink():
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True
