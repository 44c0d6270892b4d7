from __future__ import annotations

from enum import Enum
from pathlib import Path

from loguru import logger

from .store import CleanupWarning, clear_dir, ensure_dir, remove_all


class StagingPhase(str, Enum):
    """
    Phase-scoped staging directories, in pipeline order.
    """

    RASTERIZED = "rasterized"
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"
    FINAL = "final"


class StagingArena:
    """
    Per-run set of phase directories rooted at `<work_root>/<run_id>/`.

    The arena owns its directories: phases are tracked explicitly instead of
    being inferred from what happens to exist on disk. Release operations are
    best-effort and report problems as CleanupWarning values.
    """

    def __init__(self, *, work_root: Path, run_id: str) -> None:
        if not run_id or "/" in run_id or "\\" in run_id or run_id in (".", ".."):
            raise ValueError(f"run_id must be a single path component, got: {run_id!r}")
        self.run_id = run_id
        self.root = work_root.expanduser().resolve() / run_id
        self.warnings: list[CleanupWarning] = []
        self._live: set[StagingPhase] = set()

    def path_for(self, phase: StagingPhase) -> Path:
        return self.root / phase.value

    def live_phases(self) -> list[StagingPhase]:
        return [p for p in StagingPhase if p in self._live]

    def prepare(self, phase: StagingPhase) -> Path:
        """
        Ensure + clear the phase directory so its producer starts from an empty target.
        """

        path = ensure_dir(self.path_for(phase))
        self.warnings.extend(clear_dir(path))
        self._live.add(phase)
        return path

    def release(self, phase: StagingPhase) -> list[CleanupWarning]:
        path = self.path_for(phase)
        self._live.discard(phase)
        return self._remove_quietly(path)

    def release_all(self) -> list[CleanupWarning]:
        """
        Remove every phase directory and the run root. Never raises.

        Returns every warning collected over the arena's lifetime.
        """

        for phase in StagingPhase:
            self.release(phase)
        self._remove_quietly(self.root)
        return list(self.warnings)

    def _remove_quietly(self, path: Path) -> list[CleanupWarning]:
        try:
            if remove_all(path):
                logger.debug("Removed staging directory {}", path)
        except OSError as e:
            logger.warning("Could not remove staging directory {}: {!r}", path, e)
            warning = CleanupWarning(
                code="STAGING_DIR_REMOVE_FAILED",
                message="Failed to remove staging directory",
                path=str(path),
                detail={"error": repr(e)},
            )
            self.warnings.append(warning)
            return [warning]
        return []
