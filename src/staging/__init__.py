"""
Staging store: ephemeral, phase-scoped working directories.

Each pipeline phase writes into its own directory, which is created lazily,
emptied before the phase's producer runs and removed once the run is over.
All deletions are best-effort; failures surface as CleanupWarning values.
"""

from .arena import StagingArena, StagingPhase
from .store import CleanupWarning, clear_dir, ensure_dir, remove_all

__all__ = [
    "CleanupWarning",
    "StagingArena",
    "StagingPhase",
    "clear_dir",
    "ensure_dir",
    "remove_all",
]
