from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from grid_layout import GridAssemblyResult, LayoutParams
from rasterize_pdf import DEFAULT_SCALE
from staging import CleanupWarning


class PipelineState(str, Enum):
    """
    Linear run states; FAILED is reachable from any non-terminal state.
    """

    IDLE = "idle"
    RASTERIZING = "rasterizing"
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"
    STAGE_3 = "stage_3"
    ASSEMBLING = "assembling"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """
    Pipeline configuration.

    - `work_root` holds one staging arena per run (`<work_root>/<run_id>/`)
    - `out_dir` receives `<run_id>.pdf`
    - paths are passed explicitly; nothing is read from the environment here
    """

    work_root: Path
    out_dir: Path
    scale: float = DEFAULT_SCALE
    max_workers: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.work_root, Path) or not isinstance(self.out_dir, Path):
            raise TypeError("work_root and out_dir must be pathlib.Path")
        if self.scale <= 0:
            raise ValueError("scale must be > 0")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")


@dataclass(frozen=True, slots=True)
class PipelineResult:
    run_id: str
    output_pdf: Path | None  # None when there was nothing to assemble
    page_count: int  # source pages rasterized
    output_page_count: int
    tile_count: int
    layout: LayoutParams
    states: list[PipelineState]
    warnings: list[CleanupWarning] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    assembly: GridAssemblyResult | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["output_pdf"] = None if self.output_pdf is None else str(self.output_pdf)
        d["states"] = [s.value for s in self.states]
        d["assembly"] = None if self.assembly is None else self.assembly.to_dict()
        return d
