from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from staging import CleanupWarning


@dataclass(frozen=True, slots=True)
class ToneStageParams:
    """
    One tonal transform phase: [grayscale] -> negate -> clamp(gain * v + offset).

    Parameters are explicit constants; the three pipeline stages are applied
    one after another and must never be collapsed into a single remap.
    """

    name: str
    gain: float
    offset: float
    grayscale: bool = False
    remove_source: bool = False  # delete the source directory once every output is written

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("stage name must be non-empty")
        if self.gain < 0:
            raise ValueError("gain must be >= 0")


STAGE_1 = ToneStageParams(name="stage_1", gain=1.3, offset=-50.0, grayscale=True)
STAGE_2 = ToneStageParams(name="stage_2", gain=1.2, offset=-30.0)
STAGE_3 = ToneStageParams(name="stage_3", gain=1.5, offset=-30.0, remove_source=True)

PIPELINE_STAGES: tuple[ToneStageParams, ...] = (STAGE_1, STAGE_2, STAGE_3)


@dataclass(frozen=True, slots=True)
class ToneStageResult:
    stage: str
    files: list[str]  # processed filenames, sorted
    removed_source: bool = False
    warnings: list[CleanupWarning] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
