"""
Tonal transform stages (directory -> directory, filename-preserving).

Each stage lists the raster allow-list files of its source directory and
writes one transformed image per input, under the same name, into its
destination directory. Per-file failures are fatal to the stage.
"""

from .contracts import PIPELINE_STAGES, STAGE_1, STAGE_2, STAGE_3, ToneStageParams, ToneStageResult
from .module import run_tone_stage, transform_file
from .transforms import apply_tone, linear_lut, linear_value

__all__ = [
    "PIPELINE_STAGES",
    "STAGE_1",
    "STAGE_2",
    "STAGE_3",
    "ToneStageParams",
    "ToneStageResult",
    "apply_tone",
    "linear_lut",
    "linear_value",
    "run_tone_stage",
    "transform_file",
]
