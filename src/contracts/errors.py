from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """
    Base class for fatal pipeline failures.

    Every failure carries a stable machine-readable `code`, a human message and
    an optional JSON-ready `detail` mapping, mirroring the error records written
    into stage manifests. `str(err)` is the message alone so callers can surface
    it unmodified.
    """

    default_code = "PIPELINE_ERROR"

    def __init__(self, message: str, *, code: str | None = None, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class InputDocumentError(PipelineError):
    """Source document missing or not a supported format."""

    default_code = "INPUT_ERROR"


class RasterizeError(PipelineError):
    default_code = "RASTERIZE_FAILED"


class ToneStageError(PipelineError):
    """A per-file read/transform/write failure inside a tone stage (fatal)."""

    default_code = "TONE_STAGE_FAILED"


class GridAssemblyError(PipelineError):
    default_code = "GRID_ASSEMBLY_FAILED"
