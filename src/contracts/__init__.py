"""
Shared pipeline contracts.

Fatal failures are raised as PipelineError subclasses carrying a stable
`code`, a message and a JSON-ready `detail`. Non-fatal cleanup problems are
not errors; see `staging.CleanupWarning`.
"""

from .errors import GridAssemblyError, InputDocumentError, PipelineError, RasterizeError, ToneStageError

__all__ = [
    "GridAssemblyError",
    "InputDocumentError",
    "PipelineError",
    "RasterizeError",
    "ToneStageError",
]
