"""
Rasterization adapter (PDF -> deterministic per-page raster images).

This package is intentionally limited to format conversion:
- It renders every PDF page to one PNG, named so lexical order is page order.
- It performs NO tonal processing; that belongs to `tone_stages`.
- It is the ONLY package that opens PDFs for reading.
"""

from .contracts import (
    RASTER_EXTENSIONS,
    RasterEngineName,
    RasterizedPage,
    RasterizeResult,
    is_raster_file,
    list_raster_files,
    page_image_name,
)
from .module import DEFAULT_SCALE, run_rasterize_pdf, safe_pdf_stem, validate_source_pdf

__all__ = [
    "DEFAULT_SCALE",
    "RASTER_EXTENSIONS",
    "RasterEngineName",
    "RasterizeResult",
    "RasterizedPage",
    "is_raster_file",
    "list_raster_files",
    "page_image_name",
    "run_rasterize_pdf",
    "safe_pdf_stem",
    "validate_source_pdf",
]
