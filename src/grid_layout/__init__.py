"""
Grid assembly: final images -> paginated rows x columns PDF.

Images are taken in filename order, tiled row-major onto fixed A4 pages,
each tile bordered and labelled with its document-wide sequence number.
Tile geometry is computed by a pure function so pagination can be checked
without rendering anything.
"""

from .artifacts import layout_manifest_payload, serialize_layout_manifest, write_layout_manifest_json
from .contracts import (
    DEFAULT_COLUMNS,
    DEFAULT_ROWS,
    GridAssemblyResult,
    LayoutParams,
    PageGeometry,
    TilePlacement,
)
from .geometry import compute_tile_placements, page_count_for
from .module import run_grid_assembly

__all__ = [
    "DEFAULT_COLUMNS",
    "DEFAULT_ROWS",
    "GridAssemblyResult",
    "LayoutParams",
    "PageGeometry",
    "TilePlacement",
    "compute_tile_placements",
    "layout_manifest_payload",
    "page_count_for",
    "run_grid_assembly",
    "serialize_layout_manifest",
    "write_layout_manifest_json",
]
