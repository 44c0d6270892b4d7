from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from loguru import logger

from contracts.errors import GridAssemblyError
from rasterize_pdf.contracts import list_raster_files

from .canvas import PageCanvas, ReportlabCanvas
from .contracts import BORDER_WIDTH, LABEL_FONT_SIZE, GridAssemblyResult, LayoutParams, PageGeometry, TilePlacement
from .geometry import compute_tile_placements, page_count_for


def _get_canvas() -> PageCanvas:
    return ReportlabCanvas()


def _draw_tile_image(pdf: PageCanvas, *, image_file: Path, tile: TilePlacement) -> TilePlacement:
    """
    Fit-draw inside the padded box; on failure stretch over the full tile.

    The fallback is logged and marked on the returned placement. A failing
    fallback aborts the assembly.
    """

    try:
        pdf.draw_image(image_file, *tile.fit_box, fit=True)
        return tile
    except Exception as fit_err:
        logger.warning(
            "Fit draw failed for tile {} ({}), stretching instead: {!r}",
            tile.sequence,
            tile.image_name,
            fit_err,
        )
        try:
            pdf.draw_image(image_file, tile.x, tile.y, tile.width, tile.height, fit=False)
        except Exception as e:
            raise GridAssemblyError(
                f"Could not draw {tile.image_name} on tile {tile.sequence}: {e}",
                code="GRID_TILE_DRAW_FAILED",
                detail={
                    "image_name": tile.image_name,
                    "sequence": tile.sequence,
                    "fit_error": repr(fit_err),
                    "error": repr(e),
                },
            ) from e
        return replace(tile, fit_fallback=True)


def run_grid_assembly(
    *,
    src_dir: Path,
    out_pdf: Path,
    layout: LayoutParams,
    geometry: PageGeometry | None = None,
) -> GridAssemblyResult:
    """
    Tile every qualifying image in `src_dir` (sorted by filename) into a
    paginated grid document written to `out_pdf`.

    No images => no output file and ok=True. The document is serialized and
    written in one step only after every tile has been drawn.
    """

    geo = geometry or PageGeometry.for_layout(layout)
    files = list_raster_files(src_dir)
    meta: dict[str, Any] = {"source_count": len(files)}

    if not files:
        logger.info("No images found in {} to assemble", src_dir)
        return GridAssemblyResult(ok=True, output_pdf=None, layout=layout, geometry=geo, page_count=0, tiles=[], meta=meta)

    by_name = {f.name: f for f in files}
    planned = compute_tile_placements([f.name for f in files], layout, geo)

    pdf = _get_canvas()
    meta["backend"] = pdf.backend_id()

    tiles: list[TilePlacement] = []
    current_page = -1
    for tile in planned:
        if tile.page_index != current_page:
            pdf.add_page(width=geo.page_width, height=geo.page_height)
            current_page = tile.page_index

        placed = _draw_tile_image(pdf, image_file=by_name[tile.image_name], tile=tile)
        pdf.stroke_rect(placed.x, placed.y, placed.width, placed.height, line_width=BORDER_WIDTH)
        pdf.draw_text(str(placed.sequence), placed.label_x, placed.label_y, font_size=LABEL_FONT_SIZE)
        tiles.append(placed)
        logger.debug("Placed {} as tile {} on page {}", placed.image_name, placed.sequence, placed.page_index + 1)

    page_count = page_count_for(len(tiles), layout)
    data = pdf.serialize()

    out_pdf.parent.mkdir(parents=True, exist_ok=True)
    out_pdf.write_bytes(data)

    meta["fallback_count"] = sum(1 for t in tiles if t.fit_fallback)
    logger.info(
        "Assembled {} tile(s) on {} page(s) ({}x{} grid) at {}",
        len(tiles),
        page_count,
        layout.rows,
        layout.columns,
        out_pdf,
    )
    return GridAssemblyResult(
        ok=True,
        output_pdf=out_pdf,
        layout=layout,
        geometry=geo,
        page_count=page_count,
        tiles=tiles,
        meta=meta,
    )
