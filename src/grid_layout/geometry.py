from __future__ import annotations

from collections.abc import Sequence

from .contracts import LABEL_INSET, LayoutParams, PageGeometry, TilePlacement


def page_count_for(n_images: int, layout: LayoutParams) -> int:
    """ceil(n / (rows * columns)); zero images means zero pages."""
    if n_images <= 0:
        return 0
    per_page = layout.tiles_per_page
    return (n_images + per_page - 1) // per_page


def compute_tile_placements(
    image_names: Sequence[str],
    layout: LayoutParams,
    geometry: PageGeometry | None = None,
) -> list[TilePlacement]:
    """
    Row-major tiling of `image_names` (already in document order).

    Image `i` lands on page i // (rows*columns), column i % columns and row
    (i // columns) % rows; the cursor wraps to column 0 after `columns` tiles
    and a new page starts whenever a page is full.
    """

    geo = geometry or PageGeometry.for_layout(layout)
    per_page = layout.tiles_per_page
    pad = geo.padding

    placements: list[TilePlacement] = []
    for i, name in enumerate(image_names):
        column = i % layout.columns
        row = (i // layout.columns) % layout.rows
        x = column * geo.tile_width
        y = row * geo.tile_height
        placements.append(
            TilePlacement(
                sequence=i + 1,
                image_name=name,
                page_index=i // per_page,
                column=column,
                row=row,
                x=x,
                y=y,
                width=geo.tile_width,
                height=geo.tile_height,
                fit_box=(x + pad, y + pad, geo.tile_width - 2 * pad, geo.tile_height - 2 * pad),
                label_x=x + geo.tile_width - LABEL_INSET,
                label_y=y + geo.tile_height - LABEL_INSET,
            )
        )
    return placements
