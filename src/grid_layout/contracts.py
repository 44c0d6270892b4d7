from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

# Output page: ISO A4 in PDF points.
PAGE_WIDTH = 595.0
PAGE_HEIGHT = 842.0
TILE_HEIGHT_FACTOR = 0.9  # reserves vertical breathing room below the grid
TILE_PADDING = 4.0
BORDER_WIDTH = 1.0
LABEL_FONT_SIZE = 6.0
LABEL_INSET = 15.0  # label top-left sits this far in from the tile's bottom-right corner

COLUMNS_MIN, COLUMNS_MAX = 1, 10
ROWS_MIN, ROWS_MAX = 1, 20
DEFAULT_COLUMNS = 2
DEFAULT_ROWS = 4


def _coerce_int(value: Any) -> int | None:
    """
    Best-effort integer interpretation of a caller-supplied value; None when not an integer.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        s = value.strip()
        if re.fullmatch(r"[+-]?\d+", s, re.ASCII):
            return int(s)
    return None


def _bounded_or_default(value: Any, *, lo: int, hi: int, default: int) -> int:
    v = _coerce_int(value)
    if v is None or not (lo <= v <= hi):
        return default
    return v


@dataclass(frozen=True, slots=True)
class LayoutParams:
    """
    Grid shape: `rows` x `columns` tiles per output page.
    """

    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS

    def __post_init__(self) -> None:
        if not (ROWS_MIN <= self.rows <= ROWS_MAX):
            raise ValueError(f"rows must be within [{ROWS_MIN}, {ROWS_MAX}]")
        if not (COLUMNS_MIN <= self.columns <= COLUMNS_MAX):
            raise ValueError(f"columns must be within [{COLUMNS_MIN}, {COLUMNS_MAX}]")

    @classmethod
    def from_request(cls, rows: Any = None, columns: Any = None) -> "LayoutParams":
        """
        Lenient construction from untrusted input: a missing, non-integer or
        out-of-range value silently falls back to that axis' default.
        """

        return cls(
            rows=_bounded_or_default(rows, lo=ROWS_MIN, hi=ROWS_MAX, default=DEFAULT_ROWS),
            columns=_bounded_or_default(columns, lo=COLUMNS_MIN, hi=COLUMNS_MAX, default=DEFAULT_COLUMNS),
        )

    @property
    def tiles_per_page(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """
    Derived page/tile geometry in points (top-left origin).
    """

    page_width: float
    page_height: float
    tile_width: float
    tile_height: float
    padding: float = TILE_PADDING

    @classmethod
    def for_layout(
        cls,
        layout: LayoutParams,
        *,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
    ) -> "PageGeometry":
        return cls(
            page_width=page_width,
            page_height=page_height,
            tile_width=page_width / layout.columns,
            tile_height=TILE_HEIGHT_FACTOR * page_height / layout.rows,
        )


@dataclass(frozen=True, slots=True)
class TilePlacement:
    """
    One tile on one output page. Coordinates are points, top-left origin.
    """

    sequence: int  # 1-based, across the whole document
    image_name: str
    page_index: int  # 0-based
    column: int
    row: int
    x: float
    y: float
    width: float
    height: float
    fit_box: tuple[float, float, float, float]  # (x, y, w, h) padded image box
    label_x: float
    label_y: float
    fit_fallback: bool = False  # True when the image was stretched to the full tile


@dataclass(frozen=True, slots=True)
class GridAssemblyResult:
    """
    Outcome of one assembly. `output_pdf` is None when there was nothing to assemble.
    """

    ok: bool
    output_pdf: Path | None
    layout: LayoutParams
    geometry: PageGeometry
    page_count: int
    tiles: list[TilePlacement]
    meta: dict[str, Any]

    @property
    def fallback_tiles(self) -> list[TilePlacement]:
        return [t for t in self.tiles if t.fit_fallback]

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["output_pdf"] = None if self.output_pdf is None else str(self.output_pdf)
        return d
