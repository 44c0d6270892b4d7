from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

RASTER_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".webp")


def is_raster_file(path: Path) -> bool:
    """Extension allow-list check (case-insensitive)."""
    return path.is_file() and path.suffix.lower() in RASTER_EXTENSIONS


def list_raster_files(directory: Path) -> list[Path]:
    """
    Qualifying raster files directly under `directory`, sorted by filename.

    A missing directory yields an empty list.
    """

    if not directory.is_dir():
        return []
    return sorted((p for p in directory.iterdir() if is_raster_file(p)), key=lambda p: p.name)


class RasterEngineName(str, Enum):
    """
    Rasterization backend identifiers.
    """

    PYPDFIUM2 = "pypdfium2"


@dataclass(frozen=True, slots=True)
class RasterizedPage:
    page_num: int  # 1-indexed
    image_name: str  # filename inside the output directory
    width_px: int
    height_px: int


@dataclass(frozen=True, slots=True)
class RasterizeResult:
    engine: RasterEngineName
    page_count: int
    pages: list[RasterizedPage]
    rendering: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def page_image_name(page_num: int, *, page_count: int) -> str:
    """
    Deterministic page filename whose lexical order equals page order.
    """

    width = max(3, len(str(page_count)))
    return f"page_{page_num:0{width}d}.png"
