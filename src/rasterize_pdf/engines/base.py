from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class EngineRenderedPage:
    page_num: int  # 1-indexed
    image_file: Path  # absolute output file path
    width_px: int
    height_px: int


class PdfRasterEngine(ABC):
    """
    Rasterization engine abstraction.

    Engines must:
    - Render every PDF page to one raster image file (materialized on disk)
    - Name outputs so that lexical filename order equals page order
    - Be deterministic for a given input+params
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def get_page_count(self, *, pdf_file: Path) -> int:
        raise NotImplementedError

    @abstractmethod
    def render_pdf_to_images(
        self,
        *,
        pdf_file: Path,
        out_dir: Path,
        scale: float,
    ) -> tuple[list[EngineRenderedPage], dict[str, Any]]:
        """
        Return:
        - list of rendered pages in ascending page order
        - render_params fragment (backend info/version/etc) for the result
        """

        raise NotImplementedError
