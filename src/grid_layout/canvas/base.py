from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class PageCanvas(ABC):
    """
    Output document drawing abstraction.

    All coordinates are points with a top-left origin on the current page;
    implementations translate to their native coordinate system. Pages are
    accumulated in memory and only turned into bytes by `serialize()`.
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def add_page(self, *, width: float, height: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_image(self, image_file: Path, x: float, y: float, width: float, height: float, *, fit: bool) -> None:
        """
        fit=True: scale to fit inside the box preserving aspect ratio, centered.
        fit=False: stretch to exactly (width, height).
        """

        raise NotImplementedError

    @abstractmethod
    def stroke_rect(self, x: float, y: float, width: float, height: float, *, line_width: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_text(self, text: str, x: float, y: float, *, font_size: float) -> None:
        """(x, y) is the top-left of the text box."""

        raise NotImplementedError

    @abstractmethod
    def serialize(self) -> bytes:
        raise NotImplementedError
