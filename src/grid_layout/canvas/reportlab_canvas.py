from __future__ import annotations

import io
from pathlib import Path

import reportlab
from reportlab.lib.colors import black
from reportlab.pdfgen import canvas

from .base import PageCanvas

LABEL_FONT = "Helvetica"


class ReportlabCanvas(PageCanvas):
    """
    PDF canvas backed by reportlab.

    reportlab uses a bottom-left origin, so every y coordinate is flipped
    against the current page height. `invariant=1` keeps the serialized bytes
    free of timestamps and random document ids.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._pdf = canvas.Canvas(self._buffer, invariant=1)
        self._page_open = False
        self._page_height = 0.0
        self.page_count = 0

    def backend_id(self) -> str:
        return f"reportlab-{reportlab.Version}"

    def add_page(self, *, width: float, height: float) -> None:
        if self._page_open:
            self._pdf.showPage()
        self._pdf.setPageSize((width, height))
        self._page_open = True
        self._page_height = height
        self.page_count += 1

    def _require_page(self) -> None:
        if not self._page_open:
            raise RuntimeError("add_page() must be called before drawing")

    def _flip(self, y: float, height: float) -> float:
        return self._page_height - y - height

    def draw_image(self, image_file: Path, x: float, y: float, width: float, height: float, *, fit: bool) -> None:
        self._require_page()
        self._pdf.drawImage(
            str(image_file),
            x,
            self._flip(y, height),
            width=width,
            height=height,
            preserveAspectRatio=fit,
            anchor="c",
        )

    def stroke_rect(self, x: float, y: float, width: float, height: float, *, line_width: float) -> None:
        self._require_page()
        self._pdf.saveState()
        self._pdf.setLineWidth(line_width)
        self._pdf.setStrokeColor(black)
        self._pdf.rect(x, self._flip(y, height), width, height, stroke=1, fill=0)
        self._pdf.restoreState()

    def draw_text(self, text: str, x: float, y: float, *, font_size: float) -> None:
        self._require_page()
        self._pdf.saveState()
        self._pdf.setFont(LABEL_FONT, font_size)
        self._pdf.setFillColor(black)
        # drawString anchors at the baseline; approximate the top with the font size.
        self._pdf.drawString(x, self._flip(y, font_size), text)
        self._pdf.restoreState()

    def serialize(self) -> bytes:
        if self._page_open:
            self._pdf.showPage()
            self._page_open = False
        self._pdf.save()
        return self._buffer.getvalue()
