from __future__ import annotations

from pathlib import Path
from typing import Any

from ..contracts import page_image_name
from .base import EngineRenderedPage, PdfRasterEngine


class Pypdfium2Engine(PdfRasterEngine):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except ImportError:
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required for PDF rasterization.") from e

    def get_page_count(self, *, pdf_file: Path) -> int:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            return len(doc)
        finally:
            doc.close()

    def render_pdf_to_images(
        self,
        *,
        pdf_file: Path,
        out_dir: Path,
        scale: float,
    ) -> tuple[list[EngineRenderedPage], dict[str, Any]]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            page_count = len(doc)
            out_dir.mkdir(parents=True, exist_ok=True)

            rendered: list[EngineRenderedPage] = []
            for idx in range(page_count):
                page_num = idx + 1
                page = doc[idx]
                try:
                    bitmap = page.render(scale=scale)
                    pil_img = bitmap.to_pil().convert("RGB")
                finally:
                    page.close()

                width_px, height_px = pil_img.size
                out_file = out_dir / page_image_name(page_num, page_count=page_count)
                pil_img.save(out_file, format="PNG")

                rendered.append(
                    EngineRenderedPage(
                        page_num=page_num,
                        image_file=out_file,
                        width_px=int(width_px),
                        height_px=int(height_px),
                    )
                )
        finally:
            doc.close()

        render_params: dict[str, Any] = {
            "backend": self.backend_id(),
            "backend_version": self.backend_version(),
            "scale": scale,
        }
        return rendered, render_params
