from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PIL import Image
from reportlab.pdfgen import canvas

from contracts.errors import InputDocumentError, RasterizeError
from rasterize_pdf import page_image_name, run_rasterize_pdf, safe_pdf_stem
from rasterize_pdf.engines import EngineRenderedPage


class _FakeRasterEngine:
    def __init__(self, page_count: int = 2) -> None:
        self.page_count = page_count

    def backend_id(self) -> str:
        return "fake_backend"

    def backend_version(self) -> str | None:
        return "0"

    def get_page_count(self, *, pdf_file: Path) -> int:
        return self.page_count

    def render_pdf_to_images(self, *, pdf_file: Path, out_dir: Path, scale: float):
        out_dir.mkdir(parents=True, exist_ok=True)
        rendered = []
        # Reverse order on purpose: the result must come back sorted by page.
        for p in range(self.page_count, 0, -1):
            f = out_dir / page_image_name(p, page_count=self.page_count)
            Image.new("RGB", (10 + p, 20), "white").save(f, format="PNG")
            rendered.append(EngineRenderedPage(page_num=p, image_file=f, width_px=10 + p, height_px=20))
        return rendered, {"backend": self.backend_id(), "backend_version": self.backend_version()}


class _BrokenEngine(_FakeRasterEngine):
    def render_pdf_to_images(self, *, pdf_file: Path, out_dir: Path, scale: float):
        raise RuntimeError("pdfium exploded")


def _make_pdf(path: Path, pages: int) -> None:
    pdf = canvas.Canvas(str(path), pagesize=(200, 300))
    for i in range(pages):
        pdf.drawString(20, 150, f"Page {i + 1}")
        pdf.showPage()
    pdf.save()


class TestRasterizeInputs(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_rejects_non_pdf(self) -> None:
        doc = self.tmp / "slides.docx"
        doc.write_bytes(b"PK")
        with self.assertRaises(InputDocumentError) as ctx:
            run_rasterize_pdf(pdf_file=doc, out_dir=self.tmp / "out")
        self.assertEqual(ctx.exception.code, "INPUT_NOT_PDF")

    def test_rejects_missing_pdf(self) -> None:
        with self.assertRaises(InputDocumentError) as ctx:
            run_rasterize_pdf(pdf_file=self.tmp / "missing.pdf", out_dir=self.tmp / "out")
        self.assertEqual(ctx.exception.code, "INPUT_NOT_FOUND")

    def test_backend_failure_is_wrapped(self) -> None:
        pdf = self.tmp / "input.pdf"
        pdf.write_bytes(b"%PDF-FAKE%")
        with patch("rasterize_pdf.module._get_engine", return_value=_BrokenEngine()):
            with self.assertRaises(RasterizeError) as ctx:
                run_rasterize_pdf(pdf_file=pdf, out_dir=self.tmp / "out")
        self.assertEqual(ctx.exception.code, "RASTERIZE_RENDER_FAILED")
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_pages_sorted_with_fake_engine(self) -> None:
        pdf = self.tmp / "input.pdf"
        pdf.write_bytes(b"%PDF-FAKE%")
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=3)):
            result = run_rasterize_pdf(pdf_file=pdf, out_dir=self.tmp / "out", scale=1.0)

        self.assertEqual(result.page_count, 3)
        self.assertEqual([p.page_num for p in result.pages], [1, 2, 3])
        self.assertEqual([p.image_name for p in result.pages], ["page_001.png", "page_002.png", "page_003.png"])
        self.assertEqual(result.rendering["backend"], "fake_backend")
        self.assertEqual(result.rendering["scale"], 1.0)


class TestNaming(unittest.TestCase):
    def test_page_names_sort_lexically(self) -> None:
        self.assertEqual(page_image_name(7, page_count=12), "page_007.png")
        self.assertEqual(page_image_name(7, page_count=1200), "page_0007.png")
        names = [page_image_name(p, page_count=1200) for p in (1000, 2, 99, 1200)]
        self.assertEqual(sorted(names), [page_image_name(p, page_count=1200) for p in (2, 99, 1000, 1200)])

    def test_safe_pdf_stem(self) -> None:
        self.assertEqual(safe_pdf_stem("uploads/My Slides (v2).PDF"), "My_Slides_v2")
        self.assertEqual(safe_pdf_stem("???.pdf"), "pdf")


class TestPypdfium2Engine(unittest.TestCase):
    def test_renders_every_page(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_name:
            tmp = Path(tmp_name)
            pdf = tmp / "three.pdf"
            _make_pdf(pdf, pages=3)
            out_dir = tmp / "rasterized"

            result = run_rasterize_pdf(pdf_file=pdf, out_dir=out_dir, scale=0.5)

            self.assertEqual(result.page_count, 3)
            self.assertEqual(sorted(p.name for p in out_dir.iterdir()), ["page_001.png", "page_002.png", "page_003.png"])
            for page in result.pages:
                self.assertLess(page.width_px, page.height_px)
                with Image.open(out_dir / page.image_name) as img:
                    self.assertEqual(img.mode, "RGB")
                    self.assertEqual(img.size, (page.width_px, page.height_px))


if __name__ == "__main__":
    unittest.main()
