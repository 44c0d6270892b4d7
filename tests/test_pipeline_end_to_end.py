from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import pypdfium2 as pdfium
from PIL import Image
from reportlab.pdfgen import canvas

from contracts.errors import InputDocumentError, ToneStageError
from darken_pipeline import DarkenPipeline, PipelineConfig, PipelineState, run_darken_pipeline
from grid_layout import serialize_layout_manifest
from rasterize_pdf import page_image_name
from rasterize_pdf.engines import EngineRenderedPage

FULL_RUN = [
    PipelineState.IDLE,
    PipelineState.RASTERIZING,
    PipelineState.STAGE_1,
    PipelineState.STAGE_2,
    PipelineState.STAGE_3,
    PipelineState.ASSEMBLING,
    PipelineState.CLEANING_UP,
    PipelineState.DONE,
]


class _FakeRasterEngine:
    def __init__(self, page_count: int) -> None:
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
        for p in range(1, self.page_count + 1):
            f = out_dir / page_image_name(p, page_count=self.page_count)
            Image.new("RGB", (40 + p, 60), (25 * p % 256, 120, 200)).save(f, format="PNG")
            rendered.append(EngineRenderedPage(page_num=p, image_file=f, width_px=40 + p, height_px=60))
        return rendered, {"backend": self.backend_id(), "backend_version": self.backend_version()}


def _make_pdf(path: Path, pages: int) -> None:
    pdf = canvas.Canvas(str(path), pagesize=(200, 300))
    for i in range(pages):
        pdf.drawString(20, 150, f"Page {i + 1}")
        pdf.showPage()
    pdf.save()


class _PipelineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.work_root = self.tmp / "work"
        self.config = PipelineConfig(work_root=self.work_root, out_dir=self.tmp / "out")
        self.source = self.tmp / "input.pdf"
        self.source.write_bytes(b"%PDF-FAKE%")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def assertNoStaging(self) -> None:
        leftovers = list(self.work_root.iterdir()) if self.work_root.exists() else []
        self.assertEqual(leftovers, [])


class TestPipelineSuccess(_PipelineTestCase):
    def test_full_run_cleans_up_and_returns_handle(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=9)):
            result = run_darken_pipeline(config=self.config, source_pdf=self.source, rows="4", columns=15)

        self.assertEqual(result.states, FULL_RUN)
        self.assertEqual((result.layout.rows, result.layout.columns), (4, 2))
        self.assertEqual(result.page_count, 9)
        self.assertEqual(result.tile_count, 9)
        self.assertEqual(result.output_page_count, 2)
        self.assertEqual(result.output_pdf, self.config.out_dir.resolve() / f"{result.run_id}.pdf")
        self.assertTrue(result.output_pdf.exists())
        self.assertEqual(result.warnings, [])
        self.assertNoStaging()

        doc = pdfium.PdfDocument(str(result.output_pdf))
        try:
            self.assertEqual(len(doc), 2)
        finally:
            doc.close()

    def test_malformed_layout_values_fall_back_to_defaults(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=3)):
            result = run_darken_pipeline(config=self.config, source_pdf=self.source, rows="+-5", columns="²")

        self.assertEqual(result.states, FULL_RUN)
        self.assertEqual((result.layout.rows, result.layout.columns), (4, 2))
        self.assertEqual((result.assembly.layout.rows, result.assembly.layout.columns), (4, 2))
        self.assertTrue(result.output_pdf.exists())
        self.assertNoStaging()

    def test_nothing_to_assemble_is_not_an_error(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=0)):
            result = run_darken_pipeline(config=self.config, source_pdf=self.source)

        self.assertIsNone(result.output_pdf)
        self.assertEqual(result.states[-1], PipelineState.DONE)
        self.assertNoStaging()

    def test_repeated_runs_have_identical_layout(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=11)):
            r1 = run_darken_pipeline(config=self.config, source_pdf=self.source, rows=2, columns=3)
            r2 = run_darken_pipeline(config=self.config, source_pdf=self.source, rows=2, columns=3)

        self.assertNotEqual(r1.run_id, r2.run_id)
        self.assertNotEqual(r1.output_pdf, r2.output_pdf)
        self.assertEqual(serialize_layout_manifest(r1.assembly), serialize_layout_manifest(r2.assembly))
        self.assertEqual(r1.output_page_count, 2)
        self.assertNoStaging()

    def test_explicit_run_id_reuses_output_slot(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=3)):
            r1 = run_darken_pipeline(config=self.config, source_pdf=self.source, run_id="slot")
            r2 = run_darken_pipeline(config=self.config, source_pdf=self.source, run_id="slot", columns=1)

        self.assertEqual(r1.output_pdf, r2.output_pdf)
        self.assertEqual(sorted(p.name for p in self.config.out_dir.iterdir()), ["slot.pdf"])
        self.assertNoStaging()

    def test_parallel_stages(self) -> None:
        config = PipelineConfig(work_root=self.work_root, out_dir=self.tmp / "out", max_workers=3)
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=7)):
            result = run_darken_pipeline(config=config, source_pdf=self.source)

        self.assertEqual(result.tile_count, 7)
        self.assertNoStaging()

    def test_real_pdf(self) -> None:
        real_pdf = self.tmp / "real.pdf"
        _make_pdf(real_pdf, pages=3)
        config = PipelineConfig(work_root=self.work_root, out_dir=self.tmp / "out", scale=0.3)

        result = run_darken_pipeline(config=config, source_pdf=real_pdf, rows=1, columns=2)

        self.assertEqual(result.page_count, 3)
        self.assertEqual(result.output_page_count, 2)
        doc = pdfium.PdfDocument(str(result.output_pdf))
        try:
            self.assertEqual(len(doc), 2)
        finally:
            doc.close()
        self.assertNoStaging()


class TestPipelineFailure(_PipelineTestCase):
    def test_transform_failure_propagates_after_cleanup(self) -> None:
        pipeline = DarkenPipeline(self.config, run_id="failing")
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=4)), patch(
            "tone_stages.module.apply_tone", side_effect=RuntimeError("boom")
        ):
            with self.assertRaises(ToneStageError) as ctx:
                pipeline.run(self.source)

        self.assertEqual(ctx.exception.code, "TONE_STAGE_FILE_FAILED")
        self.assertIn("boom", str(ctx.exception))
        self.assertEqual(pipeline.state, PipelineState.FAILED)
        self.assertEqual(pipeline.history[-2:], [PipelineState.STAGE_1, PipelineState.FAILED])
        self.assertNoStaging()
        self.assertFalse((self.config.out_dir / "failing.pdf").exists())

    def test_input_error_is_raised_unmodified(self) -> None:
        pipeline = DarkenPipeline(self.config)
        not_pdf = self.tmp / "notes.txt"
        not_pdf.write_text("hello", encoding="utf-8")

        with self.assertRaises(InputDocumentError) as ctx:
            pipeline.run(not_pdf)

        self.assertEqual(ctx.exception.code, "INPUT_NOT_PDF")
        self.assertEqual(pipeline.history, [PipelineState.IDLE, PipelineState.RASTERIZING, PipelineState.FAILED])
        self.assertNoStaging()

    def test_cleanup_failure_does_not_mask_original_error(self) -> None:
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=2)), patch(
            "tone_stages.module.apply_tone", side_effect=RuntimeError("boom")
        ), patch("staging.arena.remove_all", side_effect=OSError("busy")):
            with self.assertRaises(ToneStageError):
                run_darken_pipeline(config=self.config, source_pdf=self.source)

    def test_pipeline_is_single_use(self) -> None:
        pipeline = DarkenPipeline(self.config)
        with patch("rasterize_pdf.module._get_engine", return_value=_FakeRasterEngine(page_count=1)):
            pipeline.run(self.source)
        with self.assertRaises(RuntimeError):
            pipeline.run(self.source)


if __name__ == "__main__":
    unittest.main()
