from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from contracts.errors import InputDocumentError, RasterizeError

from .contracts import RasterEngineName, RasterizedPage, RasterizeResult
from .engines import Pypdfium2Engine

DEFAULT_SCALE = 2.0


def safe_pdf_stem(pdf_name: str) -> str:
    """
    Deterministic, filesystem-safe stem for readability.
    """
    s = pdf_name.replace("\\", "/").split("/")[-1]
    if s.lower().endswith(".pdf"):
        s = s[: -len(".pdf")]
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "pdf"


def _get_engine(engine: RasterEngineName):
    if engine == RasterEngineName.PYPDFIUM2:
        return Pypdfium2Engine()
    raise ValueError(f"Unsupported rasterization engine: {engine}")


def validate_source_pdf(pdf_file: Path) -> Path:
    """
    Only existing `.pdf` files are accepted (by extension).
    """

    if pdf_file.suffix.lower() != ".pdf":
        raise InputDocumentError(
            "Only PDF source documents are supported",
            code="INPUT_NOT_PDF",
            detail={"source": pdf_file.name},
        )
    if not pdf_file.is_file():
        raise InputDocumentError(
            "Source PDF not found",
            code="INPUT_NOT_FOUND",
            detail={"source": str(pdf_file)},
        )
    return pdf_file


def run_rasterize_pdf(
    *,
    pdf_file: Path,
    out_dir: Path,
    scale: float = DEFAULT_SCALE,
    engine: RasterEngineName = RasterEngineName.PYPDFIUM2,
) -> RasterizeResult:
    """
    Render every page of `pdf_file` to `out_dir/page_NNN.png`.

    `out_dir` is expected to be prepared (existing and empty) by the caller.
    Backend failures raise RasterizeError chained from the original exception.
    """

    if scale <= 0:
        raise ValueError("scale must be > 0")

    pdf_file = validate_source_pdf(pdf_file)
    backend = _get_engine(engine)

    try:
        page_count = backend.get_page_count(pdf_file=pdf_file)
    except Exception as e:
        raise RasterizeError(
            "Failed to read PDF page count",
            code="RASTERIZE_PAGECOUNT_FAILED",
            detail={"source": pdf_file.name, "error": repr(e)},
        ) from e
    logger.info("Rasterizing {} ({} pages, scale={})", pdf_file.name, page_count, scale)

    try:
        rendered, backend_params = backend.render_pdf_to_images(pdf_file=pdf_file, out_dir=out_dir, scale=scale)
    except Exception as e:
        raise RasterizeError(
            "PDF rendering failed",
            code="RASTERIZE_RENDER_FAILED",
            detail={"source": pdf_file.name, "error": repr(e)},
        ) from e

    pages = sorted(
        (
            RasterizedPage(
                page_num=rp.page_num,
                image_name=rp.image_file.name,
                width_px=int(rp.width_px),
                height_px=int(rp.height_px),
            )
            for rp in rendered
        ),
        key=lambda p: p.page_num,
    )

    rendering = {"scale": scale, "backend": backend.backend_id(), "backend_version": backend.backend_version()}
    rendering.update(backend_params)

    logger.info("Rasterized {} page images into {}", len(pages), out_dir)
    return RasterizeResult(engine=engine, page_count=page_count, pages=pages, rendering=rendering)
