from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger
from PIL import Image

from contracts.errors import ToneStageError
from rasterize_pdf.contracts import list_raster_files
from staging import CleanupWarning, ensure_dir, remove_all

from .contracts import ToneStageParams, ToneStageResult
from .transforms import apply_tone


def transform_file(*, src_file: Path, dst_file: Path, params: ToneStageParams) -> None:
    """
    Read one image, apply the stage, write it under the same filename.

    The output format follows the filename extension.
    """

    try:
        with Image.open(src_file) as img:
            img.load()
            out = apply_tone(img, params)
        out.save(dst_file)
    except Exception as e:
        raise ToneStageError(
            f"{params.name}: failed to transform {src_file.name}: {e}",
            code="TONE_STAGE_FILE_FAILED",
            detail={"stage": params.name, "file": src_file.name, "error": repr(e)},
        ) from e
    logger.debug("{} done: {}", params.name, src_file.name)


def run_tone_stage(
    *,
    src_dir: Path,
    dst_dir: Path,
    params: ToneStageParams,
    max_workers: int = 1,
) -> ToneStageResult:
    """
    Apply `params` to every qualifying image in `src_dir`, writing into `dst_dir`.

    Barrier semantics: returns only after every output file has been written.
    The first per-file failure aborts the stage (ToneStageError). An empty
    source is a no-op. When `params.remove_source` is set, `src_dir` is deleted
    after all outputs exist; failure to delete is reported as a warning.
    """

    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    ensure_dir(dst_dir)
    files = list_raster_files(src_dir)
    if not files:
        logger.info("{}: no qualifying images in {}, nothing to do", params.name, src_dir)

    jobs = [(f, dst_dir / f.name) for f in files]
    if max_workers == 1 or len(jobs) <= 1:
        for src_file, dst_file in jobs:
            transform_file(src_file=src_file, dst_file=dst_file, params=params)
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(jobs))) as ex:
            futures = [ex.submit(transform_file, src_file=s, dst_file=d, params=params) for s, d in jobs]
            # Re-raise in submission order; leaving the block waits for the rest.
            for fut in futures:
                fut.result()

    logger.info(
        "{} done: {} file(s) (gain={}, offset={}, grayscale={})",
        params.name,
        len(jobs),
        params.gain,
        params.offset,
        params.grayscale,
    )

    warnings: list[CleanupWarning] = []
    removed = False
    if params.remove_source:
        try:
            removed = remove_all(src_dir)
        except OSError as e:
            logger.warning("{}: could not remove source directory {}: {!r}", params.name, src_dir, e)
            warnings.append(
                CleanupWarning(
                    code="STAGING_DIR_REMOVE_FAILED",
                    message="Failed to remove consumed source directory",
                    path=str(src_dir),
                    detail={"stage": params.name, "error": repr(e)},
                )
            )
        else:
            if removed:
                logger.info("{}: removed consumed source directory {}", params.name, src_dir)

    return ToneStageResult(
        stage=params.name,
        files=[f.name for f in files],
        removed_source=removed,
        warnings=warnings,
    )
