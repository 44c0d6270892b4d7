from __future__ import annotations

import argparse
from pathlib import Path

from loguru import logger

from contracts.errors import PipelineError
from grid_layout import write_layout_manifest_json
from rasterize_pdf import DEFAULT_SCALE

from .contracts import PipelineConfig
from .logging_setup import setup_logging
from .module import run_darken_pipeline


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="darken-pdf",
        description="Rasterize a PDF, darken every page in three tone stages, re-assemble as a numbered grid PDF.",
    )
    p.add_argument("--source-pdf", required=True, type=Path, help="Input PDF file.")
    p.add_argument("--work-root", required=True, type=Path, help="Root for per-run staging directories.")
    p.add_argument("--out-dir", required=True, type=Path, help="Directory receiving <run_id>.pdf.")
    # Kept as strings: invalid values fall back to the layout defaults instead of failing.
    p.add_argument("--rows", default=None, help="Tiles per column, 1..20 (default 4).")
    p.add_argument("--columns", default=None, help="Tiles per row, 1..10 (default 2).")
    p.add_argument("--scale", type=float, default=DEFAULT_SCALE, help="Rasterization scale (1.0 = 72 DPI).")
    p.add_argument("--workers", type=int, default=1, help="Per-stage worker threads.")
    p.add_argument("--run-id", default=None, help="Explicit run id (reuses its staging set and output path).")
    p.add_argument("--out-manifest", type=Path, default=None, help="Optional layout manifest JSON file.")
    p.add_argument("--log-level", default="INFO", help="loguru level name.")
    p.add_argument("--log-file", type=Path, default=None, help="Optional log file (rotated).")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    config = PipelineConfig(
        work_root=args.work_root,
        out_dir=args.out_dir,
        scale=args.scale,
        max_workers=args.workers,
    )

    try:
        result = run_darken_pipeline(
            config=config,
            source_pdf=args.source_pdf,
            rows=args.rows,
            columns=args.columns,
            run_id=args.run_id,
        )
    except PipelineError as e:
        logger.error("[{}] {}", e.code, e.message)
        return 1

    for w in result.warnings:
        logger.warning("cleanup: [{}] {} ({})", w.code, w.message, w.path)

    if result.output_pdf is None:
        logger.warning("No pages to assemble; no output written")
        return 2

    if args.out_manifest is not None and result.assembly is not None:
        write_layout_manifest_json(result=result.assembly, out_manifest=args.out_manifest)

    print(result.output_pdf)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
