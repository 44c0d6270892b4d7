from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from loguru import logger

from grid_layout import GridAssemblyResult, LayoutParams, run_grid_assembly
from rasterize_pdf import RasterizeResult, run_rasterize_pdf, safe_pdf_stem
from staging import CleanupWarning, StagingArena, StagingPhase
from tone_stages import STAGE_1, STAGE_2, STAGE_3, ToneStageParams, run_tone_stage

from .contracts import PipelineConfig, PipelineResult, PipelineState

# (state, source phase, destination phase, stage params), in execution order.
_TONE_STEPS: tuple[tuple[PipelineState, StagingPhase, StagingPhase, ToneStageParams], ...] = (
    (PipelineState.STAGE_1, StagingPhase.RASTERIZED, StagingPhase.STAGE_1, STAGE_1),
    (PipelineState.STAGE_2, StagingPhase.STAGE_1, StagingPhase.STAGE_2, STAGE_2),
    (PipelineState.STAGE_3, StagingPhase.STAGE_2, StagingPhase.FINAL, STAGE_3),
)


def new_run_id(source_pdf: Path) -> str:
    """
    Unique per-run token: readable stem plus 12 random hex chars.
    """

    return f"{safe_pdf_stem(source_pdf.name)}_{uuid.uuid4().hex[:12]}"


class DarkenPipeline:
    """
    Rasterize -> three tone stages -> grid assembly, with compensating cleanup.

    The run state is explicit (`state`, `history`) and every intermediate lives
    in a StagingArena owned by this run. Each instance executes at most once.
    """

    def __init__(self, config: PipelineConfig, *, run_id: str | None = None) -> None:
        self.config = config
        self.run_id = run_id
        self.state = PipelineState.IDLE
        self.history: list[PipelineState] = [PipelineState.IDLE]

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)
        logger.info("Pipeline state -> {}", state.value)

    def run(self, source_pdf: Path, *, rows: Any = None, columns: Any = None) -> PipelineResult:
        """
        Execute the whole run and return a handle to the produced document.

        The original exception of a failing phase is re-raised unchanged after
        every staging directory has been removed.
        """

        if self.state is not PipelineState.IDLE:
            raise RuntimeError("DarkenPipeline instances are single-use")
        if self.run_id is None:
            self.run_id = new_run_id(source_pdf)
        layout = LayoutParams.from_request(rows, columns)

        arena = StagingArena(work_root=self.config.work_root, run_id=self.run_id)
        with logger.contextualize(run_id=self.run_id):
            logger.debug("Layout rows={!r} columns={!r} -> {}x{}", rows, columns, layout.rows, layout.columns)
            try:
                raster, assembly, stage_warnings = self._run_phases(arena, source_pdf, layout)
            except BaseException as e:
                failed_in = self.state
                self._enter(PipelineState.FAILED)
                logger.error("Pipeline failed during {}: {}", failed_in.value, e)
                arena.release_all()
                raise

            self._enter(PipelineState.CLEANING_UP)
            warnings = stage_warnings + arena.release_all()
            self._enter(PipelineState.DONE)

        return PipelineResult(
            run_id=self.run_id,
            output_pdf=assembly.output_pdf,
            page_count=raster.page_count,
            output_page_count=assembly.page_count,
            tile_count=len(assembly.tiles),
            layout=layout,
            states=list(self.history),
            warnings=warnings,
            meta={"rendering": raster.rendering, "assembly": assembly.meta},
            assembly=assembly,
        )

    def _run_phases(
        self,
        arena: StagingArena,
        source_pdf: Path,
        layout: LayoutParams,
    ) -> tuple[RasterizeResult, GridAssemblyResult, list[CleanupWarning]]:
        self._enter(PipelineState.RASTERIZING)
        raster = run_rasterize_pdf(
            pdf_file=source_pdf,
            out_dir=arena.prepare(StagingPhase.RASTERIZED),
            scale=self.config.scale,
        )

        warnings: list[CleanupWarning] = []
        for state, src_phase, dst_phase, params in _TONE_STEPS:
            self._enter(state)
            result = run_tone_stage(
                src_dir=arena.path_for(src_phase),
                dst_dir=arena.prepare(dst_phase),
                params=params,
                max_workers=self.config.max_workers,
            )
            warnings.extend(result.warnings)
            if result.removed_source:
                arena.release(src_phase)

        self._enter(PipelineState.ASSEMBLING)
        assembly = run_grid_assembly(
            src_dir=arena.path_for(StagingPhase.FINAL),
            out_pdf=self.config.out_dir.expanduser().resolve() / f"{self.run_id}.pdf",
            layout=layout,
        )
        return raster, assembly, warnings


def run_darken_pipeline(
    *,
    config: PipelineConfig,
    source_pdf: Path,
    rows: Any = None,
    columns: Any = None,
    run_id: str | None = None,
) -> PipelineResult:
    """
    Programmatic entry point: (source PDF, optional rows, optional columns) -> result handle.

    `rows`/`columns` may be missing or invalid; they fall back to the defaults.
    Reusing an explicit `run_id` reuses that run's staging set and output path.
    """

    return DarkenPipeline(config, run_id=run_id).run(source_pdf, rows=rows, columns=columns)
