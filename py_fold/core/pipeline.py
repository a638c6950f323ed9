"""
Artwork composition pipeline.

palette -> parameters -> grid layout -> fold simulation -> crease processing
-> adaptive thresholds -> level map. Every stage is a pure function of the
request, so independent seeds can be composed in parallel processes.
"""

import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, model_validator

from ..config.constants import DRAWING_MARGIN, REFERENCE_HEIGHT, REFERENCE_WIDTH
from ..config.settings import settings
from .crease_processing import CreaseField, process_creases
from .fold_simulator import FoldSimulation, simulate_folds
from .fold_strategies import FoldStrategy, generate_fold_strategy, strategy_to_dict
from .grid_layout import Grid, solve_grid
from .palette import Palette, generate_palette
from .parameters import (
    CellDimensions,
    PaperProperties,
    RenderMode,
    WeightRange,
    generate_cell_dimensions,
    generate_fold_count,
    generate_max_folds,
    generate_multi_color_enabled,
    generate_multi_color_palette,
    generate_paper_properties,
    generate_render_mode,
    generate_weight_range,
)
from .quantizer import AdaptiveThresholds, calculate_adaptive_thresholds, level_map
from .render_traits import (
    DrawDirectionInfo,
    MarginSize,
    OverlapInfo,
    RareFlags,
    ShadowEffect,
    generate_cell_overflow,
    generate_draw_direction,
    generate_margin_size,
    generate_overlap_info,
    generate_rare_flags,
    generate_shadow_effect,
    generate_show_empty_cells,
)

logger = structlog.get_logger()


class ArtworkRequest(BaseModel):
    """Request to compose one artwork."""

    seed: int = Field(..., description="Artwork seed (any sign)")
    width: int = Field(REFERENCE_WIDTH, ge=2 * DRAWING_MARGIN + 1, le=20000, description="Canvas width in reference units")
    height: int = Field(REFERENCE_HEIGHT, ge=2 * DRAWING_MARGIN + 1, le=20000, description="Canvas height in reference units")
    padding: float = Field(0, ge=0, description="Extra padding on each side")
    folds: Optional[int] = Field(None, ge=0, description="Fold count; seeded when omitted")

    @model_validator(mode="after")
    def check_drawing_area(self):
        if self.width - 2 * self.padding - 2 * DRAWING_MARGIN <= 0:
            raise ValueError("padding leaves no drawing area horizontally")
        if self.height - 2 * self.padding - 2 * DRAWING_MARGIN <= 0:
            raise ValueError("padding leaves no drawing area vertically")
        if self.folds is not None and self.folds > settings.max_fold_count:
            raise ValueError(f"folds must not exceed {settings.max_fold_count}")
        return self


@dataclass(frozen=True)
class GenerationParams:
    """Every seed-derived parameter of one artwork."""

    seed: int
    palette: Palette
    cells: CellDimensions
    render_mode: RenderMode
    weight_range: WeightRange
    fold_strategy: FoldStrategy
    multi_color: bool
    level_colors: Optional[Tuple[str, ...]]
    max_folds: int
    paper_properties: PaperProperties
    folds: int
    inner_width: float
    inner_height: float
    grid: Grid
    show_empty_cells: bool
    overlap: OverlapInfo
    shadow: ShadowEffect
    draw_direction: DrawDirectionInfo
    cell_overflow: int
    rare_flags: RareFlags
    margin: MarginSize


def generate_all_params(seed: int, width: int = REFERENCE_WIDTH, height: int = REFERENCE_HEIGHT,
                        padding: float = 0, folds: Optional[int] = None) -> GenerationParams:
    """
    Derive the full parameter bundle for a seed.

    Args:
        seed: Artwork seed
        width: Canvas width in reference units
        height: Canvas height in reference units
        padding: Extra padding on each side
        folds: Fold count override; seeded when None

    Returns:
        GenerationParams
    """
    palette = generate_palette(seed)
    cells = generate_cell_dimensions(seed, padding, width, height)
    inner_width = width - padding * 2 - DRAWING_MARGIN * 2
    inner_height = height - padding * 2 - DRAWING_MARGIN * 2
    grid = solve_grid(seed, cells.cell_w, cells.cell_h, inner_width, inner_height)

    multi_color = generate_multi_color_enabled(seed)
    level_colors = None
    if multi_color:
        level_colors = tuple(generate_multi_color_palette(seed, palette.bg, palette.text))

    return GenerationParams(
        seed=seed,
        palette=palette,
        cells=cells,
        render_mode=generate_render_mode(seed),
        weight_range=generate_weight_range(seed),
        fold_strategy=generate_fold_strategy(seed),
        multi_color=multi_color,
        level_colors=level_colors,
        max_folds=generate_max_folds(seed),
        paper_properties=generate_paper_properties(seed),
        folds=generate_fold_count(seed) if folds is None else folds,
        inner_width=inner_width,
        inner_height=inner_height,
        grid=grid,
        show_empty_cells=generate_show_empty_cells(seed),
        overlap=generate_overlap_info(seed),
        shadow=generate_shadow_effect(seed, palette.bg, palette.text, palette.accent),
        draw_direction=generate_draw_direction(seed, grid.cols),
        cell_overflow=generate_cell_overflow(seed),
        rare_flags=generate_rare_flags(seed),
        margin=generate_margin_size(seed),
    )


@dataclass
class Artwork:
    """Composed artwork, ready for a glyph renderer."""

    params: GenerationParams
    simulation: FoldSimulation
    field: CreaseField
    thresholds: AdaptiveThresholds
    levels: np.ndarray
    first_target_cell: Optional[Tuple[int, int]] = None
    last_target_cell: Optional[Tuple[int, int]] = None
    generation_time_seconds: float = 0.0

    @property
    def crease_count(self) -> int:
        return len(self.simulation.creases)

    def accent_cells(self) -> List[Tuple[int, int]]:
        return self.field.accent_cells()

    def level_histogram(self) -> Dict[int, int]:
        counts = np.bincount(self.levels.ravel(), minlength=4)
        return {level: int(counts[level]) for level in range(4)}

    def to_summary(self) -> Dict[str, object]:
        params = self.params
        return {
            "seed": params.seed,
            "palette": params.palette.to_dict(),
            "renderMode": params.render_mode.value,
            "foldStrategy": strategy_to_dict(params.fold_strategy),
            "grid": {"cols": params.grid.cols, "rows": params.grid.rows},
            "cell": {"width": params.cells.cell_w, "height": params.cells.cell_h},
            "folds": params.folds,
            "maxFolds": params.max_folds,
            "creaseCount": self.crease_count,
            "intersections": len(self.field.intersections),
            "thresholds": self.thresholds.to_dict(),
            "levels": self.level_histogram(),
            "multiColor": params.multi_color,
            "levelColors": list(params.level_colors) if params.level_colors else None,
        }


def compose_artwork(request: ArtworkRequest) -> Artwork:
    """Run the full pipeline for one validated request."""
    start_time = time.time()
    params = generate_all_params(request.seed, request.width, request.height, request.padding, request.folds)
    grid = params.grid

    # Creases live in grid space so cell bucketing needs no offset
    simulation = simulate_folds(
        grid.actual_width,
        grid.actual_height,
        params.folds,
        request.seed,
        params.weight_range,
        params.fold_strategy,
        params.paper_properties,
    )
    field = process_creases(
        simulation.creases,
        grid.cols,
        grid.rows,
        grid.stride_x,
        grid.stride_y,
        simulation.max_folds,
        params.paper_properties,
    )
    thresholds = calculate_adaptive_thresholds(field.cell_weights)
    levels = level_map(field.cell_weights, thresholds)

    first_cell = None
    last_cell = None
    if simulation.first_fold_target is not None:
        first_cell = grid.cell_at(*simulation.first_fold_target)
    if simulation.last_fold_target is not None:
        last_cell = grid.cell_at(*simulation.last_fold_target)

    elapsed = time.time() - start_time
    logger.info(
        "Artwork composed",
        seed=request.seed,
        folds=params.folds,
        creases=len(simulation.creases),
        cols=grid.cols,
        rows=grid.rows,
        seconds=round(elapsed, 3),
    )

    return Artwork(
        params=params,
        simulation=simulation,
        field=field,
        thresholds=thresholds,
        levels=levels,
        first_target_cell=first_cell,
        last_target_cell=last_cell,
        generation_time_seconds=elapsed,
    )


def _compose_seed(seed: int, folds: Optional[int]) -> Artwork:
    return compose_artwork(ArtworkRequest(seed=seed, folds=folds))


def generate_batch(seeds: Iterable[int], folds: Optional[int] = None,
                   max_workers: Optional[int] = None) -> List[Artwork]:
    """
    Compose many seeds in a process pool.

    Returns:
        Artworks in the same order as ``seeds``
    """
    seeds = list(seeds)
    if not seeds:
        return []

    workers = max_workers or settings.batch_workers
    logger.info("Starting batch generation", seeds=len(seeds), workers=workers)
    with ProcessPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_compose_seed, seeds, [folds] * len(seeds)))
