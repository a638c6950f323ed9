"""
Deterministic paper-fold artwork generation.
"""

from .core.lcg_prng import SeededRandom, hash_seed
from .utils.random import RngChannel, channel_rng
from .core.palette import Palette, generate_palette
from .core.parameters import (
    PaperProperties,
    RenderMode,
    WeightRange,
    generate_cell_dimensions,
    generate_paper_properties,
)
from .core.fold_strategies import generate_fold_strategy
from .core.grid_layout import Grid, solve_grid
from .core.fold_simulator import Crease, FoldSimulation, simulate_folds
from .core.crease_processing import CreaseField, process_creases
from .core.quantizer import AdaptiveThresholds, calculate_adaptive_thresholds, level, level_map
from .core.pipeline import Artwork, ArtworkRequest, compose_artwork, generate_all_params, generate_batch
from .core.metadata import generate_metadata

__version__ = "0.1.0"

__all__ = ['SeededRandom', 'hash_seed', 'RngChannel', 'channel_rng',
           'Palette', 'generate_palette',
           'PaperProperties', 'RenderMode', 'WeightRange',
           'generate_cell_dimensions', 'generate_paper_properties', 'generate_fold_strategy',
           'Grid', 'solve_grid', 'Crease', 'FoldSimulation', 'simulate_folds',
           'CreaseField', 'process_creases',
           'AdaptiveThresholds', 'calculate_adaptive_thresholds', 'level', 'level_map',
           'Artwork', 'ArtworkRequest', 'compose_artwork', 'generate_all_params', 'generate_batch',
           'generate_metadata']
