#!/usr/bin/env python3
"""
Generate sample artworks and print their parameter summaries.

This runs the full pipeline for each seed:
1. Palette and parameter derivation
2. Grid layout solving
3. Fold simulation
4. Crease processing and adaptive quantization

Usage:
    python generate_samples.py [seed ...] [--folds N] [--workers N] [--json]

If no seed is provided, seeds 1-8 are used.
"""

import argparse
import json
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent))

from py_fold.config import configure_logging, settings
from py_fold.config.constants import SHADE_CHARS
from py_fold.core.fold_strategies import strategy_to_dict
from py_fold.core.metadata import generate_metadata
from py_fold.core.parameters import describe_paper, generate_fold_count
from py_fold.core.pipeline import ArtworkRequest, compose_artwork, generate_batch


def folds_for(seed, folds):
    return generate_fold_count(seed) if folds is None else folds


def print_artwork(artwork):
    """Print a human readable summary and a glyph preview of the level map."""
    params = artwork.params
    palette = params.palette
    grid = params.grid

    print(f"\nSeed {params.seed}")
    print(f"  Palette: {palette.bg} / {palette.text} / {palette.accent} ({palette.strategy})")
    print(f"  Strategy: {strategy_to_dict(params.fold_strategy)}")
    print(f"  Render mode: {params.render_mode.value}")
    print(f"  Paper: {describe_paper(params.paper_properties)}")
    print(f"  Grid: {grid.cols}x{grid.rows} cells of {grid.cell_width:.0f}x{grid.cell_height:.0f}")
    print(f"  Folds: {params.folds} (cycle {params.max_folds}), creases: {artwork.crease_count}")
    print(f"  Intersections: {len(artwork.field.intersections)}")
    print(f"  Levels: {artwork.level_histogram()}")
    print(f"  Time: {artwork.generation_time_seconds:.3f}s")

    for row in artwork.levels:
        print("  |" + "".join(SHADE_CHARS[level] for level in row) + "|")


def main():
    parser = argparse.ArgumentParser(description="Generate sample fold artworks")
    parser.add_argument("seeds", nargs="*", type=int, help="Seeds to generate (default 1-8)")
    parser.add_argument("--folds", type=int, default=None, help="Fold count override")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes for several seeds")
    parser.add_argument("--json", action="store_true", help="Print JSON summaries instead of previews")
    parser.add_argument("--metadata", action="store_true", help="Print token metadata for each seed")
    args = parser.parse_args()

    configure_logging(settings)
    seeds = args.seeds or list(range(1, 9))

    if args.metadata:
        for token_id, seed in enumerate(seeds, start=1):
            print(json.dumps(generate_metadata(token_id, seed, folds_for(seed, args.folds)), indent=2))
        return

    if len(seeds) == 1:
        artworks = [compose_artwork(ArtworkRequest(seed=seeds[0], folds=args.folds))]
    else:
        artworks = generate_batch(seeds, folds=args.folds, max_workers=args.workers)

    for artwork in artworks:
        if args.json:
            print(json.dumps(artwork.to_summary(), indent=2))
        else:
            print_artwork(artwork)


if __name__ == "__main__":
    main()
