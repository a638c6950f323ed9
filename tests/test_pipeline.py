"""End-to-end tests for artwork composition."""

import numpy as np
import pytest
from pydantic import ValidationError

from py_fold.config.constants import DRAWING_MARGIN
from py_fold.core.metadata import generate_metadata
from py_fold.core.pipeline import (
    ArtworkRequest,
    compose_artwork,
    generate_all_params,
    generate_batch,
)
from py_fold.core.quantizer import DEFAULT_THRESHOLDS


@pytest.fixture(scope="module")
def artwork():
    return compose_artwork(ArtworkRequest(seed=42, folds=40))


class TestArtworkRequest:
    """Test request validation."""

    def test_defaults(self):
        """Test that a request fills in the reference canvas defaults."""
        request = ArtworkRequest(seed=-7)
        assert request.width == 1200
        assert request.height == 1697
        assert request.folds is None

    def test_canvas_too_small(self):
        """Test that a canvas inside the margins is rejected."""
        with pytest.raises(ValidationError):
            ArtworkRequest(seed=1, width=2 * DRAWING_MARGIN)

    def test_padding_leaves_no_area(self):
        """Test that padding consuming the canvas is rejected."""
        with pytest.raises(ValidationError):
            ArtworkRequest(seed=1, padding=500)

    def test_negative_folds(self):
        """Test that negative fold counts are rejected."""
        with pytest.raises(ValidationError):
            ArtworkRequest(seed=1, folds=-1)

    def test_fold_limit(self):
        """Test that fold counts above the configured limit are rejected."""
        with pytest.raises(ValidationError):
            ArtworkRequest(seed=1, folds=10 ** 6)


class TestComposition:
    """Test the composed artwork."""

    def test_shapes_match_grid(self, artwork):
        """Test that level and weight arrays match the grid shape."""
        grid = artwork.params.grid
        assert artwork.levels.shape == (grid.rows, grid.cols)
        assert artwork.field.cell_weights.shape == (grid.rows, grid.cols)

    def test_histogram_covers_grid(self, artwork):
        """Test that the histogram counts every cell once."""
        histogram = artwork.level_histogram()
        assert set(histogram) == {0, 1, 2, 3}
        assert sum(histogram.values()) == artwork.params.grid.cell_count

    def test_deterministic(self, artwork):
        """Test that the same request composes the same artwork."""
        again = compose_artwork(ArtworkRequest(seed=42, folds=40))
        np.testing.assert_array_equal(again.levels, artwork.levels)
        assert again.thresholds == artwork.thresholds
        assert again.to_summary() == artwork.to_summary()

    def test_target_cells_in_grid(self, artwork):
        """Test that fold target cells lie inside the grid."""
        grid = artwork.params.grid
        for cell in (artwork.first_target_cell, artwork.last_target_cell):
            if cell is not None:
                col, row = cell
                assert 0 <= col < grid.cols
                assert 0 <= row < grid.rows

    def test_accent_cells_hold_max_gap(self, artwork):
        """Test that accent cells hold the largest depth gap."""
        gaps = artwork.field.cell_max_gap
        for col, row in artwork.accent_cells():
            assert gaps[row, col] == gaps.max()

    def test_zero_folds(self):
        """Test that zero folds compose a blank artwork."""
        blank = compose_artwork(ArtworkRequest(seed=9, folds=0))
        assert blank.crease_count == 0
        assert not blank.levels.any()
        assert blank.thresholds == DEFAULT_THRESHOLDS
        assert blank.first_target_cell is None
        assert blank.accent_cells() == []

    def test_seeded_fold_count(self):
        """Test that fold counts are seeded unless given."""
        params = generate_all_params(5)
        assert 1 <= params.folds <= 500
        assert generate_all_params(5, folds=12).folds == 12

    def test_summary(self, artwork):
        """Test that the summary reports counts and thresholds."""
        summary = artwork.to_summary()
        assert summary["seed"] == 42
        assert summary["folds"] == 40
        assert summary["creaseCount"] == artwork.crease_count
        assert set(summary["thresholds"]) == {"t1", "t2", "t3", "tExtreme"}


class TestBatch:
    """Test multi-process generation."""

    def test_empty(self):
        """Test that an empty batch returns no artworks."""
        assert generate_batch([]) == []

    def test_order_and_equality(self):
        """Test that batch results keep request order and match single runs."""
        seeds = [3, 1, 2]
        results = generate_batch(seeds, folds=10, max_workers=2)
        assert [a.params.seed for a in results] == seeds
        single = compose_artwork(ArtworkRequest(seed=1, folds=10))
        np.testing.assert_array_equal(results[1].levels, single.levels)


class TestMetadata:
    """Test token metadata."""

    def test_document(self):
        """Test that metadata carries the token name and its trait attributes."""
        metadata = generate_metadata(7, 42, 20)
        assert metadata["name"] == "Fold #7"
        assert metadata["image"] == ""
        traits = {t["trait_type"]: t["value"] for t in metadata["attributes"]}
        assert traits["Fold Count"] == 20
        assert traits["Palette Strategy"].startswith("cga/")
        assert traits["Paper Grain"] in ("Grain", "Uniform")

    def test_image_url(self):
        """Test that an image base URL is joined with the token id."""
        assert generate_metadata(3, 1, 5, "https://example.com/art")["image"] == "https://example.com/art/3"
