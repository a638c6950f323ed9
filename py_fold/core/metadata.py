"""Token metadata (name, description, trait list) for a composed artwork."""

from typing import Dict, List, Optional

from .grid_layout import describe_gap_ratio
from .parameters import describe_paper
from .pipeline import Artwork, ArtworkRequest, compose_artwork

DESCRIPTION = "On-chain generative paper folding art"


def artwork_traits(artwork: Artwork, fold_count: int) -> List[Dict[str, object]]:
    params = artwork.params
    paper = params.paper_properties
    grid = params.grid

    traits = [
        {"trait_type": "Fold Strategy", "value": params.fold_strategy.kind},
        {"trait_type": "Render Mode", "value": params.render_mode.value},
        {"trait_type": "Multi-Color", "value": "Yes" if params.multi_color else "No"},
        {"trait_type": "Cell Size", "value": f"{params.cells.cell_w}x{params.cells.cell_h}"},
        {"trait_type": "Fold Count", "value": fold_count},
        {"trait_type": "Max Folds", "value": params.max_folds},
        {"trait_type": "Crease Count", "value": artwork.crease_count},
        {"trait_type": "Palette Strategy", "value": f"cga/{params.palette.strategy}"},
        {"trait_type": "Paper Type", "value": describe_paper(paper)},
        {"trait_type": "Paper Grain", "value": "Grain" if paper.angle_affinity is not None else "Uniform"},
    ]
    if grid.has_gaps:
        traits.append({"trait_type": "Column Gap", "value": describe_gap_ratio(grid.col_gap_ratio)})
        traits.append({"trait_type": "Row Gap", "value": describe_gap_ratio(grid.row_gap_ratio)})
    if params.rare_flags.crease_lines:
        traits.append({"trait_type": "Crease Lines", "value": "Visible"})
    return traits


def generate_metadata(token_id: int, seed: int, fold_count: int,
                      image_base_url: Optional[str] = "") -> Dict[str, object]:
    """
    Metadata document for a token.

    Args:
        token_id: Token number, used in the name and image URL
        seed: Artwork seed
        fold_count: Folds applied to the token
        image_base_url: Prefix for the image URL; empty for no image

    Returns:
        Dict with name, description, image and attributes
    """
    artwork = compose_artwork(ArtworkRequest(seed=seed, folds=fold_count))
    return {
        "name": f"Fold #{token_id}",
        "description": DESCRIPTION,
        "image": f"{image_base_url}/{token_id}" if image_base_url else "",
        "attributes": artwork_traits(artwork, fold_count),
    }
