"""
Configuration modules for artwork generation.
"""

from .constants import (
    REFERENCE_WIDTH,
    REFERENCE_HEIGHT,
    DRAWING_MARGIN,
    CELL_MIN,
    CELL_MAX,
    CELL_ASPECT_MAX,
)
from .settings import Settings, settings
from .logging_config import configure_logging

__all__ = ['REFERENCE_WIDTH', 'REFERENCE_HEIGHT', 'DRAWING_MARGIN',
           'CELL_MIN', 'CELL_MAX', 'CELL_ASPECT_MAX',
           'Settings', 'settings', 'configure_logging']
