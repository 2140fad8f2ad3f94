"""Procedural terrain generation package.

This package implements noise-based heightmap generation refined by
particle-based hydraulic erosion, plus material classification and export.
"""

from .classification import classify_height, make_classifier
from .config import (
    ErosionConfig,
    NoiseConfig,
    TerrainConfig,
    load_config,
    validate_config,
)
from .erosion import ErosionSimulator, ErosionStats
from .export import Region, TerrainCell, TerrainWriter, export_heightfield
from .generator import (
    GenerationResult,
    generate_and_save,
    generate_heightmap,
    generate_terrain,
)
from .grid import HeightGrid
from .noise import NoiseField
from .persistence import load_heightfield, save_heightfield

__all__ = [
    "ErosionConfig",
    "ErosionSimulator",
    "ErosionStats",
    "GenerationResult",
    "HeightGrid",
    "NoiseConfig",
    "NoiseField",
    "Region",
    "TerrainCell",
    "TerrainConfig",
    "TerrainWriter",
    "classify_height",
    "export_heightfield",
    "generate_and_save",
    "generate_heightmap",
    "generate_terrain",
    "load_config",
    "load_heightfield",
    "make_classifier",
    "save_heightfield",
    "validate_config",
]
