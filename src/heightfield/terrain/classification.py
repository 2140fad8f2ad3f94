"""Material classification: rock, ground, grass by height above water."""

import math
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from ..materials import Material

# Heights above water level where the surface changes material
GROUND_MARGIN = 8.0
ROCK_MARGIN = 16.0

# Depth of the surface layer painted with ground or grass
SURFACE_DEPTH = 2.0

Classifier = Callable[[float], Material]


def classify_height(height: float, water_level: float) -> Material:
    """Surface material for a column of the given height.

    Peaks well above the water line are bare rock, the slopes below are
    ground and everything near the water is grass.
    """
    if height > water_level + ROCK_MARGIN:
        return Material.ROCK
    if height > water_level + GROUND_MARGIN:
        return Material.GROUND
    return Material.GRASS


def classify_column(height: float, y: float, water_level: float) -> Material:
    """Material of the voxel at elevation ``y`` inside a column.

    The top two units of a column are ground on high terrain and grass
    elsewhere; anything deeper is rock.
    """
    if y > height - SURFACE_DEPTH:
        if height > water_level + GROUND_MARGIN:
            return Material.GROUND
        return Material.GRASS
    return Material.ROCK


def make_classifier(water_level: float) -> Classifier:
    """Build a pure ``classify(height) -> Material`` for a water level."""
    if not math.isfinite(water_level):
        raise ValueError(f"water_level must be finite, got {water_level}")

    def classify(height: float) -> Material:
        return classify_height(height, water_level)

    return classify


def classify_grid(heights: NDArray[np.float64], water_level: float) -> NDArray[np.uint8]:
    """Classify every cell of a height array into material codes.

    Args:
        heights: 2D array of heights.
        water_level: Water level the thresholds are relative to.

    Returns:
        Array of ``Material.code`` values, same shape as ``heights``.
    """
    materials = np.full(heights.shape, Material.GRASS.code, dtype=np.uint8)
    materials[heights > water_level + GROUND_MARGIN] = Material.GROUND.code
    materials[heights > water_level + ROCK_MARGIN] = Material.ROCK.code
    return materials
