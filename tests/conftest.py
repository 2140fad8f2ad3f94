"""Shared test fixtures for heightfield tests."""

import numpy as np
import pytest

from heightfield.terrain.config import ErosionConfig, TerrainConfig
from heightfield.terrain.grid import HeightGrid


@pytest.fixture
def small_config() -> TerrainConfig:
    """32x32 config with a short erosion run."""
    return TerrainConfig(
        seed=42,
        size=32,
        height_scale=64.0,
        water_level=32.0,
        erosion=ErosionConfig(iterations=20),
    )


@pytest.fixture
def flat_grid() -> HeightGrid:
    """16x16 plane at height 10."""
    return HeightGrid(16, fill=10.0)


@pytest.fixture
def pit_grid() -> HeightGrid:
    """16x16 plane at height 10 with a single pit at (8, 8)."""
    grid = HeightGrid(16, fill=10.0)
    grid.set(8, 8, 0.0)
    return grid


@pytest.fixture
def ramp_grid() -> HeightGrid:
    """32x32 ramp where height equals x."""
    xs = np.arange(32, dtype=np.float64)
    return HeightGrid.from_array(np.repeat(xs[:, None], 32, axis=1))


@pytest.fixture
def bowl_grid() -> HeightGrid:
    """32x32 bowl centred on the grid, raised well above zero.

        height = 100 + 0.02 * distance^2
    """
    coords = np.arange(32, dtype=np.float64) - 15.5
    dist_sq = coords[:, None] ** 2 + coords[None, :] ** 2
    return HeightGrid.from_array(100.0 + 0.02 * dist_sq)
