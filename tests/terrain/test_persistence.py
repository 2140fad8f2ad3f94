"""Tests for heightfield persistence."""

import numpy as np
import pytest

from heightfield.terrain.config import TerrainConfig
from heightfield.terrain.grid import HeightGrid
from heightfield.terrain.persistence import FORMAT_VERSION, load_heightfield, save_heightfield


class TestPersistence:
    """Tests for save/load of .npz heightfields."""

    def test_round_trip(self, tmp_path, bowl_grid: HeightGrid) -> None:
        """Heights, materials and metadata survive a save/load."""
        path = tmp_path / "bowl.npz"
        config = TerrainConfig(seed=5, size=32)
        materials = np.ones((32, 32), dtype=np.uint8)

        save_heightfield(path, bowl_grid, config, materials=materials)
        grid, loaded_materials, metadata = load_heightfield(path)

        np.testing.assert_array_equal(grid.to_array(), bowl_grid.to_array())
        np.testing.assert_array_equal(loaded_materials, materials)
        assert metadata["version"] == FORMAT_VERSION
        assert metadata["seed"] == 5
        assert metadata["config"]["erosion"]["radius"] == 3

    def test_without_materials(self, tmp_path, flat_grid: HeightGrid) -> None:
        """Materials are optional."""
        path = tmp_path / "flat.npz"
        save_heightfield(path, flat_grid, TerrainConfig(seed=1, size=16))
        _, materials, _ = load_heightfield(path)
        assert materials is None

    def test_missing_file(self, tmp_path) -> None:
        """Loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_heightfield(tmp_path / "missing.npz")

    def test_missing_heights(self, tmp_path) -> None:
        """Files without heights are rejected."""
        path = tmp_path / "bad.npz"
        np.savez_compressed(path, other=np.zeros(3))
        with pytest.raises(ValueError):
            load_heightfield(path)

    def test_non_finite_heights(self, tmp_path) -> None:
        """Files holding NaN heights are rejected."""
        path = tmp_path / "nan.npz"
        heights = np.zeros((4, 4))
        heights[1, 1] = np.nan
        np.savez_compressed(path, heights=heights)
        with pytest.raises(ValueError):
            load_heightfield(path)
