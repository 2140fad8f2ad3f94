"""Tests for heightfield generation orchestration."""

import numpy as np
import pytest

from heightfield.exceptions import ConfigurationError
from heightfield.materials import Material
from heightfield.terrain.config import ErosionConfig, NoiseConfig, TerrainConfig
from heightfield.terrain.generator import (
    generate_and_save,
    generate_heightmap,
    generate_terrain,
)
from heightfield.terrain.noise import fractal_noise, gradient_noise
from heightfield.terrain.persistence import load_heightfield


class TestGenerateHeightmap:
    """Tests for the noise heightmap pass."""

    def test_output_shape(self, small_config: TerrainConfig) -> None:
        """Grid has the configured size."""
        grid = generate_heightmap(small_config)
        assert grid.shape == (32, 32)

    def test_deterministic(self, small_config: TerrainConfig) -> None:
        """Same seed produces identical heightmaps."""
        grid1 = generate_heightmap(small_config)
        grid2 = generate_heightmap(small_config)
        np.testing.assert_array_equal(grid1.to_array(), grid2.to_array())

    def test_different_seed_different_output(self) -> None:
        """Different seeds give different terrain."""
        grid1 = generate_heightmap(TerrainConfig(seed=1, size=24))
        grid2 = generate_heightmap(TerrainConfig(seed=2, size=24))
        assert not np.allclose(grid1.to_array(), grid2.to_array())

    def test_heights_within_scale(self, small_config: TerrainConfig) -> None:
        """Heights lie in [0, height_scale]."""
        heights = generate_heightmap(small_config).to_array()
        assert heights.min() >= 0.0
        assert heights.max() <= small_config.height_scale + 1e-9

    def test_cell_formula(self) -> None:
        """A cell blends remapped fractal noise with a ridge sample."""
        config = TerrainConfig(seed=3, size=16, height_scale=10.0)
        grid = generate_heightmap(config)

        x, z = 5, 9
        nx, nz = x / 16, z / 16
        base = fractal_noise(nx * 4, nz * 4, 6, 0.5, 2.0, seed=3) * 0.5 + 0.5
        ridge = abs(gradient_noise(nx * 2, nz * 2, seed=1003))
        expected = (base * 0.7 + ridge * 0.3) * 10.0

        assert grid.get(x, z) == pytest.approx(expected)

    def test_zero_ridge_weight(self) -> None:
        """Without ridges the heightmap is pure remapped fBm."""
        config = TerrainConfig(
            seed=3, size=8, height_scale=1.0, noise=NoiseConfig(ridge_weight=0.0)
        )
        grid = generate_heightmap(config)
        expected = fractal_noise(2 / 8 * 4, 6 / 8 * 4, 6, 0.5, 2.0, seed=3) * 0.5 + 0.5
        assert grid.get(2, 6) == pytest.approx(expected)

    def test_progress_callback_rows(self) -> None:
        """Progress fires every interval rows and on the last row."""
        calls: list[tuple[int, int]] = []
        config = TerrainConfig(seed=1, size=20, progress_interval=5)
        generate_heightmap(config, on_progress=lambda done, total: calls.append((done, total)))
        assert calls == [(5, 20), (10, 20), (15, 20), (20, 20)]

    @pytest.mark.parametrize(
        "config",
        [
            TerrainConfig(seed=1, size=0),
            TerrainConfig(seed=1, size=8, noise=NoiseConfig(octaves=0)),
            TerrainConfig(seed=1, size=8, height_scale=float("nan")),
        ],
    )
    def test_invalid_config_rejected(self, config: TerrainConfig) -> None:
        """Invalid configs fail before any work is done."""
        with pytest.raises(ConfigurationError):
            generate_heightmap(config)


class TestGenerateTerrain:
    """Tests for the full noise + erosion pipeline."""

    def test_result_contents(self, small_config: TerrainConfig) -> None:
        """Result carries the grid, stats and config."""
        result = generate_terrain(small_config)
        assert result.grid.shape == (32, 32)
        assert result.config is small_config
        assert result.erosion.droplets == 20
        assert result.final_stats.total == pytest.approx(result.grid.total())

    def test_erosion_modifies_base(self, small_config: TerrainConfig) -> None:
        """The eroded grid differs from the plain noise pass."""
        base = generate_heightmap(small_config)
        result = generate_terrain(small_config)
        assert not np.array_equal(base.to_array(), result.grid.to_array())

    def test_reproducible(self, small_config: TerrainConfig) -> None:
        """Full runs are reproducible from the seed."""
        result1 = generate_terrain(small_config)
        result2 = generate_terrain(small_config)
        np.testing.assert_array_equal(result1.grid.to_array(), result2.grid.to_array())

    def test_classifier_uses_water_level(self, small_config: TerrainConfig) -> None:
        """The result's classifier follows the configured water level."""
        result = generate_terrain(small_config)
        assert result.classify(small_config.water_level) == Material.GRASS
        assert result.classify(small_config.water_level + 100) == Material.ROCK

    def test_invalid_erosion_config(self) -> None:
        """Erosion settings are validated up front."""
        config = TerrainConfig(seed=1, size=16, erosion=ErosionConfig(radius=-2))
        with pytest.raises(ConfigurationError):
            generate_terrain(config)

    def test_zero_amplitude_sum_rejected(self) -> None:
        """Noise settings that would produce NaN heights fail up front."""
        config = TerrainConfig(
            seed=1,
            size=16,
            noise=NoiseConfig(octaves=2, persistence=-1.0),
            erosion=ErosionConfig(iterations=3),
        )
        with pytest.raises(ConfigurationError):
            generate_terrain(config)

    @pytest.mark.parametrize("seed", [1, 12345])
    def test_default_run_stays_bounded(self, seed: int) -> None:
        """A default-sized run keeps heights finite and near the noise range."""
        config = TerrainConfig(seed=seed)
        result = generate_terrain(config)
        heights = result.grid.to_array()

        assert np.all(np.isfinite(heights))
        assert heights.min() >= -config.height_scale
        assert heights.max() <= 2 * config.height_scale
        assert abs(result.final_stats.total - result.initial_stats.total) < (
            0.10 * result.initial_stats.total
        )

    def test_seeds_give_distinct_base_terrain(self) -> None:
        """Seeds that agree in their low bits still differ."""
        result1 = generate_terrain(
            TerrainConfig(seed=1, size=32, erosion=ErosionConfig(iterations=0))
        )
        result2 = generate_terrain(
            TerrainConfig(seed=12345, size=32, erosion=ErosionConfig(iterations=0))
        )
        assert result1.initial_stats != result2.initial_stats

    def test_progress_labels_stages(self) -> None:
        """The pipeline callback names the stage it reports."""
        calls: list[tuple[str, int, int]] = []
        config = TerrainConfig(
            seed=1, size=10, progress_interval=5, erosion=ErosionConfig(iterations=10)
        )
        generate_terrain(config, on_progress=lambda *call: calls.append(call))
        assert calls == [
            ("heightmap", 5, 10),
            ("heightmap", 10, 10),
            ("erosion", 5, 10),
            ("erosion", 10, 10),
        ]


class TestGenerateAndSave:
    """Tests for generation with persistence."""

    def test_saves_heights_and_materials(self, tmp_path, small_config: TerrainConfig) -> None:
        """Saved file round-trips the eroded grid."""
        path = tmp_path / "out" / "terrain.npz"
        result = generate_and_save(small_config, path)

        grid, materials, metadata = load_heightfield(path)
        np.testing.assert_array_equal(grid.to_array(), result.grid.to_array())
        assert materials is not None
        assert materials.shape == (32, 32)
        assert metadata["seed"] == 42
