"""Main heightfield generation orchestration."""

import logging
from functools import partial
from pathlib import Path
from typing import Callable

import numpy as np

from .analysis import HeightfieldStats, log_stats, summarize
from .classification import Classifier, make_classifier
from .config import TerrainConfig, validate_config
from .erosion import ErosionSimulator, ErosionStats, ProgressCallback
from .export import ArrayTerrainWriter, export_heightfield
from .grid import HeightGrid
from .noise import NoiseField
from .persistence import save_heightfield

logger = logging.getLogger(__name__)

# Called with (stage, completed, total)
StageProgressCallback = Callable[[str, int, int], None]

HEIGHTMAP_STAGE = "heightmap"
EROSION_STAGE = "erosion"


class GenerationResult:
    """Result of heightfield generation with before/after statistics."""

    def __init__(
        self,
        grid: HeightGrid,
        config: TerrainConfig,
        erosion: ErosionStats,
        initial_stats: HeightfieldStats,
        final_stats: HeightfieldStats,
    ):
        self.grid = grid
        self.config = config
        self.erosion = erosion
        self.initial_stats = initial_stats
        self.final_stats = final_stats

    @property
    def classify(self) -> Classifier:
        """Material rule for the configured water level."""
        return make_classifier(self.config.water_level)


def generate_heightmap(
    config: TerrainConfig,
    on_progress: ProgressCallback | None = None,
) -> HeightGrid:
    """Fill a new grid from fractal and ridge noise.

    Each cell blends fractal noise remapped to [0, 1] with an absolute
    ridge sample at a lower frequency, then scales by ``height_scale``.

    Args:
        config: Terrain generation configuration.
        on_progress: Optional callback invoked with (rows done, rows total)
            every ``progress_interval`` rows and after the last row.

    Returns:
        Newly allocated HeightGrid.
    """
    validate_config(config)
    size = config.size
    noise_cfg = config.noise
    field = NoiseField(config.seed)
    grid = HeightGrid(size)

    logger.info(f"Generating {size}x{size} heightmap with seed {config.seed}")

    nz = np.arange(size, dtype=np.float64) / size
    for x in range(size):
        nx = np.full(size, x / size)

        height = field.sample_fractal(
            nx * noise_cfg.base_cycles,
            nz * noise_cfg.base_cycles,
            noise_cfg.octaves,
            noise_cfg.persistence,
            noise_cfg.lacunarity,
        )
        height = height * 0.5 + 0.5

        ridge = field.ridge(
            nx * noise_cfg.ridge_cycles,
            nz * noise_cfg.ridge_cycles,
            offset=noise_cfg.ridge_seed_offset,
        )
        height = height * (1.0 - noise_cfg.ridge_weight) + ridge * noise_cfg.ridge_weight

        grid.set_row(x, height * config.height_scale)

        rows_done = x + 1
        if on_progress is not None and (
            rows_done % config.progress_interval == 0 or rows_done == size
        ):
            on_progress(rows_done, size)

    return grid


def erode_heightmap(
    grid: HeightGrid,
    config: TerrainConfig,
    on_progress: ProgressCallback | None = None,
) -> ErosionStats:
    """Run hydraulic erosion over a grid in place."""
    simulator = ErosionSimulator(
        grid,
        config.erosion,
        seed=config.seed,
        progress_interval=config.progress_interval,
    )
    return simulator.run(on_progress)


def _stage_progress(
    on_progress: StageProgressCallback | None, stage: str
) -> ProgressCallback | None:
    if on_progress is None:
        return None
    return partial(on_progress, stage)


def generate_terrain(
    config: TerrainConfig,
    on_progress: StageProgressCallback | None = None,
) -> GenerationResult:
    """Generate a complete eroded heightfield from configuration.

    Args:
        config: Terrain generation configuration.
        on_progress: Optional callback invoked with (stage, completed, total),
            where stage is ``"heightmap"`` (rows) or ``"erosion"`` (droplets).

    Returns:
        GenerationResult holding the eroded grid.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    validate_config(config)

    # Stage A: Noise heightmap
    logger.info("Stage A: Generating base heightmap...")
    grid = generate_heightmap(config, _stage_progress(on_progress, HEIGHTMAP_STAGE))
    initial_stats = summarize(grid)
    log_stats("Base heightmap", initial_stats)

    # Stage B: Hydraulic erosion
    logger.info(f"Stage B: Simulating {config.erosion.iterations} erosion droplets...")
    erosion_stats = erode_heightmap(grid, config, _stage_progress(on_progress, EROSION_STAGE))
    final_stats = summarize(grid)
    log_stats("Eroded heightmap", final_stats)

    return GenerationResult(
        grid=grid,
        config=config,
        erosion=erosion_stats,
        initial_stats=initial_stats,
        final_stats=final_stats,
    )


def generate_and_save(
    config: TerrainConfig,
    save_path: Path,
    on_progress: StageProgressCallback | None = None,
) -> GenerationResult:
    """Generate terrain, classify it and save heights and materials.

    Args:
        config: Terrain generation configuration.
        save_path: Path to save the generated heightfield.
        on_progress: Optional (stage, completed, total) progress callback.

    Returns:
        GenerationResult of the run.
    """
    result = generate_terrain(config, on_progress)

    writer = ArrayTerrainWriter()
    export_heightfield(result.grid, result.classify, writer)

    save_path.parent.mkdir(parents=True, exist_ok=True)
    save_heightfield(save_path, result.grid, config, materials=writer.materials)

    return result
