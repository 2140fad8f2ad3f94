"""Heightfield persistence: save and load generated grids."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ConfigurationError
from .config import TerrainConfig
from .grid import HeightGrid

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def save_heightfield(
    path: Path,
    grid: HeightGrid,
    config: TerrainConfig,
    materials: NDArray[np.uint8] | None = None,
) -> None:
    """Save a heightfield to disk.

    Uses numpy's compressed .npz format with the generation settings
    stored as JSON metadata.

    Args:
        path: Output path (should end with .npz).
        grid: Finished height grid.
        config: Generation configuration used.
        materials: Optional material codes, same shape as the grid.
    """
    metadata = {
        "version": FORMAT_VERSION,
        "seed": config.seed,
        "size": grid.size,
        "config": config.model_dump(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    arrays = {
        "heights": grid.to_array(),
        "metadata": np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
    }
    if materials is not None:
        arrays["materials"] = materials

    np.savez_compressed(path, **arrays)

    file_size = path.stat().st_size / 1024
    logger.info(f"Saved heightfield to {path} ({file_size:.1f} KB)")


def load_heightfield(
    path: Path,
) -> tuple[HeightGrid, NDArray[np.uint8] | None, dict]:
    """Load a heightfield from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (HeightGrid, material codes or None, metadata dict).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If file format is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Heightfield file not found: {path}")

    with np.load(path) as data:
        if "heights" not in data:
            raise ValueError("Invalid heightfield file: missing 'heights' array")
        try:
            grid = HeightGrid.from_array(data["heights"])
        except ConfigurationError as e:
            raise ValueError(f"Invalid heightfield file: {e}") from e

        materials = data["materials"] if "materials" in data else None

        if "metadata" in data:
            metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
        else:
            metadata = {}

    logger.info(f"Loaded heightfield from {path}: {grid.size}x{grid.size}")
    return grid, materials, metadata
