"""Heightfield statistics used to report on generation and erosion."""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

from .grid import HeightGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeightfieldStats:
    """Summary statistics of a heightfield."""

    min_height: float
    max_height: float
    mean_height: float
    total: float
    pit_count: int
    mean_slope: float


def count_pits(heights: np.ndarray) -> int:
    """Count strict interior local minima (undrained pits).

    A cell is a pit when it is lower than all eight neighbours.
    Border cells are ignored.
    """
    if min(heights.shape) < 3:
        return 0

    footprint = np.ones((3, 3), dtype=bool)
    footprint[1, 1] = False
    neighbour_min = ndimage.minimum_filter(
        heights, footprint=footprint, mode="nearest"
    )
    pits = heights < neighbour_min
    return int(np.sum(pits[1:-1, 1:-1]))


def mean_slope(heights: np.ndarray) -> float:
    """Mean gradient magnitude in height units per cell."""
    if min(heights.shape) < 2:
        return 0.0
    gx, gz = np.gradient(heights)
    return float(np.mean(np.hypot(gx, gz)))


def summarize(grid: HeightGrid) -> HeightfieldStats:
    """Compute summary statistics for a grid."""
    heights = grid.to_array()
    return HeightfieldStats(
        min_height=float(heights.min()),
        max_height=float(heights.max()),
        mean_height=float(heights.mean()),
        total=float(heights.sum()),
        pit_count=count_pits(heights),
        mean_slope=mean_slope(heights),
    )


def log_stats(label: str, stats: HeightfieldStats) -> None:
    """Log heightfield statistics."""
    logger.info(
        f"{label}: height {stats.min_height:.2f}..{stats.max_height:.2f} "
        f"(mean {stats.mean_height:.2f}), pits {stats.pit_count}, "
        f"mean slope {stats.mean_slope:.3f}"
    )
