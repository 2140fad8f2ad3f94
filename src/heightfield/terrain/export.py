"""Hand-off of a finished heightfield to an external terrain writer.

The writer decides voxel resolution, coordinate scaling and output format.
This module only streams (height, material) pairs for a rectangular region.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ExportError
from ..materials import Material
from .classification import Classifier
from .grid import HeightGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """Rectangular block of cells starting at (x, z)."""

    x: int
    z: int
    width: int
    depth: int

    def contains(self, x: int, z: int) -> bool:
        return self.x <= x < self.x + self.width and self.z <= z < self.z + self.depth


@dataclass(frozen=True)
class TerrainCell:
    """Height and surface material of one exported cell."""

    x: int
    z: int
    height: float
    material: Material


class TerrainWriter(Protocol):
    """External collaborator that turns cells into engine terrain."""

    def write_region(self, region: Region, cells: Iterable[TerrainCell]) -> None:
        ...


class ArrayTerrainWriter:
    """Writer that collects exported cells into dense arrays.

    Arrays are indexed ``[x - region.x, z - region.z]``.
    """

    def __init__(self) -> None:
        self.region: Region | None = None
        self.heights: NDArray[np.float64] | None = None
        self.materials: NDArray[np.uint8] | None = None

    def write_region(self, region: Region, cells: Iterable[TerrainCell]) -> None:
        heights = np.zeros((region.width, region.depth), dtype=np.float64)
        materials = np.zeros((region.width, region.depth), dtype=np.uint8)
        for cell in cells:
            heights[cell.x - region.x, cell.z - region.z] = cell.height
            materials[cell.x - region.x, cell.z - region.z] = cell.material.code
        self.region = region
        self.heights = heights
        self.materials = materials


def full_region(grid: HeightGrid) -> Region:
    """Region covering the whole grid."""
    return Region(x=0, z=0, width=grid.size, depth=grid.size)


def iter_cells(
    heights: NDArray[np.float64],
    region: Region,
    classify: Classifier,
) -> Iterator[TerrainCell]:
    """Yield classified cells of a region in row-major (x, then z) order."""
    for x in range(region.x, region.x + region.width):
        for z in range(region.z, region.z + region.depth):
            height = float(heights[x, z])
            yield TerrainCell(x=x, z=z, height=height, material=classify(height))


def export_heightfield(
    grid: HeightGrid,
    classify: Classifier,
    writer: TerrainWriter,
    region: Region | None = None,
) -> Region:
    """Stream a region of the grid to a terrain writer.

    The writer reads a private snapshot of the heights, so a writer that
    fails part way leaves the grid untouched.

    Args:
        grid: Finished heightfield.
        classify: Height to material rule, e.g. from ``make_classifier``.
        writer: Destination for the cells.
        region: Block to export (default: the whole grid).

    Returns:
        The exported region.

    Raises:
        ValueError: If the region does not lie inside the grid.
        ExportError: If the writer raises.
    """
    region = region or full_region(grid)
    if (
        region.width <= 0
        or region.depth <= 0
        or not grid.in_bounds(region.x, region.z)
        or not grid.in_bounds(region.x + region.width - 1, region.z + region.depth - 1)
    ):
        raise ValueError(f"Region {region} is outside the {grid.size}x{grid.size} grid")

    snapshot = grid.to_array().copy()
    snapshot.setflags(write=False)

    logger.info(
        f"Exporting region ({region.x}, {region.z}) "
        f"{region.width}x{region.depth} to {type(writer).__name__}"
    )
    try:
        writer.write_region(region, iter_cells(snapshot, region, classify))
    except Exception as e:
        raise ExportError(f"Terrain writer failed: {e}") from e

    return region
