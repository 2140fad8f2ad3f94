"""Dense square elevation grid with bounds-checked access."""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import ConfigurationError

# Offset used by the finite-difference gradient estimate
GRADIENT_STEP = 0.5


class HeightGrid:
    """Mutable ``size x size`` elevation surface indexed ``[x, z]``.

    Reads outside ``[0, size)`` return 0 and writes there are ignored,
    so kernels near the border never need their own bounds checks.
    The grid dimensions never change after construction.
    """

    def __init__(self, size: int, fill: float = 0.0):
        if size <= 0:
            raise ConfigurationError(f"Grid size must be > 0, got {size}")
        self._size = int(size)
        self._heights = np.full((self._size, self._size), fill, dtype=np.float64)

    @classmethod
    def from_array(cls, heights: ArrayLike) -> "HeightGrid":
        """Build a grid from a square 2D array of finite heights (copied)."""
        array = np.asarray(heights, dtype=np.float64)
        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            raise ConfigurationError(f"Height array must be square, got {array.shape}")
        if not np.all(np.isfinite(array)):
            raise ConfigurationError("Height array contains non-finite values")
        grid = cls(array.shape[0])
        grid._heights[:] = array
        return grid

    @property
    def size(self) -> int:
        return self._size

    @property
    def shape(self) -> tuple[int, int]:
        return (self._size, self._size)

    def in_bounds(self, x: int, z: int) -> bool:
        """Whether (x, z) addresses a stored cell."""
        return 0 <= x < self._size and 0 <= z < self._size

    def get(self, x: int, z: int) -> float:
        """Height at a cell, or 0 outside the grid."""
        if not self.in_bounds(x, z):
            return 0.0
        return float(self._heights[x, z])

    def set(self, x: int, z: int, height: float) -> None:
        """Store a height; no-op outside the grid."""
        if self.in_bounds(x, z):
            self._heights[x, z] = height

    def add(self, x: int, z: int, delta: float) -> None:
        """Raise (or lower) a cell by delta; no-op outside the grid."""
        if self.in_bounds(x, z):
            self._heights[x, z] += delta

    def set_row(self, x: int, heights: ArrayLike) -> None:
        """Store a full row of heights along z."""
        self._heights[x, :] = heights

    def get_smooth(self, x: float, z: float) -> float:
        """Bilinear interpolation at a continuous coordinate."""
        ix = math.floor(x)
        iz = math.floor(z)
        fx = x - ix
        fz = z - iz

        h00 = self.get(ix, iz)
        h10 = self.get(ix + 1, iz)
        h01 = self.get(ix, iz + 1)
        h11 = self.get(ix + 1, iz + 1)

        h0 = h00 + fx * (h10 - h00)
        h1 = h01 + fx * (h11 - h01)
        return h0 + fz * (h1 - h0)

    def gradient(self, x: float, z: float) -> tuple[float, float]:
        """Ascending slope (dh/dx, dh/dz) at a continuous coordinate.

        Forward differences over half a cell, scaled by 2 to a per-cell
        slope. Water flows along the negated vector.
        """
        h = self.get_smooth(x, z)
        hx = self.get_smooth(x + GRADIENT_STEP, z)
        hz = self.get_smooth(x, z + GRADIENT_STEP)
        return ((hx - h) / GRADIENT_STEP, (hz - h) / GRADIENT_STEP)

    def total(self) -> float:
        """Sum of all cell heights."""
        return float(self._heights.sum())

    def copy(self) -> "HeightGrid":
        return HeightGrid.from_array(self._heights)

    def to_array(self) -> NDArray[np.float64]:
        """Read-only view of the heights, shape (size, size), indexed [x, z]."""
        view = self._heights.view()
        view.setflags(write=False)
        return view

    def __repr__(self) -> str:
        return f"HeightGrid(size={self._size})"
