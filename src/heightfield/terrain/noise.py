"""Gradient noise and fractal summation for heightmap generation.

All functions accept scalars or numpy arrays and evaluate elementwise.
Scalar inputs return a Python float.
"""

from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import ConfigurationError

# Lattice coordinates wrap every 256 cells
LATTICE_PERIOD = 256

# Seeds are reduced to a non-negative 64-bit value before seeding the table
SEED_MODULUS = 2**64


def fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Smootherstep fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> NDArray[np.float64]:
    """Linear interpolation from a to b."""
    return a + t * (b - a)


@lru_cache(maxsize=64)
def permutation_table(seed: int) -> NDArray[np.int64]:
    """Seeded shuffle of 0..255, stored twice so ``perm[perm[i] + j]`` stays in range."""
    perm = np.random.default_rng(seed % SEED_MODULUS).permutation(LATTICE_PERIOD)
    table = np.concatenate([perm, perm]).astype(np.int64)
    table.setflags(write=False)
    return table


def _lattice_hash(i: NDArray[np.int64], j: NDArray[np.int64], seed: int) -> NDArray[np.int64]:
    perm = permutation_table(seed)
    return np.asarray(perm[perm[i] + j])


def _corner_gradient(
    hash_value: NDArray[np.int64],
    x: NDArray[np.float64],
    y: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Dot product of the offset with one of four diagonal gradients."""
    h = hash_value % 4
    return np.select(
        [h == 0, h == 1, h == 2],
        [x + y, -x + y, x - y],
        default=-x - y,
    )


def _as_output(result: NDArray[np.float64]) -> NDArray[np.float64] | float:
    return float(result) if result.ndim == 0 else result


def gradient_noise(x: ArrayLike, y: ArrayLike, seed: int = 0) -> NDArray[np.float64] | float:
    """Sample 2D gradient noise.

    Args:
        x: X coordinate(s) in lattice units.
        y: Y coordinate(s) in lattice units.
        seed: Integer seed selecting the lattice permutation table.

    Returns:
        Noise value(s) in [-1, 1]. Identical inputs give identical output.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    x_floor = np.floor(x)
    y_floor = np.floor(y)
    xi = x_floor.astype(np.int64) % LATTICE_PERIOD
    yi = y_floor.astype(np.int64) % LATTICE_PERIOD
    xf = x - x_floor
    yf = y - y_floor

    u = fade(xf)
    v = fade(yf)

    aa = _lattice_hash(xi, yi, seed)
    ab = _lattice_hash(xi, yi + 1, seed)
    ba = _lattice_hash(xi + 1, yi, seed)
    bb = _lattice_hash(xi + 1, yi + 1, seed)

    x1 = lerp(_corner_gradient(aa, xf, yf), _corner_gradient(ba, xf - 1.0, yf), u)
    x2 = lerp(
        _corner_gradient(ab, xf, yf - 1.0),
        _corner_gradient(bb, xf - 1.0, yf - 1.0),
        u,
    )
    return _as_output(lerp(x1, x2, v))


def fractal_noise(
    x: ArrayLike,
    y: ArrayLike,
    octaves: int = 6,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    seed: int = 0,
) -> NDArray[np.float64] | float:
    """Sum octaves of gradient noise (fractal Brownian motion).

    Each octave doubles (by ``lacunarity``) the frequency and scales the
    amplitude by ``persistence``. Octave ``i`` (1-based) uses seed
    ``seed + i`` so octaves are uncorrelated.

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        octaves: Number of noise layers to sum.
        persistence: Amplitude multiplier between octaves.
        lacunarity: Frequency multiplier between octaves.
        seed: Base seed.

    Returns:
        Noise normalized by the amplitude sum, roughly in [-1, 1].

    Raises:
        ConfigurationError: If octaves is less than 1.
    """
    if octaves < 1:
        raise ConfigurationError(f"octaves must be >= 1, got {octaves}")

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
    frequency = 1.0
    amplitude = 1.0
    max_amplitude = 0.0

    for i in range(1, octaves + 1):
        total += gradient_noise(x * frequency, y * frequency, seed + i) * amplitude
        max_amplitude += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return _as_output(total / max_amplitude)


@dataclass(frozen=True)
class NoiseField:
    """Gradient noise source bound to a seed."""

    seed: int

    def sample(self, x: ArrayLike, y: ArrayLike, offset: int = 0) -> NDArray[np.float64] | float:
        """Gradient noise at (x, y) using ``seed + offset``."""
        return gradient_noise(x, y, self.seed + offset)

    def sample_fractal(
        self,
        x: ArrayLike,
        y: ArrayLike,
        octaves: int,
        persistence: float,
        lacunarity: float,
    ) -> NDArray[np.float64] | float:
        """Fractal noise at (x, y) using the bound seed."""
        return fractal_noise(x, y, octaves, persistence, lacunarity, self.seed)

    def ridge(self, x: ArrayLike, y: ArrayLike, offset: int = 0) -> NDArray[np.float64] | float:
        """Absolute gradient noise in [0, 1], sharp at zero crossings."""
        return np.abs(self.sample(x, y, offset))
