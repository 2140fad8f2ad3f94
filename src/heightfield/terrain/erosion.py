"""Particle-based hydraulic erosion.

Droplets are spawned at random interior positions and follow the terrain
downhill, eroding material where they can carry more sediment and depositing
it where they slow down or climb. Droplets run strictly one after another:
each one reads every change made by the droplets before it, so the loop must
not be parallelized.
"""

import math
import warnings
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import numpy as np
import structlog

from ..exceptions import ConfigurationError, NumericDegeneracyWarning
from .config import ErosionConfig, validate_erosion_config
from .grid import HeightGrid

logger = structlog.get_logger()

# Deposits spread over the 3x3 block with a fixed falloff and scale
DEPOSIT_RADIUS = 1
DEPOSIT_FALLOFF = 2.0
DEPOSIT_SCALE = 0.25

# (dx, dz, weight) offsets around the droplet cell
Kernel = tuple[tuple[int, int, float], ...]

# Called with (completed, total)
ProgressCallback = Callable[[int, int], None]


class TerminationReason(str, Enum):
    """Why a droplet stopped."""

    LEFT_INTERIOR = "left_interior"
    EVAPORATED = "evaporated"
    MAX_STEPS = "max_steps"


@dataclass
class DropletResult:
    """Outcome of a single droplet simulation."""

    start: tuple[float, float]
    path: list[tuple[float, float]]
    steps: int
    reason: TerminationReason
    eroded: float = 0.0
    deposited: float = 0.0
    sediment: float = 0.0
    stalled_steps: int = 0


@dataclass
class ErosionStats:
    """Aggregate statistics for an erosion run."""

    droplets: int = 0
    steps: int = 0
    eroded: float = 0.0
    deposited: float = 0.0
    stalled_steps: int = 0
    terminations: Counter = field(default_factory=Counter)

    def record(self, result: DropletResult) -> None:
        self.droplets += 1
        self.steps += result.steps
        self.eroded += result.eroded
        self.deposited += result.deposited
        self.stalled_steps += result.stalled_steps
        self.terminations[result.reason] += 1


def deposit_kernel() -> Kernel:
    """Weights for spreading a deposit over the 3x3 neighborhood.

    Each cell receives ``weight * 0.25`` of the deposit. The weights are not
    renormalized, so the mass written differs from the nominal deposit.
    """
    offsets = []
    for dx in range(-DEPOSIT_RADIUS, DEPOSIT_RADIUS + 1):
        for dz in range(-DEPOSIT_RADIUS, DEPOSIT_RADIUS + 1):
            dist = math.sqrt(dx * dx + dz * dz)
            weight = max(0.0, 1.0 - dist / DEPOSIT_FALLOFF)
            offsets.append((dx, dz, weight * DEPOSIT_SCALE))
    return tuple(offsets)


def erosion_kernel(radius: int) -> Kernel:
    """Linear falloff weights for cells within ``radius``, summing to 1.

    Raw weights are ``1 - dist / radius``; zero-weight cells on the rim are
    omitted and the rest are divided by their sum, so a droplet removes
    exactly the amount it picks up. A radius of 0 erodes only the centre.
    """
    if radius < 0:
        raise ConfigurationError(f"Erosion radius must be >= 0, got {radius}")
    if radius == 0:
        return ((0, 0, 1.0),)

    offsets = []
    for dx in range(-radius, radius + 1):
        for dz in range(-radius, radius + 1):
            dist = math.sqrt(dx * dx + dz * dz)
            weight = 1.0 - dist / radius
            if weight > 0.0:
                offsets.append((dx, dz, weight))

    weight_sum = sum(weight for _, _, weight in offsets)
    return tuple((dx, dz, weight / weight_sum) for dx, dz, weight in offsets)


def apply_kernel(grid: HeightGrid, ix: int, iz: int, kernel: Kernel, amount: float) -> None:
    """Add ``amount * weight`` to each kernel cell around (ix, iz)."""
    for dx, dz, weight in kernel:
        grid.add(ix + dx, iz + dz, amount * weight)


class ErosionSimulator:
    """Runs hydraulic erosion droplets over a HeightGrid in place.

    Usage:
        grid = HeightGrid(128)
        simulator = ErosionSimulator(grid, ErosionConfig(), seed=42)
        stats = simulator.run()
    """

    def __init__(
        self,
        grid: HeightGrid,
        config: ErosionConfig,
        seed: int,
        progress_interval: int = 10,
    ):
        validate_erosion_config(config)
        if not np.all(np.isfinite(grid.to_array())):
            raise ConfigurationError("Grid contains non-finite heights")
        if progress_interval < 1:
            raise ConfigurationError(
                f"progress_interval must be >= 1, got {progress_interval}"
            )

        self.grid = grid
        self.config = config
        self.seed = seed
        self.progress_interval = progress_interval

        self._rng = np.random.default_rng(seed)
        self._deposit_kernel = deposit_kernel()
        self._erosion_kernel = erosion_kernel(config.radius)

    def spawn_position(self) -> tuple[float, float]:
        """Draw a uniformly random interior spawn point."""
        high = self.grid.size - 2
        x = float(self._rng.uniform(1, high))
        z = float(self._rng.uniform(1, high))
        return x, z

    def _outside_interior(self, x: float, z: float) -> bool:
        limit = self.grid.size - 1
        return x < 1 or x >= limit or z < 1 or z >= limit

    def simulate_droplet(self, x: float, z: float) -> DropletResult:
        """Simulate one droplet from (x, z) until it terminates.

        Args:
            x: Spawn x coordinate.
            z: Spawn z coordinate.

        Returns:
            DropletResult with the visited interior positions.
        """
        cfg = self.config
        grid = self.grid

        dir_x = 0.0
        dir_z = 0.0
        speed = 1.0
        water = 1.0
        sediment = 0.0

        result = DropletResult(
            start=(x, z), path=[], steps=0, reason=TerminationReason.MAX_STEPS
        )

        for _ in range(cfg.max_steps):
            old_x, old_z = x, z
            result.steps += 1

            grad_x, grad_z = grid.gradient(x, z)
            dir_x = dir_x * cfg.inertia - grad_x * (1 - cfg.inertia)
            dir_z = dir_z * cfg.inertia - grad_z * (1 - cfg.inertia)

            length = math.sqrt(dir_x * dir_x + dir_z * dir_z)
            if length != 0:
                dir_x /= length
                dir_z /= length
            else:
                result.stalled_steps += 1

            x += dir_x
            z += dir_z

            if self._outside_interior(x, z):
                result.reason = TerminationReason.LEFT_INTERIOR
                break
            result.path.append((x, z))

            delta_height = grid.get_smooth(x, z) - grid.get_smooth(old_x, old_z)
            capacity = (
                max(-delta_height, cfg.min_slope)
                * speed
                * water
                * cfg.sediment_capacity_factor
            )

            ix = math.floor(x)
            iz = math.floor(z)
            if sediment > capacity or delta_height > 0:
                if delta_height > 0:
                    deposit = min(delta_height, sediment)
                else:
                    deposit = min(sediment, (sediment - capacity) * cfg.deposit_speed)
                sediment -= deposit
                apply_kernel(grid, ix, iz, self._deposit_kernel, deposit)
                result.deposited += deposit
            else:
                erode = min((capacity - sediment) * cfg.erode_speed, -delta_height)
                apply_kernel(grid, ix, iz, self._erosion_kernel, -erode)
                sediment += erode
                result.eroded += erode

            speed = math.sqrt(max(0.0, speed * speed + delta_height * cfg.gravity))
            water *= 1 - cfg.evaporate_speed

            if water < cfg.min_water:
                result.reason = TerminationReason.EVAPORATED
                break

        result.sediment = sediment
        logger.debug(
            "droplet_terminated",
            reason=result.reason.value,
            steps=result.steps,
            x=round(x, 3),
            z=round(z, 3),
        )
        return result

    def run(self, on_progress: ProgressCallback | None = None) -> ErosionStats:
        """Simulate ``config.iterations`` droplets in sequence.

        Args:
            on_progress: Optional callback invoked with (completed, total)
                every ``progress_interval`` droplets and after the last one.

        Returns:
            ErosionStats for the run.
        """
        total = self.config.iterations
        stats = ErosionStats()

        logger.info(
            "erosion_started",
            droplets=total,
            grid_size=self.grid.size,
            radius=self.config.radius,
            seed=self.seed,
        )

        if self.grid.size < 3:
            # No interior cells to spawn in
            logger.warning("erosion_skipped_no_interior", grid_size=self.grid.size)
            total = 0

        for i in range(total):
            x, z = self.spawn_position()
            stats.record(self.simulate_droplet(x, z))

            completed = i + 1
            if on_progress is not None and (
                completed % self.progress_interval == 0 or completed == total
            ):
                on_progress(completed, total)

        if stats.stalled_steps:
            warnings.warn(
                f"{stats.stalled_steps} droplet steps had a zero-length direction "
                "and kept their previous heading",
                NumericDegeneracyWarning,
                stacklevel=2,
            )

        logger.info(
            "erosion_complete",
            droplets=stats.droplets,
            steps=stats.steps,
            eroded=round(stats.eroded, 4),
            deposited=round(stats.deposited, 4),
            terminations={r.value: n for r, n in stats.terminations.items()},
        )
        return stats
