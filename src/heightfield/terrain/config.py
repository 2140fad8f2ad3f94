"""Terrain generation configuration models."""

import math
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigurationError


class NoiseConfig(BaseModel, frozen=True):
    """Noise parameters for the base heightmap pass."""

    octaves: int = Field(default=6, description="Number of octaves for fBm")
    persistence: float = Field(default=0.5, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    base_cycles: float = Field(
        default=4.0, description="Base noise cycles across the grid per axis"
    )
    ridge_cycles: float = Field(
        default=2.0, description="Ridge noise cycles across the grid per axis"
    )
    ridge_weight: float = Field(
        default=0.3, description="Blend weight of the ridge sample (0-1)"
    )
    ridge_seed_offset: int = Field(
        default=1000, description="Seed offset for the ridge noise"
    )


class ErosionConfig(BaseModel, frozen=True):
    """Hydraulic erosion tuning parameters."""

    iterations: int = Field(default=150, description="Number of droplets to simulate")
    radius: int = Field(default=3, description="Erosion kernel radius in cells")
    inertia: float = Field(
        default=0.3, description="Weight of previous direction vs. gradient (0-1)"
    )
    sediment_capacity_factor: float = Field(
        default=8.0, description="Multiplier on droplet carrying capacity"
    )
    min_slope: float = Field(
        default=0.01, description="Slope floor used in the capacity formula"
    )
    evaporate_speed: float = Field(
        default=0.015, description="Fraction of water lost per step (0-1)"
    )
    deposit_speed: float = Field(
        default=0.3, description="Fraction of excess sediment dropped per step"
    )
    erode_speed: float = Field(
        default=0.3, description="Fraction of spare capacity eroded per step"
    )
    gravity: float = Field(default=4.0, description="Speed gain per unit height drop")
    max_steps: int = Field(default=128, description="Maximum lifetime of a droplet")
    min_water: float = Field(
        default=0.01, description="Droplet dies when its water falls below this"
    )


class TerrainConfig(BaseModel, frozen=True):
    """Complete heightfield generation configuration."""

    seed: int = Field(description="Random seed for reproducibility")
    size: int = Field(default=128, description="Grid edge length in cells")
    height_scale: float = Field(default=64.0, description="Height of a noise value of 1")
    water_level: float = Field(default=32.0, description="Water level for materials")

    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    erosion: ErosionConfig = Field(default_factory=ErosionConfig)

    progress_interval: int = Field(
        default=10, description="Rows/droplets between progress callbacks"
    )


def validate_noise_config(config: NoiseConfig) -> None:
    """Reject noise parameters the generator cannot use.

    Raises:
        ConfigurationError: If any parameter is out of range or non-finite.
    """
    if config.octaves < 1:
        raise ConfigurationError(f"octaves must be >= 1, got {config.octaves}")
    _require_finite(
        "noise",
        persistence=config.persistence,
        lacunarity=config.lacunarity,
        base_cycles=config.base_cycles,
        ridge_cycles=config.ridge_cycles,
        ridge_weight=config.ridge_weight,
    )
    if config.persistence <= 0.0:
        raise ConfigurationError(f"persistence must be > 0, got {config.persistence}")
    if config.lacunarity <= 0.0:
        raise ConfigurationError(f"lacunarity must be > 0, got {config.lacunarity}")
    if not 0.0 <= config.ridge_weight <= 1.0:
        raise ConfigurationError(
            f"ridge_weight must be in [0, 1], got {config.ridge_weight}"
        )


def validate_erosion_config(config: ErosionConfig) -> None:
    """Reject erosion parameters before any droplet runs.

    Raises:
        ConfigurationError: If any parameter is out of range or non-finite.
    """
    if config.iterations < 0:
        raise ConfigurationError(f"iterations must be >= 0, got {config.iterations}")
    if config.radius < 0:
        raise ConfigurationError(f"radius must be >= 0, got {config.radius}")
    if config.max_steps < 1:
        raise ConfigurationError(f"max_steps must be >= 1, got {config.max_steps}")
    _require_finite(
        "erosion",
        inertia=config.inertia,
        sediment_capacity_factor=config.sediment_capacity_factor,
        min_slope=config.min_slope,
        evaporate_speed=config.evaporate_speed,
        deposit_speed=config.deposit_speed,
        erode_speed=config.erode_speed,
        gravity=config.gravity,
        min_water=config.min_water,
    )
    if not 0.0 <= config.inertia <= 1.0:
        raise ConfigurationError(f"inertia must be in [0, 1], got {config.inertia}")
    if not 0.0 <= config.evaporate_speed <= 1.0:
        raise ConfigurationError(
            f"evaporate_speed must be in [0, 1], got {config.evaporate_speed}"
        )


def validate_config(config: TerrainConfig) -> None:
    """Validate a complete terrain configuration.

    Raises:
        ConfigurationError: If the configuration cannot produce a terrain.
    """
    if config.size <= 0:
        raise ConfigurationError(f"size must be > 0, got {config.size}")
    if config.progress_interval < 1:
        raise ConfigurationError(
            f"progress_interval must be >= 1, got {config.progress_interval}"
        )
    _require_finite(
        "terrain",
        height_scale=config.height_scale,
        water_level=config.water_level,
    )
    validate_noise_config(config.noise)
    validate_erosion_config(config.erosion)


def _require_finite(section: str, **values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise ConfigurationError(f"{section}.{name} must be finite, got {value}")


def load_config(
    config_path: Path,
    overrides: dict | None = None,
    default_seed: int | None = None,
) -> TerrainConfig:
    """Load and validate a terrain configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.
        overrides: Top-level fields that replace values read from the file.
        default_seed: Seed used when neither the file nor the overrides set one.

    Returns:
        Parsed and validated TerrainConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        ConfigurationError: If a field is invalid or out of range.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    if overrides:
        data.update(overrides)
    if default_seed is not None:
        data.setdefault("seed", default_seed)

    try:
        config = TerrainConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}: {e}") from e
    validate_config(config)
    return config
