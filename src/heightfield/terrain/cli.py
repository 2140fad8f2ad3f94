"""Command-line interface for heightfield generation."""

import argparse
import logging
import time
from pathlib import Path


def main() -> None:
    """CLI entry point for heightfield generation."""
    parser = argparse.ArgumentParser(
        description="Generate an eroded procedural heightfield"
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="TOML config file (optional)"
    )
    parser.add_argument(
        "--size", type=int, default=None, help="Grid size (default: 128)"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed (default: current time)"
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Number of erosion droplets (default: 150)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/heightfield.npz",
        help="Output path (default: saves/heightfield.npz)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args()

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Import here to avoid slow startup for --help
    from .config import TerrainConfig, load_config
    from .generator import generate_and_save

    overrides: dict = {}
    if args.size is not None:
        overrides["size"] = args.size
    if args.seed is not None:
        overrides["seed"] = args.seed

    wall_clock_seed = time.time_ns() % 2**31
    if args.config:
        config = load_config(Path(args.config), overrides, default_seed=wall_clock_seed)
    else:
        overrides.setdefault("seed", wall_clock_seed)
        config = TerrainConfig(**overrides)

    if args.iterations is not None:
        erosion = config.erosion.model_copy(update={"iterations": args.iterations})
        config = config.model_copy(update={"erosion": erosion})

    output_path = Path(args.output)

    print(f"Generating {config.size}x{config.size} heightfield with seed {config.seed}")
    print(f"Output: {output_path}")
    print()

    start_time = time.time()
    result = generate_and_save(config, output_path)
    gen_time = time.time() - start_time

    print()
    print(f"Generation complete in {gen_time:.1f}s")
    print(
        f"Droplets: {result.erosion.droplets}, "
        f"pits {result.initial_stats.pit_count} -> {result.final_stats.pit_count}"
    )
    print(f"Saved to {output_path}")


if __name__ == "__main__":
    main()
