#!/usr/bin/env python3
"""
Generate sample region maps in every display mode.

This runs the full pipeline:
1. Random region points
2. Nearest-region cell allocation
3. MegaRegion clustering, spines and spine distances
4. Colouring and PNG output

Usage:
    python generate_sample_regions.py [seed]

If no seed is provided, defaults to "default_seed"
"""

import sys
from pathlib import Path

from py_regionmap.config import settings
from py_regionmap.core import DisplayMode, GenerationConfig, RegionMapError, generate
from py_regionmap.export import save_png
from py_regionmap.log_config import configure_logging


def create_sample_map(mode, width=255, height=255, density=40, seed="default"):
    """Generate one map and save it under the output directory."""

    print(f"\nGenerating {mode.value} map...")
    print(f"  Dimensions: {width}x{height}")
    print(f"  Regions: {density}")
    print(f"  Seed: {seed}")

    config = GenerationConfig(
        width=width,
        height=height,
        density=density,
        use_clusters=mode.shows_clusters,
        cluster_threshold=(10, 45),
        display_mode=mode,
        show_markers=True,
        marker_size=3,
        show_spine_lines=mode is DisplayMode.CLUSTER_SOLID,
        seed=seed,
    )
    result = generate(config, progress=lambda label: print(f"  {label}"))

    clustered = sum(len(c.member_regions) for c in result.clusters)
    print(f"     {len(result.regions)} regions, {len(result.clusters)} MegaRegions "
          f"({clustered} regions clustered)")

    output_file = Path(settings.output_dir) / f"regions_{mode.value}_{seed}.png"
    save_png(result.buffer, output_file)
    print(f"  Saved to: {output_file}")
    return result


def main():
    """Generate a sample map per display mode."""

    seed = sys.argv[1] if len(sys.argv) > 1 else "default_seed"
    configure_logging()

    print("Generating region maps")
    print(f"Using seed: {seed}")
    print("=" * 60)

    for mode in DisplayMode:
        try:
            create_sample_map(mode, seed=seed)
        except RegionMapError as e:
            print(f"  ERROR generating {mode.value}: {e}")

    print("\n" + "=" * 60)
    print("All maps generated.")


if __name__ == "__main__":
    main()
