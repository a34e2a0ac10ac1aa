#!/usr/bin/env python3
"""
Demo script processing the regions around the origin and plotting their heights.
"""

import sys

import matplotlib.pyplot as plt
import numpy as np

from py_cellterrain.config import Settings, TerrainSettings
from py_cellterrain.core import TerrainPipeline
from py_cellterrain.utils.logging import configure_logging


def main(output_path="region_demo.png"):
    """Process an area and report per-region statistics."""
    configure_logging(Settings(log_format="console", log_level="WARNING"))

    print("Cellular Terrain Region Demo")
    print("=" * 40)

    settings = TerrainSettings(seed=5678, cell_frequency=0.08)
    pipeline = TerrainPipeline(settings, max_workers=4)

    results = pipeline.process_area((0.0, 0.0), cell_radius=1)
    print(f"\nProcessed {len(results)} regions")

    xs, zs, heights = [], [], []
    for result in results:
        region = result.region
        mesh = result.terrain_mesh
        print(f"\nRegion at cell {region.start_cell.index}:")
        print(f"  Type: {result.profile.sector_type.value}")
        print(f"  Grid width: {region.width}, root: {region.root}")
        print(f"  Points: {region.point_count}")
        print(f"  Sector cells: {len(region.sector_cells)}, adjacent cells: {len(region.adjacent_cells)}")
        print(f"  Height range: {result.heights.min_height:.2f}-{result.heights.max_height:.2f}")
        print(f"  Terrain faces: {mesh.face_count}")
        if result.water_mesh is not None:
            print(f"  Water quads: {result.water_mesh.quad_count}")

        for (x, z), point in region.points.items():
            if point.cell_grouping != region.grouping:
                continue
            xs.append(x)
            zs.append(z)
            heights.append(result.heights.height_at((x, z)))

    fig, ax = plt.subplots(figsize=(8, 8))
    scatter = ax.scatter(xs, zs, c=np.asarray(heights), s=4, cmap="terrain", marker="s")
    fig.colorbar(scatter, ax=ax, label="Height")
    ax.set_aspect("equal")
    ax.set_title(f"Regions around the origin (seed {settings.seed})")
    fig.savefig(output_path, dpi=120, bbox_inches="tight")
    print(f"\nSaved plot to {output_path}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
