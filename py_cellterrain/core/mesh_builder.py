"""
Mesh triangulation for regions.

Walks every 2x2 block of a region's point grid and emits flat-coloured faces.
Blocks on a region border are shared with the neighbouring region; only the
region owning the block's lowest-valued corner emits it, so two regions built
independently never both draw the same block.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..config.terrain_settings import TerrainSettings
from ..utils.interpolation import clamp
from .height_synthesis import HeightField
from .region_discovery import Region
from .sector import RegionProfile
from .sparse_grid import WorldPosition
from .topology import TopologyUtil
from .worley_noise import PointData

logger = structlog.get_logger()

Color = Tuple[float, float, float, float]
Vertex = Tuple[float, float, float]

GROUND_COLOR: Color = (0.25, 0.55, 0.2, 1.0)
ROCK_COLOR: Color = (0.5, 0.5, 0.5, 1.0)
WATER_COLOR: Color = (0.0, 0.5, 1.0, 0.5)

# Block corners in winding order: bottom left, top left, top right, bottom right
CORNER_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, 0), (0, 1), (1, 1), (1, 0))

# A sloped block is one face over its four corners, fanned from the first corner
RAMP_FAN: Tuple[int, ...] = (0, 1, 2, 0, 2, 3)


@dataclass
class MeshBuffers:
    """Parallel vertex, colour and triangle index lists for one region."""

    root: WorldPosition = (0.0, 0.0)
    vertices: List[Vertex] = field(default_factory=list)
    colors: List[Color] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    quad_count: int = 0

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.indices) // 3

    @property
    def is_empty(self) -> bool:
        return not self.indices

    def add_face(self, vertices: Sequence[Vertex], color: Color, triangles: Sequence[int]) -> None:
        """Append a face; ``triangles`` index into ``vertices``."""
        offset = len(self.vertices)
        self.vertices.extend(vertices)
        self.colors.extend([color] * len(vertices))
        self.indices.extend(offset + i for i in triangles)

    def to_numpy(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Vertices (n, 3), colours (n, 4) and indices (m,) as numpy arrays."""
        vertices = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        colors = np.asarray(self.colors, dtype=np.float32).reshape(-1, 4)
        indices = np.asarray(self.indices, dtype=np.int32)
        return vertices, colors, indices


class MeshBuilder:
    """Builds terrain and water meshes from region point and height grids."""

    def __init__(self, topology: TopologyUtil, settings: Optional[TerrainSettings] = None):
        self.topology = topology
        self.settings = settings or topology.settings

    def _block_corners(self, region: Region, x: int, z: int) -> List[Tuple[Tuple[int, int], PointData]]:
        corners = []
        for dx, dz in CORNER_OFFSETS:
            point = region.points.item_at(x + dx, z + dz)
            if point is not None:
                corners.append(((x + dx, z + dz), point))
        return corners

    def owns_block(self, points: Sequence[PointData], grouping: float) -> bool:
        """Whether the lowest-valued corner belongs to this region's grouping."""
        lowest = min(points, key=lambda point: (point.current_cell_value, point.current_cell_index))
        return self.topology.cell_grouping(lowest.current_cell_index) == grouping

    def block_color(
        self,
        points: Sequence[PointData],
        heights: Sequence[float],
        profile: Optional[RegionProfile],
    ) -> Color:
        if max(heights) - min(heights) > self.settings.cliff_threshold:
            return ROCK_COLOR

        base = ROCK_COLOR if profile is not None and profile.is_rocky else GROUND_COLOR

        owner = min(points, key=lambda point: (point.current_cell_value, point.current_cell_index))
        darken = 1.0 - clamp(owner.distance2_edge * self.settings.edge_darkening, 0.0, 1.0)
        return (base[0] * darken, base[1] * darken, base[2] * darken, base[3])

    def build_terrain(
        self, region: Region, heights: HeightField, profile: Optional[RegionProfile] = None
    ) -> MeshBuffers:
        """
        Triangulate a region.

        Args:
            region: Discovered region
            heights: Heights aligned with the region's points
            profile: Region classification, used for colouring

        Returns:
            MeshBuffers with region-local vertices
        """
        mesh = MeshBuffers(root=region.root)
        size = region.points.item_world_size

        for x in range(region.width - 1):
            for z in range(region.width - 1):
                corners = self._block_corners(region, x, z)
                if len(corners) < 3:
                    continue

                points = [point for _, point in corners]
                if not self.owns_block(points, region.grouping):
                    continue

                corner_heights = [heights.height_at_grid(gx, gz) for (gx, gz), _ in corners]
                vertices = [
                    (gx * size, height, gz * size)
                    for ((gx, gz), _), height in zip(corners, corner_heights)
                ]
                color = self.block_color(points, corner_heights, profile)

                if len(corners) == 3:
                    mesh.add_face(vertices, color, (0, 1, 2))
                    continue

                mesh.add_face(vertices, color, self._split_block(points, corner_heights))
                mesh.quad_count += 1

        logger.debug(
            "Terrain mesh built",
            cell_index=region.start_cell.index,
            vertices=mesh.vertex_count,
            faces=mesh.face_count,
            quads=mesh.quad_count,
        )
        return mesh

    def _split_block(self, points: Sequence[PointData], heights: Sequence[float]) -> Tuple[int, ...]:
        """
        Triangle indices for a four corner block.

        Flat blocks split along the diagonal joining the lower corner pair.
        Blocks touching a sloped edge are emitted as a single 4-vertex face:
        the fixed RAMP_FAN, which does not depend on corner heights.
        """
        if any(self.topology.edge_is_sloped(point) for point in points):
            return RAMP_FAN

        bl, tl, tr, br = heights
        if bl + tr <= tl + br:
            return (0, 1, 2, 0, 2, 3)
        return (0, 1, 3, 1, 2, 3)

    def build_water(self, region: Region, profile: RegionProfile) -> MeshBuffers:
        """
        Flat water surface over every fully set block of a region.

        Args:
            region: Discovered region
            profile: Region classification providing the master cell

        Returns:
            MeshBuffers with region-local vertices one unit below the
            master cell's base height
        """
        mesh = MeshBuffers(root=region.root)
        size = region.points.item_world_size
        water_height = self.topology.cell_height(profile.master_cell.index) - 1

        for x in range(region.width - 1):
            for z in range(region.width - 1):
                if len(self._block_corners(region, x, z)) < 4:
                    continue

                vertices = [((x + dx) * size, water_height, (z + dz) * size) for dx, dz in CORNER_OFFSETS]
                mesh.add_face(vertices, WATER_COLOR, (0, 1, 2, 0, 2, 3))
                mesh.quad_count += 1

        logger.debug(
            "Water mesh built",
            cell_index=region.start_cell.index,
            quads=mesh.quad_count,
        )
        return mesh
