"""
Height synthesis for discovered regions.

Every point starts at its cell's flat base height. Points on a sloped
boundary are ramped towards the midpoint between the two cells, and the own
points of lake regions are pushed down by their distance from the shore.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from ..config.terrain_settings import TerrainSettings
from ..utils.interpolation import clamp, lerp, smoothstep, unlerp
from .region_discovery import Region
from .sector import RegionProfile
from .sparse_grid import WorldPosition
from .topology import TopologyUtil
from .worley_noise import PointData

logger = structlog.get_logger()


@dataclass
class HeightField:
    """
    Heights index-aligned with a region's point storage.

    ``presence`` mirrors the region's point presence; heights of unset slots
    are 0 and must not be read as data.
    """

    heights: np.ndarray
    presence: np.ndarray
    width: int
    root: WorldPosition
    item_world_size: float = 1

    def height_at(self, world_position: WorldPosition) -> Optional[float]:
        """Height at a world position, or None outside the region."""
        gx = int(round((world_position[0] - self.root[0]) / self.item_world_size))
        gz = int(round((world_position[1] - self.root[1]) / self.item_world_size))
        return self.height_at_grid(gx, gz)

    def height_at_grid(self, gx: int, gz: int) -> Optional[float]:
        if not (0 <= gx < self.width and 0 <= gz < self.width):
            return None
        index = gz * self.width + gx
        if not self.presence[index]:
            return None
        return float(self.heights[index])

    @property
    def min_height(self) -> float:
        return float(self.heights[self.presence].min())

    @property
    def max_height(self) -> float:
        return float(self.heights[self.presence].max())


class HeightSynthesis:
    """Per-point elevation with slopes and lake depressions."""

    def __init__(self, topology: TopologyUtil, settings: Optional[TerrainSettings] = None):
        self.topology = topology
        self.settings = settings or topology.settings

    def synthesize(self, region: Region, profile: Optional[RegionProfile] = None) -> HeightField:
        """
        Compute the height of every point in a region.

        Args:
            region: Discovered region
            profile: Region classification; lakes are only carved when given

        Returns:
            HeightField aligned with ``region.points``
        """
        points = region.points
        is_lake = profile is not None and profile.is_lake

        heights = np.zeros(len(points), dtype=np.float64)
        presence = points.presence.copy()

        for index in np.flatnonzero(presence):
            point = points.backing[index]
            heights[index] = self.point_height(point, region.grouping, is_lake)

        field = HeightField(
            heights=heights,
            presence=presence,
            width=points.width,
            root=points.root,
            item_world_size=points.item_world_size,
        )

        if presence.any():
            logger.debug(
                "Heights synthesized",
                cell_index=region.start_cell.index,
                lake=is_lake,
                min_height=field.min_height,
                max_height=field.max_height,
            )
        return field

    def point_height(self, point: PointData, region_grouping: float, is_lake: bool = False) -> float:
        topology = self.topology
        base_height = topology.cell_height(point.current_cell_index)

        if is_lake and point.cell_grouping == region_grouping:
            return self.lake_height(point, base_height)

        if point.adjacent_cell is None or not topology.edge_is_sloped(point):
            return base_height

        current_group = topology.cell_height_group(point.current_cell_index)
        adjacent_group = topology.cell_height_group(point.adjacent_cell.index)
        if current_group == adjacent_group:
            return base_height

        adjacent_height = topology.cell_height(point.adjacent_cell.index)
        return self.slope_height(point.distance2_edge, base_height, adjacent_height,
                                 current_group, adjacent_group)

    def lake_height(self, point: PointData, base_height: float) -> float:
        """Shallow near the shore, full depth towards the interior."""
        if point.adjacent_cell is None:
            return base_height - self.settings.lake_depth
        depth = clamp(point.distance2_edge - self.settings.lake_margin, 0.0, 1.0)
        return base_height - depth * self.settings.lake_depth

    def slope_height(
        self,
        distance2_edge: float,
        current_height: float,
        adjacent_height: float,
        current_group: int,
        adjacent_group: int,
    ) -> float:
        """
        Interpolate from the boundary midpoint up or down to the cell's height.

        Ramps get longer for bigger height group differences. The first half
        of the ramp is linear, the second half eases out.
        """
        group_difference = clamp(abs(current_group - adjacent_group), 1, self.settings.height_level_count)
        slope_length = self.settings.slope_length * group_difference

        if distance2_edge < slope_length / 2:
            interpolator = unlerp(0, slope_length, distance2_edge)
        else:
            interpolator = smoothstep(0, slope_length, distance2_edge)

        halfway = (current_height + adjacent_height) / 2
        return lerp(halfway, current_height, clamp(interpolator, 0.0, 1.0))
