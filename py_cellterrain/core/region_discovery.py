"""
Region discovery by flood fill.

Starting inside a cell near its centroid, unit-spaced points are visited
breadth first. The fill continues through points of the start cell's
grouping and bleeds exactly one ring into foreign groupings, so every region
carries the border points needed to interpolate slopes against its neighbours.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import structlog

from ..config.terrain_settings import TerrainSettings
from .sparse_grid import SparseGrid, WorldPosition
from .topology import CellIndex, TopologyUtil
from .worley_noise import CellData, PointData, WorleyNoise

logger = structlog.get_logger()

NEIGHBOUR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (x, z) for x in (-1, 0, 1) for z in (-1, 0, 1) if (x, z) != (0, 0)
)


@dataclass
class Region:
    """
    Output of one discovery pass.

    ``points`` holds a PointData for every visited position. ``sector_cells``
    and ``adjacent_cells`` are sorted by cell value and contain no duplicates.
    """

    start_cell: CellData
    grouping: float
    points: SparseGrid
    sector_cells: List[CellData] = field(default_factory=list)
    adjacent_cells: List[CellData] = field(default_factory=list)
    seed_position: Optional[WorldPosition] = None

    @property
    def root(self) -> WorldPosition:
        return self.points.root

    @property
    def width(self) -> int:
        return self.points.width

    @property
    def point_count(self) -> int:
        return self.points.set_count

    @property
    def sector_cell_indices(self) -> frozenset:
        return frozenset(cell.index for cell in self.sector_cells)

    def point_at(self, world_position: WorldPosition) -> Optional[PointData]:
        return self.points.get(world_position)

    def iter_points(self) -> Iterator[PointData]:
        for _, point in self.points.items():
            yield point


class RegionDiscovery:
    """Iterative flood fill over the cellular field."""

    def __init__(
        self,
        worley: WorleyNoise,
        topology: Optional[TopologyUtil] = None,
        settings: Optional[TerrainSettings] = None,
    ):
        self.worley = worley
        self.topology = topology or worley.topology
        self.settings = settings or worley.settings
        self.spacing = self.settings.sample_spacing

    def _sample(self, world_position: WorldPosition) -> PointData:
        return self.worley.sample_point(world_position[0], world_position[1])

    def discover(self, cell_index: CellIndex) -> Region:
        """
        Flood fill the region containing a cell.

        Args:
            cell_index: Index of the seed cell

        Returns:
            Region with its points and classified cells
        """
        start_cell = self.worley.cell_data(cell_index)
        start_grouping = self.topology.cell_grouping(start_cell.index)
        initial = self._seed_point(start_cell).with_grouping(start_grouping)
        start_position = initial.world_position

        half_width = (self.settings.initial_grid_width // 2) * self.spacing
        points = SparseGrid(
            self.settings.initial_grid_width,
            root=(start_position[0] - half_width, start_position[1] - half_width),
            item_world_size=self.spacing,
            padding=self.settings.grid_padding,
        )
        points.set(initial, start_position)

        queue = deque([initial])
        while queue:
            point = queue.popleft()
            current_outside = point.cell_grouping != start_grouping

            px, pz = point.world_position
            for dx, dz in NEIGHBOUR_OFFSETS:
                position = (px + dx * self.spacing, pz + dz * self.spacing)
                if points.is_set(position):
                    continue

                neighbour = self._sample(position)
                grouping = self.topology.cell_grouping(neighbour.current_cell_index)
                if current_outside and grouping != start_grouping:
                    continue

                neighbour = neighbour.with_grouping(grouping)
                points.set(neighbour, position)
                queue.append(neighbour)

        sector_cells, adjacent_cells = self._classify_cells(points, start_grouping)

        logger.debug(
            "Region discovered",
            cell_index=start_cell.index,
            grouping=start_grouping,
            points=points.set_count,
            width=points.width,
            sector_cells=len(sector_cells),
            adjacent_cells=len(adjacent_cells),
        )

        return Region(
            start_cell=start_cell,
            grouping=start_grouping,
            points=points,
            sector_cells=sector_cells,
            adjacent_cells=adjacent_cells,
            seed_position=start_position,
        )

    def _seed_point(self, start_cell: CellData) -> PointData:
        """
        First sample of the fill, taken inside the start cell.

        Edge smoothing can move the centroid's sample into a neighbouring
        cell, so lattice rings around the centroid are searched for the
        nearest position whose sample belongs to the start cell. The
        centroid sample is used when no such position is within reach.
        """
        cx, cz = start_cell.position
        centroid_sample = self._sample((cx, cz))
        if centroid_sample.current_cell_index == start_cell.index:
            return centroid_sample

        cell_size = 1.0 / self.settings.cell_frequency + self.settings.cell_edge_smoothing
        max_ring = int(math.ceil(cell_size / self.spacing))
        for ring in range(1, max_ring + 1):
            for dx in range(-ring, ring + 1):
                for dz in range(-ring, ring + 1):
                    if max(abs(dx), abs(dz)) != ring:
                        continue
                    sample = self._sample((cx + dx * self.spacing, cz + dz * self.spacing))
                    if sample.current_cell_index == start_cell.index:
                        return sample

        logger.warning("No sample inside start cell", cell_index=start_cell.index)
        return centroid_sample

    def _classify_cells(
        self, points: SparseGrid, start_grouping: float
    ) -> Tuple[List[CellData], List[CellData]]:
        """Split the distinct owning cells of all points by grouping."""
        ordered = sorted(
            points.set_items(),
            key=lambda point: (point.current_cell_value, point.current_cell_index),
        )

        sector_cells: List[CellData] = []
        adjacent_cells: List[CellData] = []
        previous: Optional[CellIndex] = None

        for point in ordered:
            index = point.current_cell_index
            if index == previous:
                continue
            previous = index

            cell = self.worley.cell_data(index)
            if cell.value == 0:
                continue

            if self.topology.cell_grouping(index) == start_grouping:
                sector_cells.append(cell)
            else:
                adjacent_cells.append(cell)

        return sector_cells, adjacent_cells
