"""Shared fixtures for terrain tests."""

import pytest

from py_cellterrain.config import TerrainSettings
from py_cellterrain.core.region_discovery import Region
from py_cellterrain.core.sparse_grid import SparseGrid
from py_cellterrain.core.topology import TopologyUtil
from py_cellterrain.core.worley_noise import CellData, CellRef, PointData


class TableTopology(TopologyUtil):
    """Topology with groupings and height groups looked up from tables."""

    def __init__(self, settings=None, groupings=None, height_groups=None,
                 sloped=False, default_grouping=1.0, default_height_group=1):
        super().__init__(settings)
        self.groupings = groupings or {}
        self.height_groups = height_groups or {}
        self.sloped = sloped
        self.default_grouping = default_grouping
        self.default_height_group = default_height_group

    def cell_grouping(self, cell_index):
        return self.groupings.get(tuple(cell_index), self.default_grouping)

    def cell_height_group(self, cell_index):
        return self.height_groups.get(tuple(cell_index), self.default_height_group)

    def edge_is_sloped(self, point):
        return point.adjacent_cell is not None and self.sloped


@pytest.fixture
def settings():
    """Default settings with small cells so regions stay small."""
    return TerrainSettings(cell_frequency=0.1)


@pytest.fixture
def table_topology():
    return TableTopology


@pytest.fixture
def make_point():
    """Factory for hand-built sample points."""

    def _make_point(position, current=(0, 0), current_value=0.5, adjacent=None,
                    adjacent_value=0.7, distance2_edge=0.0, grouping=1.0, distance=0.1):
        current_cell = CellRef(current, current_value, (0.0, 0.0))
        adjacent_cell = None
        if adjacent is not None:
            adjacent_cell = CellRef(adjacent, adjacent_value, (10.0, 0.0))
        return PointData(
            world_position=position,
            current_cell=current_cell,
            adjacent_cell=adjacent_cell,
            distance=distance,
            second_distance=distance * 2,
            distance2_edge=distance2_edge,
            cell_grouping=grouping,
        )

    return _make_point


@pytest.fixture
def make_region():
    """Factory for regions built from a {position: PointData} mapping."""

    def _make_region(points, grouping=1.0, width=4, sector_cells=None, adjacent_cells=None):
        grid = SparseGrid(width)
        for position, point in points.items():
            grid.set(point, position)
        return Region(
            start_cell=CellData(0.5, (0, 0), (0.0, 0.0)),
            grouping=grouping,
            points=grid,
            sector_cells=sector_cells if sector_cells is not None else [CellData(0.5, (0, 0), (0.0, 0.0))],
            adjacent_cells=adjacent_cells or [],
        )

    return _make_region
