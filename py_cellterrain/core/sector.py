"""
Region type classification.

Decides whether a discovered region is a mountain, a gully, a lake or plain
ground, from how its border points meet neighbouring groupings.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from .region_discovery import Region
from .topology import TopologyUtil
from .worley_noise import CellData, PointData

logger = structlog.get_logger()


class SectorType(str, Enum):
    NONE = "none"
    MOUNTAIN = "mountain"
    LAKE = "lake"
    GULLY = "gully"


ROCKY_TYPES = frozenset({SectorType.MOUNTAIN, SectorType.GULLY})


@dataclass(frozen=True)
class RegionProfile:
    """Classification result consumed by height synthesis and mesh building."""

    sector_type: SectorType
    master_cell: CellData
    pathable: bool

    @property
    def is_lake(self) -> bool:
        return self.sector_type is SectorType.LAKE

    @property
    def is_rocky(self) -> bool:
        return self.sector_type in ROCKY_TYPES

    @property
    def requires_water(self) -> bool:
        return self.is_lake


def _opens_onto_neighbour(point: PointData, grouping: float, topology: TopologyUtil) -> bool:
    """Whether a border point of the region can be walked across."""
    if not point.is_set or point.adjacent_cell is None:
        return False
    if topology.cell_grouping(point.current_cell_index) != grouping:
        return False

    adjacent_index = point.adjacent_cell.index
    if topology.cell_grouping(adjacent_index) == grouping:
        return False

    if topology.cell_height(point.current_cell_index) == topology.cell_height(adjacent_index):
        return True
    return topology.edge_is_sloped(point)


def is_pathable(region: Region, topology: TopologyUtil) -> bool:
    return any(
        _opens_onto_neighbour(point, region.grouping, topology) for point in region.iter_points()
    )


def classify_region(region: Region, topology: TopologyUtil) -> RegionProfile:
    """
    Classify a region.

    Closed regions become gullies when every neighbouring cell is higher and
    mountains otherwise. Open, low regions with enough cells become lakes.

    Args:
        region: Discovered region
        topology: Grouping and height rules

    Returns:
        RegionProfile for the region
    """
    settings = topology.settings
    master_cell = region.sector_cells[0] if region.sector_cells else region.start_cell
    master_height_group = topology.cell_height_group(master_cell.index)

    pathable = is_pathable(region, topology)

    if not pathable:
        all_higher = all(
            topology.cell_height_group(cell.index) > master_height_group
            for cell in region.adjacent_cells
        )
        sector_type = SectorType.GULLY if all_higher else SectorType.MOUNTAIN
    elif (
        master_height_group < settings.lake_height_group_limit
        and len(region.sector_cells) > settings.lake_min_sector_cells
    ):
        sector_type = SectorType.LAKE
    else:
        sector_type = SectorType.NONE

    logger.debug(
        "Region classified",
        cell_index=region.start_cell.index,
        sector_type=sector_type.value,
        pathable=pathable,
    )

    return RegionProfile(sector_type=sector_type, master_cell=master_cell, pathable=pathable)
