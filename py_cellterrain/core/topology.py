"""
Per-cell topology rules.

Maps a cell index to its coarse grouping and discrete height group, and
decides which boundary directions between two cells carry a slope. The
sloped-side rule is evaluated independently by both regions sharing an edge,
so it only depends on the unordered pair of cell values.
"""

import threading
from typing import Dict, Optional, Tuple

import structlog

from ..config.terrain_settings import TerrainSettings
from ..utils.interpolation import clamp, lerp
from .alea_prng import derive_seed
from .simplex_noise import SimplexNoise

logger = structlog.get_logger()

CellIndex = Tuple[int, int]

# Octant number -> boundary direction, clockwise from +z
SIDE_DIRECTIONS: Tuple[CellIndex, ...] = (
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
    (-1, 0),
    (-1, 1),
)


class SlopeDirectionError(IndexError):
    """Octant outside [0, 7]; cannot happen for values in [0, 1]."""


def side_direction(octant: int) -> CellIndex:
    """Direction vector for an octant number."""
    if not 0 <= octant <= 7:
        raise SlopeDirectionError(f"Octant {octant} outside [0, 7]")
    return SIDE_DIRECTIONS[octant]


def opposite_side(octant: int) -> int:
    """Octant rotated by 180 degrees."""
    return (octant + 4) % 8


class TopologyUtil:
    """
    Grouping, height and slope rules for cells.

    Groupings are memoized per cell index. The cache is shared by every
    region pipeline using this instance and is guarded by a lock on insert.
    """

    def __init__(self, settings: Optional[TerrainSettings] = None):
        """
        Args:
            settings: Terrain settings; defaults are used when omitted
        """
        self.settings = settings or TerrainSettings()

        self.height_simplex = SimplexNoise(
            derive_seed(self.settings.seed, "height"), self.settings.height_noise_frequency
        )
        self.group_simplex = SimplexNoise(
            derive_seed(self.settings.seed, "group"), self.settings.group_noise_frequency
        )
        self.slope_simplex = SimplexNoise(
            derive_seed(self.settings.seed, "slope"), self.settings.slope_noise_frequency
        )

        self._grouping_cache: Dict[CellIndex, float] = {}
        self._cache_lock = threading.Lock()

    def cell_height_group(self, cell_index: CellIndex) -> int:
        """Discrete height level of a cell in [0, height_level_count]."""
        noise = clamp(self.height_simplex.get_simplex(cell_index[0], cell_index[1]), 0.0, 1.0)
        return int(round(lerp(0, self.settings.height_level_count, noise)))

    def cell_height(self, cell_index: CellIndex) -> float:
        """Base elevation of a cell."""
        return self.cell_height_group(cell_index) * self.settings.height_multiplier

    def cell_grouping(self, cell_index: CellIndex) -> float:
        """
        Coarse grouping of a cell.

        The integer part comes from low-frequency noise; the height is folded
        in as a fractional part so cells of different heights never merge.
        """
        grouping = self._grouping_cache.get(cell_index)
        if grouping is not None:
            return grouping

        noise = clamp(self.group_simplex.get_simplex(cell_index[0], cell_index[1]), 0.0, 1.0)
        grouped = int(round(lerp(0, self.settings.group_count, noise)))
        grouping = grouped + self.cell_height(cell_index) / 10

        with self._cache_lock:
            self._grouping_cache.setdefault(cell_index, grouping)
        return grouping

    @property
    def cached_groupings(self) -> int:
        return len(self._grouping_cache)

    def sloped_side_octants(self, current_value: float, adjacent_value: float) -> Tuple[int, int]:
        """
        Candidate sloped octants seen from the current cell.

        Both candidates are derived from the ordered pair (low, high) and then
        reflected when the current cell holds the higher value, so the two
        cells of a pair always point at each other.
        """
        low, high = sorted((current_value, adjacent_value))

        first_noise = (current_value + adjacent_value) / 2
        second_noise = clamp(self.slope_simplex.get_simplex(low, high), 0.0, 1.0)

        first = int(round(lerp(0, 7, first_noise)))
        second = int(round(lerp(0, 7, second_noise)))

        if current_value > adjacent_value:
            first = opposite_side(first)
            second = opposite_side(second)

        return first, second

    def sloped_sides(self, current_value: float, adjacent_value: float) -> Tuple[CellIndex, CellIndex]:
        """Candidate sloped boundary directions for a cell pair."""
        first, second = self.sloped_side_octants(current_value, adjacent_value)
        return side_direction(first), side_direction(second)

    def edge_is_sloped(self, point) -> bool:
        """
        Whether the boundary a point sits against is a slope.

        Args:
            point: PointData with a current and adjacent cell

        Returns:
            False when the point has no differently classified neighbour
        """
        if point.adjacent_cell is None:
            return False

        current = point.current_cell
        adjacent = point.adjacent_cell
        edge = (adjacent.index[0] - current.index[0], adjacent.index[1] - current.index[1])

        side_a, side_b = self.sloped_sides(current.value, adjacent.value)
        return edge == side_a or edge == side_b
