"""
Cellular (Worley) noise sampling.

Partitions the plane into cells around jittered lattice centroids. Each
sample reports its owning cell and the nearest neighbouring cell whose
border classification differs, together with a distance-to-edge value used
for slopes, lakes and shading.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from ..config.terrain_settings import (
    CellularReturnType,
    Distance2EdgeBorder,
    DistanceFunction,
    TerrainSettings,
)
from ..utils.interpolation import interp_quintic, lerp
from .noise_hash import cell_vector, fast_floor, fast_round, to_01, val_coord_2d
from .topology import CellIndex, TopologyUtil

logger = structlog.get_logger()

WorldPosition = Tuple[float, float]

# Internal marker for "no distance found yet"
_UNASSIGNED = 999999.0


@dataclass(frozen=True, order=True)
class CellData:
    """A Worley cell. Ordered by value."""

    value: float
    index: CellIndex
    position: WorldPosition
    discovered: bool = False


@dataclass(frozen=True)
class CellRef:
    """Cell reference carried by a sample point."""

    index: CellIndex
    value: float
    position: WorldPosition


@dataclass(frozen=True)
class PointData:
    """
    One unit-spaced sample of the cellular field.

    ``adjacent_cell`` is None when no neighbour in range has a different
    border classification; ``distance2_edge`` is 0 in that case.
    ``cell_grouping`` is assigned by region discovery.
    """

    world_position: WorldPosition
    current_cell: CellRef
    adjacent_cell: Optional[CellRef]
    distance: float
    second_distance: float
    distance2_edge: float
    cell_grouping: Optional[float] = None
    is_set: bool = True

    @property
    def current_cell_index(self) -> CellIndex:
        return self.current_cell.index

    @property
    def current_cell_value(self) -> float:
        return self.current_cell.value

    def with_grouping(self, grouping: float) -> "PointData":
        return replace(self, cell_grouping=grouping)


def _natural(dx: float, dy: float) -> float:
    return (abs(dx) + abs(dy)) + (dx * dx + dy * dy)


def _manhattan(dx: float, dy: float) -> float:
    return abs(dx) + abs(dy)


def _euclidean(dx: float, dy: float) -> float:
    return dx * dx + dy * dy


def _divide(edge: float, nearest: float) -> float:
    return nearest / edge if edge else 0.0


DISTANCE_FUNCTIONS: Dict[DistanceFunction, Callable[[float, float], float]] = {
    DistanceFunction.NATURAL: _natural,
    DistanceFunction.MANHATTAN: _manhattan,
    DistanceFunction.EUCLIDEAN: _euclidean,
}

RETURN_TYPES: Dict[CellularReturnType, Callable[[float, float], float]] = {
    CellularReturnType.DISTANCE2: lambda edge, nearest: edge,
    CellularReturnType.DISTANCE2_ADD: lambda edge, nearest: edge + nearest,
    CellularReturnType.DISTANCE2_SUB: lambda edge, nearest: edge - nearest,
    CellularReturnType.DISTANCE2_MUL: lambda edge, nearest: edge * nearest,
    CellularReturnType.DISTANCE2_DIV: _divide,
}


class WorleyNoise:
    """
    Deterministic cellular noise sampler.

    Every method is a pure function of its arguments and the settings, so
    one sampler can be shared by concurrent region pipelines.
    """

    def __init__(self, settings: Optional[TerrainSettings] = None,
                 topology: Optional[TopologyUtil] = None):
        """
        Args:
            settings: Terrain settings; defaults are used when omitted
            topology: Grouping rules used for border classification

        Raises:
            ValueError: If a distance function, return type or border mode
                is not recognised
        """
        self.settings = settings or TerrainSettings()
        self.topology = topology or TopologyUtil(self.settings)

        self.seed = self.settings.seed
        self.frequency = self.settings.cell_frequency
        self.jitter = self.settings.cellular_jitter
        self.perturb_amp = self.settings.cell_edge_smoothing

        try:
            self._distance = DISTANCE_FUNCTIONS[DistanceFunction(self.settings.distance_function)]
            self._combine = RETURN_TYPES[CellularReturnType(self.settings.return_type)]
            border = Distance2EdgeBorder(self.settings.distance2_edge_border)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unsupported cellular noise configuration: {e}") from e

        if border is Distance2EdgeBorder.SECTOR:
            self._border_class = self.topology.cell_grouping
        else:
            self._border_class = self.topology.cell_height_group

    def jittered_index(self, cell_index: CellIndex) -> Tuple[float, float]:
        """Jittered centroid of a cell in noise (frequency-scaled) space."""
        vx, vy = cell_vector(self.seed, cell_index[0], cell_index[1])
        return cell_index[0] + vx * self.jitter, cell_index[1] + vy * self.jitter

    def cell_value(self, cell_index: CellIndex) -> float:
        """Deterministic value of a cell in [0, 1)."""
        return to_01(val_coord_2d(self.seed, cell_index[0], cell_index[1]))

    def cell_centroid(self, cell_index: CellIndex) -> WorldPosition:
        """Cell centroid in world space, snapped to the sample lattice."""
        cx, cy = self.jittered_index(cell_index)
        return self._to_world(cx, cy)

    def cell_data(self, cell_index: CellIndex) -> CellData:
        cell_index = (int(cell_index[0]), int(cell_index[1]))
        return CellData(
            value=self.cell_value(cell_index),
            index=cell_index,
            position=self.cell_centroid(cell_index),
        )

    def cell_ref(self, cell_index: CellIndex) -> CellRef:
        return CellRef(cell_index, self.cell_value(cell_index), self.cell_centroid(cell_index))

    def _to_world(self, cx: float, cy: float) -> WorldPosition:
        return float(fast_round(cx / self.frequency)), float(fast_round(cy / self.frequency))

    def sample_point(self, x: float, y: float) -> PointData:
        """
        Sample the cellular field at a world position.

        Args:
            x, y: World position on the ground plane

        Returns:
            PointData for the position
        """
        world_position = (x, y)
        if self.perturb_amp > 0:
            x, y = self._gradient_perturb(x, y)

        fx = x * self.frequency
        fy = y * self.frequency
        xr = fast_round(fx)
        yr = fast_round(fy)

        distance0 = _UNASSIGNED
        distance1 = _UNASSIGNED
        nearest: Optional[CellIndex] = None
        nearest_centroid = (0.0, 0.0)

        neighbours: List[Tuple[CellIndex, float, Tuple[float, float]]] = []

        for xi in range(xr - 1, xr + 2):
            for yi in range(yr - 1, yr + 2):
                vx, vy = cell_vector(self.seed, xi, yi)
                cell_x = xi + vx * self.jitter
                cell_y = yi + vy * self.jitter

                new_distance = self._distance(cell_x - fx, cell_y - fy)

                if new_distance <= distance1:
                    distance1 = new_distance if new_distance >= distance0 else distance0

                if new_distance <= distance0:
                    distance0 = new_distance
                    nearest = (xi, yi)
                    nearest_centroid = (cell_x, cell_y)

                neighbours.append(((xi, yi), new_distance, (cell_x, cell_y)))

        current_cell = CellRef(nearest, self.cell_value(nearest), self._to_world(*nearest_centroid))
        current_class = self._border_class(nearest)

        edge_distance = _UNASSIGNED
        adjacent_cell = None
        for index, new_distance, centroid in neighbours:
            if index == nearest or new_distance >= edge_distance:
                continue
            if self._border_class(index) != current_class:
                edge_distance = new_distance
                adjacent_cell = CellRef(index, self.cell_value(index), self._to_world(*centroid))

        if adjacent_cell is None:
            distance2_edge = 0.0
        else:
            distance2_edge = self._combine(edge_distance, distance0)

        return PointData(
            world_position=world_position,
            current_cell=current_cell,
            adjacent_cell=adjacent_cell,
            distance=distance0,
            second_distance=distance1,
            distance2_edge=distance2_edge,
        )

    def _gradient_perturb(self, x: float, y: float) -> Tuple[float, float]:
        """Offset a position along interpolated lattice gradients."""
        xf = x * self.frequency
        yf = y * self.frequency

        x0 = fast_floor(xf)
        y0 = fast_floor(yf)
        x1 = x0 + 1
        y1 = y0 + 1

        xs = interp_quintic(xf - x0)
        ys = interp_quintic(yf - y0)

        vec0 = cell_vector(self.seed, x0, y0)
        vec1 = cell_vector(self.seed, x1, y0)
        lx0x = lerp(vec0[0], vec1[0], xs)
        ly0x = lerp(vec0[1], vec1[1], xs)

        vec0 = cell_vector(self.seed, x0, y1)
        vec1 = cell_vector(self.seed, x1, y1)
        lx1x = lerp(vec0[0], vec1[0], xs)
        ly1x = lerp(vec0[1], vec1[1], xs)

        return (
            x + lerp(lx0x, lx1x, ys) * self.perturb_amp,
            y + lerp(ly0x, ly1x, ys) * self.perturb_amp,
        )
