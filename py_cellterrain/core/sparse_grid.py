"""
Growable square grid addressed by world position.

Items live in a flat numpy array of ``width * width`` slots relative to a
movable root. Writes outside the current bounds grow and re-centre the grid;
reads outside the bounds report "not set". Presence is tracked in a parallel
boolean array, never through a sentinel item value.
"""

from typing import Any, Iterator, List, Tuple

import numpy as np
import structlog

logger = structlog.get_logger()

WorldPosition = Tuple[float, float]
GridPosition = Tuple[int, int]

# Edge names used when counting empty boundary layers
RIGHT, LEFT, TOP, BOTTOM = "right", "left", "top", "bottom"


class GridResizeError(RuntimeError):
    """A set item would fall outside the grid after a resize."""


class SparseGrid:
    """
    Sparse 2D buffer with automatic growth.

    Flat index of grid position (gx, gz) is ``gz * width + gx``; grid position
    of a world position is ``(world - root) / item_world_size``.
    """

    def __init__(
        self,
        width: int,
        root: WorldPosition = (0.0, 0.0),
        item_world_size: int = 1,
        dtype: Any = object,
        padding: int = 3,
    ):
        """
        Args:
            width: Initial side length in items
            root: World position of grid position (0, 0)
            item_world_size: World units between neighbouring items
            dtype: numpy dtype of the backing array
            padding: Empty layers added on each side when growing
        """
        if width < 1:
            raise ValueError(f"Grid width must be positive, got {width}")
        if item_world_size <= 0:
            raise ValueError(f"item_world_size must be positive, got {item_world_size}")

        self.width = int(width)
        self.root = (float(root[0]), float(root[1]))
        self.item_world_size = item_world_size
        self.dtype = np.dtype(dtype)
        self.padding = padding

        self.backing = self._allocate(self.width * self.width)
        self.presence = np.zeros(self.width * self.width, dtype=bool)

    def _allocate(self, length: int) -> np.ndarray:
        if self.dtype == np.dtype(object):
            return np.empty(length, dtype=object)
        return np.zeros(length, dtype=self.dtype)

    def __len__(self) -> int:
        return len(self.backing)

    @property
    def set_count(self) -> int:
        return int(np.count_nonzero(self.presence))

    # Coordinate conversion

    def world_to_grid(self, world_position: WorldPosition) -> GridPosition:
        gx = (world_position[0] - self.root[0]) / self.item_world_size
        gz = (world_position[1] - self.root[1]) / self.item_world_size
        return int(round(gx)), int(round(gz))

    def grid_to_world(self, gx: int, gz: int) -> WorldPosition:
        return (
            gx * self.item_world_size + self.root[0],
            gz * self.item_world_size + self.root[1],
        )

    def in_bounds(self, gx: int, gz: int) -> bool:
        return 0 <= gx < self.width and 0 <= gz < self.width

    def flat_index(self, gx: int, gz: int) -> int:
        return gz * self.width + gx

    def unflatten(self, index: int) -> GridPosition:
        return index % self.width, index // self.width

    # Access

    def set(self, item: Any, world_position: WorldPosition) -> None:
        """Store an item, growing the grid first if the position is outside it."""
        gx, gz = self.world_to_grid(world_position)
        if not self.in_bounds(gx, gz):
            self._reposition_resize(gx, gz)
            gx, gz = self.world_to_grid(world_position)
            if not self.in_bounds(gx, gz):
                raise GridResizeError(f"Position {world_position} still outside grid after resize")

        index = self.flat_index(gx, gz)
        self.backing[index] = item
        self.presence[index] = True

    def unset(self, world_position: WorldPosition) -> None:
        gx, gz = self.world_to_grid(world_position)
        if not self.in_bounds(gx, gz):
            return
        index = self.flat_index(gx, gz)
        self.backing[index] = self._allocate(1)[0]
        self.presence[index] = False

    def is_set(self, world_position: WorldPosition) -> bool:
        return self.is_set_at(*self.world_to_grid(world_position))

    def is_set_at(self, gx: int, gz: int) -> bool:
        if not self.in_bounds(gx, gz):
            return False
        return bool(self.presence[self.flat_index(gx, gz)])

    def get(self, world_position: WorldPosition, default: Any = None) -> Any:
        """Item at a world position, or ``default`` when nothing is set there."""
        found, item = self.try_get(world_position)
        return item if found else default

    def try_get(self, world_position: WorldPosition) -> Tuple[bool, Any]:
        gx, gz = self.world_to_grid(world_position)
        if not self.is_set_at(gx, gz):
            return False, None
        return True, self.backing[self.flat_index(gx, gz)]

    def item_at(self, gx: int, gz: int, default: Any = None) -> Any:
        """Item at a grid position, or ``default`` when nothing is set there."""
        if not self.is_set_at(gx, gz):
            return default
        return self.backing[self.flat_index(gx, gz)]

    def items(self) -> Iterator[Tuple[WorldPosition, Any]]:
        """Iterate (world position, item) over set slots in flat index order."""
        for index in np.flatnonzero(self.presence):
            gx, gz = self.unflatten(int(index))
            yield self.grid_to_world(gx, gz), self.backing[index]

    def set_items(self) -> List[Any]:
        return [self.backing[i] for i in np.flatnonzero(self.presence)]

    def set_positions(self) -> List[WorldPosition]:
        return [self.grid_to_world(*self.unflatten(int(i))) for i in np.flatnonzero(self.presence)]

    # Growth

    def _empty_layers(self, edge: str) -> int:
        """Count fully empty layers inward from one edge, capped at width // 2."""
        view = self.presence.reshape(self.width, self.width)
        limit = self.width // 2
        count = 0
        while count < limit:
            if edge == RIGHT:
                layer = view[:, self.width - 1 - count]
            elif edge == LEFT:
                layer = view[:, count]
            elif edge == TOP:
                layer = view[self.width - 1 - count, :]
            else:
                layer = view[count, :]
            if layer.any():
                break
            count += 1
        return count

    def _reposition_resize(self, gx: int, gz: int) -> None:
        """
        Grow and re-centre the grid so (gx, gz) fits.

        On an overflowing axis the grid only grows by the overflow not already
        covered by empty layers on the opposite edge, plus padding on both
        sides. The root moves with the growing side.
        """
        root_shift = [0, 0]
        growth = [0, 0]

        for axis, position, low_edge, high_edge in ((0, gx, LEFT, RIGHT), (1, gz, BOTTOM, TOP)):
            if position < 0:
                gap = self._empty_layers(high_edge)
                root_shift[axis] = position
                growth[axis] = max(-position - gap, 0)
            elif position >= self.width:
                gap = self._empty_layers(low_edge)
                root_shift[axis] = gap
                growth[axis] = max(position - (self.width - 1) - gap, 0)

        root_shift = [shift - self.padding for shift in root_shift]
        new_width = self.width + max(growth) + 2 * self.padding
        offset = (-root_shift[0], -root_shift[1])

        backing, presence = self._resized(offset, new_width)

        old_width = self.width
        self.backing, self.presence, self.width = backing, presence, new_width
        self.root = (
            self.root[0] + root_shift[0] * self.item_world_size,
            self.root[1] + root_shift[1] * self.item_world_size,
        )

        logger.debug("Grid resized", old_width=old_width, new_width=new_width, root=self.root)

    def _resized(self, offset: GridPosition, new_width: int) -> Tuple[np.ndarray, np.ndarray]:
        """Copy set slots into new storage shifted by ``offset``."""
        old_indices = np.flatnonzero(self.presence)
        new_x = old_indices % self.width + offset[0]
        new_z = old_indices // self.width + offset[1]

        inside = (new_x >= 0) & (new_x < new_width) & (new_z >= 0) & (new_z < new_width)
        if not inside.all():
            raise GridResizeError(
                f"{int((~inside).sum())} set items would be dropped resizing to width {new_width}"
            )

        backing = self._allocate(new_width * new_width)
        presence = np.zeros(new_width * new_width, dtype=bool)

        new_indices = new_z * new_width + new_x
        backing[new_indices] = self.backing[old_indices]
        presence[new_indices] = True
        return backing, presence
