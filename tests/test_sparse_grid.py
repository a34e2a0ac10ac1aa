"""Tests for the growable sparse grid."""

import numpy as np
import pytest

from py_cellterrain.core.sparse_grid import GridResizeError, SparseGrid


class TestAccess:
    """Test reads and writes inside the current bounds."""

    def test_set_get_round_trip(self):
        grid = SparseGrid(10)
        grid.set("a", (3.0, 4.0))
        assert grid.get((3.0, 4.0)) == "a"
        assert grid.is_set((3.0, 4.0))
        assert grid.try_get((3.0, 4.0)) == (True, "a")

    def test_unset_positions(self):
        grid = SparseGrid(10)
        assert not grid.is_set((3.0, 4.0))
        assert grid.get((3.0, 4.0)) is None
        assert grid.get((3.0, 4.0), default="x") == "x"
        assert grid.try_get((3.0, 4.0)) == (False, None)

    def test_out_of_bounds_reads_are_unset(self):
        grid = SparseGrid(10)
        assert not grid.is_set((-50.0, 200.0))
        assert grid.get((-50.0, 200.0)) is None
        assert grid.item_at(-1, 0) is None
        assert not grid.is_set_at(10, 10)

    def test_zero_item_is_set(self):
        grid = SparseGrid(5, dtype=float)
        grid.set(0.0, (1.0, 1.0))
        assert grid.is_set((1.0, 1.0))
        assert grid.get((1.0, 1.0)) == 0.0
        assert not grid.is_set((2.0, 1.0))

    def test_unset(self):
        grid = SparseGrid(10)
        grid.set("a", (1.0, 1.0))
        grid.unset((1.0, 1.0))
        assert not grid.is_set((1.0, 1.0))
        assert grid.set_count == 0

    def test_coordinate_conversion(self):
        grid = SparseGrid(10, root=(-5.0, 20.0), item_world_size=2)
        assert grid.world_to_grid((-1.0, 26.0)) == (2, 3)
        assert grid.grid_to_world(2, 3) == (-1.0, 26.0)
        assert grid.flat_index(2, 3) == 32
        assert grid.unflatten(32) == (2, 3)

    def test_items(self):
        grid = SparseGrid(10)
        grid.set("a", (1.0, 2.0))
        grid.set("b", (4.0, 0.0))
        assert dict(grid.items()) == {(1.0, 2.0): "a", (4.0, 0.0): "b"}
        assert sorted(grid.set_items()) == ["a", "b"]
        assert sorted(grid.set_positions()) == [(1.0, 2.0), (4.0, 0.0)]

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            SparseGrid(0)


class TestGrowth:
    """Test growth and re-centring."""

    def test_growth_preserves_values(self):
        grid = SparseGrid(6)
        written = {}
        for x in range(6):
            for z in range(6):
                written[(float(x), float(z))] = x * 10 + z
                grid.set(x * 10 + z, (float(x), float(z)))

        grid.set("far", (40.0, -25.0))

        for position, item in written.items():
            assert grid.get(position) == item
        assert grid.get((40.0, -25.0)) == "far"
        assert grid.set_count == len(written) + 1

    def test_storage_stays_square(self):
        grid = SparseGrid(4)
        grid.set(1, (0.0, 0.0))
        grid.set(2, (30.0, 0.0))
        grid.set(3, (-20.0, -17.0))
        assert len(grid.backing) == len(grid.presence) == grid.width ** 2

    def test_width_never_shrinks(self):
        grid = SparseGrid(10)
        grid.set(1, (0.0, 0.0))
        grid.set(2, (-3.0, 0.0))
        assert grid.width >= 10

    def test_growth_uses_padding(self):
        grid = SparseGrid(10)
        grid.set("a", (0.0, 0.0))
        grid.set("b", (12.0, 0.0))
        # Overflow of 3 with no free columns on the left, plus 3 padding per side
        assert grid.width == 19
        assert grid.root == (-3.0, -3.0)

    def test_growth_reuses_empty_layers(self):
        grid = SparseGrid(10)
        grid.set("a", (9.0, 0.0))
        grid.set("b", (12.0, 0.0))
        # Five empty columns on the left absorb the overflow
        assert grid.width == 16
        assert grid.root == (2.0, -3.0)
        assert grid.get((9.0, 0.0)) == "a"
        assert grid.get((12.0, 0.0)) == "b"

    def test_negative_growth_moves_root(self):
        grid = SparseGrid(10)
        grid.set("a", (5.0, 5.0))
        grid.set("b", (-4.0, 5.0))
        assert grid.root[0] <= -4.0
        assert grid.get((5.0, 5.0)) == "a"
        assert grid.get((-4.0, 5.0)) == "b"

    def test_float_grid_growth(self):
        grid = SparseGrid(3, dtype=float)
        grid.set(1.5, (0.0, 0.0))
        grid.set(2.5, (10.0, 10.0))
        assert grid.backing.dtype == np.float64
        assert grid.get((0.0, 0.0)) == 1.5
        assert grid.get((10.0, 10.0)) == 2.5

    def test_dropped_items_raise(self):
        grid = SparseGrid(10)
        grid.set("a", (0.0, 0.0))
        with pytest.raises(GridResizeError):
            grid._resized((-5, 0), grid.width)
        assert grid.get((0.0, 0.0)) == "a"
