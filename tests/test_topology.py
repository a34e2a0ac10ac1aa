"""Tests for grouping, height groups and sloped-side selection."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from py_cellterrain.core.topology import (
    SIDE_DIRECTIONS, SlopeDirectionError, TopologyUtil, opposite_side, side_direction
)
from py_cellterrain.core.worley_noise import CellRef, PointData


@pytest.fixture
def topology(settings):
    return TopologyUtil(settings)


def _point(current, current_value, adjacent, adjacent_value):
    return PointData(
        world_position=(0.0, 0.0),
        current_cell=CellRef(current, current_value, (0.0, 0.0)),
        adjacent_cell=CellRef(adjacent, adjacent_value, (0.0, 0.0)),
        distance=0.1,
        second_distance=0.2,
        distance2_edge=0.1,
    )


class TestSideDirections:
    """Test octant lookups."""

    def test_all_octants(self):
        assert [side_direction(i) for i in range(8)] == list(SIDE_DIRECTIONS)

    @pytest.mark.parametrize("octant", [-1, 8, 12])
    def test_bad_octant(self, octant):
        with pytest.raises(SlopeDirectionError):
            side_direction(octant)

    def test_bad_octant_is_index_error(self):
        with pytest.raises(IndexError):
            side_direction(9)

    def test_opposite_side(self):
        for octant in range(8):
            dx, dz = side_direction(octant)
            assert side_direction(opposite_side(octant)) == (-dx, -dz)


class TestCellRules:
    """Test per-cell height and grouping."""

    def test_height_group_range(self, topology, settings):
        for x in range(-10, 10):
            for y in range(-10, 10):
                group = topology.cell_height_group((x, y))
                assert 0 <= group <= settings.height_level_count

    def test_cell_height(self, topology, settings):
        index = (3, 4)
        assert topology.cell_height(index) == topology.cell_height_group(index) * settings.height_multiplier

    def test_grouping_folds_in_height(self, topology):
        for index in [(0, 0), (5, -3), (-8, 2)]:
            remainder = topology.cell_grouping(index) - topology.cell_height(index) / 10
            assert remainder == pytest.approx(round(remainder))

    def test_grouping_is_cached(self, topology):
        first = topology.cell_grouping((2, 2))
        assert topology.cached_groupings >= 1
        assert topology.cell_grouping((2, 2)) == first

    def test_grouping_concurrent(self, topology, settings):
        indices = [(x, y) for x in range(-6, 6) for y in range(-6, 6)]
        with ThreadPoolExecutor(max_workers=4) as executor:
            parallel = list(executor.map(topology.cell_grouping, indices))
        fresh = TopologyUtil(settings)
        assert parallel == [fresh.cell_grouping(index) for index in indices]

    def test_sub_seeds_differ(self, topology):
        seeds = {topology.height_simplex.seed, topology.group_simplex.seed, topology.slope_simplex.seed}
        assert len(seeds) == 3


class TestSlopedSides:
    """Test that both cells of a pair agree on sloped sides."""

    def test_octants_in_range(self, topology):
        rng = np.random.default_rng(3)
        for a, b in rng.uniform(0, 1, size=(200, 2)):
            first, second = topology.sloped_side_octants(a, b)
            assert 0 <= first <= 7 and 0 <= second <= 7

    def test_pair_agreement(self, topology):
        rng = np.random.default_rng(4)
        for a, b in rng.uniform(0, 1, size=(200, 2)):
            a_first, a_second = topology.sloped_sides(a, b)
            b_first, b_second = topology.sloped_sides(b, a)
            assert a_first == (-b_first[0], -b_first[1])
            assert a_second == (-b_second[0], -b_second[1])

    def test_edge_is_sloped_symmetric(self, topology):
        rng = np.random.default_rng(5)
        offsets = list(SIDE_DIRECTIONS)
        for i, (a, b) in enumerate(rng.uniform(0, 1, size=(200, 2))):
            dx, dz = offsets[i % 8]
            forward = _point((0, 0), a, (dx, dz), b)
            backward = _point((dx, dz), b, (0, 0), a)
            assert topology.edge_is_sloped(forward) == topology.edge_is_sloped(backward)

    def test_some_edges_sloped(self, topology):
        sloped = 0
        for octant, (dx, dz) in enumerate(SIDE_DIRECTIONS):
            for value in np.linspace(0.05, 0.95, 10):
                if topology.edge_is_sloped(_point((0, 0), value, (dx, dz), 0.5)):
                    sloped += 1
        assert sloped > 0

    def test_no_adjacent_cell_not_sloped(self, topology):
        point = PointData(
            world_position=(0.0, 0.0),
            current_cell=CellRef((0, 0), 0.5, (0.0, 0.0)),
            adjacent_cell=None,
            distance=0.1,
            second_distance=0.2,
            distance2_edge=0.0,
        )
        assert not topology.edge_is_sloped(point)
