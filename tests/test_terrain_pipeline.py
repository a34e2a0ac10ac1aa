"""Tests for the region pipeline."""

import pytest

from py_cellterrain.config import Settings, TerrainSettings
from py_cellterrain.core.terrain_pipeline import TerrainPipeline, region_key

SETTINGS = TerrainSettings(cell_frequency=0.1)


@pytest.fixture(scope="module")
def pipeline():
    return TerrainPipeline(SETTINGS, max_workers=2)


@pytest.fixture(scope="module")
def area_results(pipeline):
    return pipeline.process_area((0.0, 0.0), cell_radius=1)


class TestProcessRegion:
    """Test single region processing."""

    def test_stages_complete(self, pipeline):
        result = pipeline.process_region((0, 0))
        assert result.region.start_cell.index == (0, 0) or (0, 0) in result.key
        assert len(result.heights.heights) == len(result.region.points)
        assert len(result.terrain_mesh.indices) % 3 == 0
        assert (result.water_mesh is not None) == result.profile.requires_water

    def test_result_reused(self, pipeline):
        first = pipeline.process_region((0, 0))
        assert pipeline.process_region((0, 0)) is first

    def test_any_sector_cell_returns_same_region(self, pipeline):
        first = pipeline.process_region((0, 0))
        other = first.region.sector_cells[-1].index
        assert pipeline.process_region(other) is first

    def test_region_index_at(self, pipeline):
        start = pipeline.worley.cell_data((0, 0))
        assert pipeline.region_index_at(start.position) == (0, 0)

    def test_process_world_position(self, pipeline):
        start = pipeline.worley.cell_data((0, 0))
        result = pipeline.process_world_position(start.position)
        assert (0, 0) in result.key


class TestProcessArea:
    """Test batch processing in waves."""

    def test_regions_unique(self, area_results):
        keys = [result.key for result in area_results]
        assert len(keys) == len(set(keys))

    def test_area_covers_centre(self, area_results, pipeline):
        centre = pipeline.region_index_at((0.0, 0.0))
        assert any(centre in result.key for result in area_results)

    def test_region_key_matches_sector_cells(self, area_results):
        for result in area_results:
            assert region_key(result.region) == result.key

    def test_results_stored(self, area_results, pipeline):
        for result in area_results:
            assert pipeline.results[result.key] is result

    def test_repeat_reuses_results(self, area_results, pipeline):
        again = pipeline.process_area((0.0, 0.0), cell_radius=1)
        assert {id(result) for result in again} == {id(result) for result in area_results}

    def test_height_lookup(self, area_results, pipeline):
        result = area_results[0]
        position = result.region.seed_position
        assert pipeline.height_at(position) == pytest.approx(result.height_at(position))

    def test_height_lookup_outside(self, area_results, pipeline):
        assert pipeline.height_at((1e7, 1e7)) is None

    def test_negative_radius(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.process_area((0.0, 0.0), cell_radius=-1)


class TestConfiguration:
    """Test pipeline construction."""

    def test_workers_from_app_settings(self):
        pipeline = TerrainPipeline(SETTINGS, app_settings=Settings(max_workers=3))
        assert pipeline.max_workers == 3

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            TerrainPipeline(SETTINGS, max_workers=0)
