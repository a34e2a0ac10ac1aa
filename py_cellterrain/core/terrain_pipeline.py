"""
Region pipeline orchestration.

Runs discovery, classification, height synthesis and mesh building for
regions. Regions are independent, so batches are processed in waves on a
thread pool: every discovery first, then every height field, then every mesh.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

import structlog

from ..config.config import Settings
from ..config.terrain_settings import TerrainSettings
from .height_synthesis import HeightField, HeightSynthesis
from .mesh_builder import MeshBuffers, MeshBuilder
from .region_discovery import Region, RegionDiscovery
from .sector import RegionProfile, classify_region
from .sparse_grid import WorldPosition
from .topology import CellIndex, TopologyUtil
from .worley_noise import WorleyNoise

logger = structlog.get_logger()

RegionKey = FrozenSet[CellIndex]


@dataclass
class RegionResult:
    """Everything the integration layer needs for one region."""

    region: Region
    profile: RegionProfile
    heights: HeightField
    terrain_mesh: MeshBuffers
    water_mesh: Optional[MeshBuffers] = None

    @property
    def key(self) -> RegionKey:
        return region_key(self.region)

    def height_at(self, world_position: WorldPosition) -> Optional[float]:
        return self.heights.height_at(world_position)


def region_key(region: Region) -> RegionKey:
    """Identity of a region: the set of cells sharing its grouping."""
    return region.sector_cell_indices or frozenset({region.start_cell.index})


class TerrainPipeline:
    """
    Processes regions into heights and meshes.

    Results are kept per region so repeated requests for any cell of an
    already processed region return the stored result.
    """

    def __init__(
        self,
        settings: Optional[TerrainSettings] = None,
        max_workers: Optional[int] = None,
        app_settings: Optional[Settings] = None,
    ):
        """
        Args:
            settings: Terrain generation settings
            max_workers: Worker threads for batch processing; read from
                application settings when omitted
            app_settings: Application settings
        """
        self.settings = settings or TerrainSettings()
        if max_workers is None:
            max_workers = (app_settings or Settings()).max_workers
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers

        self.topology = TopologyUtil(self.settings)
        self.worley = WorleyNoise(self.settings, self.topology)
        self.discovery = RegionDiscovery(self.worley, self.topology, self.settings)
        self.height_synthesis = HeightSynthesis(self.topology, self.settings)
        self.mesh_builder = MeshBuilder(self.topology, self.settings)

        self.results: Dict[RegionKey, RegionResult] = {}
        self._cell_regions: Dict[CellIndex, RegionKey] = {}
        self._lock = threading.Lock()

    def region_index_at(self, world_position: WorldPosition) -> CellIndex:
        """Index of the cell owning a world position."""
        return self.worley.sample_point(world_position[0], world_position[1]).current_cell_index

    def known_result(self, cell_index: CellIndex) -> Optional[RegionResult]:
        with self._lock:
            key = self._cell_regions.get(cell_index)
            return self.results.get(key) if key is not None else None

    def process_region(self, cell_index: CellIndex) -> RegionResult:
        """
        Run every stage for the region containing a cell.

        Args:
            cell_index: Any cell of the region

        Returns:
            RegionResult, reused when the region was already processed
        """
        cell_index = (int(cell_index[0]), int(cell_index[1]))
        known = self.known_result(cell_index)
        if known is not None:
            return known

        region = self.discovery.discover(cell_index)
        profile, heights = self._synthesize(region)
        result = self._build(region, profile, heights)
        return self._store(result)

    def process_world_position(self, world_position: WorldPosition) -> RegionResult:
        return self.process_region(self.region_index_at(world_position))

    def process_area(self, world_position: WorldPosition, cell_radius: int = 1) -> List[RegionResult]:
        """
        Process every region touching the cells around a world position.

        Args:
            world_position: Centre of the area
            cell_radius: Cells to include on each side of the centre cell

        Returns:
            One result per distinct region, in discovery order
        """
        if cell_radius < 0:
            raise ValueError(f"cell_radius must be >= 0, got {cell_radius}")

        cx, cz = self.region_index_at(world_position)
        cells = [
            (cx + dx, cz + dz)
            for dx in range(-cell_radius, cell_radius + 1)
            for dz in range(-cell_radius, cell_radius + 1)
        ]

        known: Dict[RegionKey, RegionResult] = {}
        pending: List[CellIndex] = []
        for cell in cells:
            result = self.known_result(cell)
            if result is not None:
                known.setdefault(result.key, result)
            else:
                pending.append(cell)

        logger.info(
            "Processing area",
            center=(cx, cz),
            cells=len(cells),
            pending=len(pending),
            max_workers=self.max_workers,
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            discovered = list(executor.map(self.discovery.discover, pending))
            regions = self._deduplicate(discovered, known)

            synthesized = list(executor.map(self._synthesize, regions))
            built = list(
                executor.map(
                    self._build,
                    regions,
                    [profile for profile, _ in synthesized],
                    [heights for _, heights in synthesized],
                )
            )

        for result in built:
            known[result.key] = self._store(result)

        logger.info(
            "Area processed",
            center=(cx, cz),
            regions=len(known),
            new_regions=len(built),
            duplicates=len(discovered) - len(regions),
        )
        return list(known.values())

    def height_at(self, world_position: WorldPosition) -> Optional[float]:
        """
        Height of a world position from the processed regions, or None.

        Border points appear in every region they border; the region whose
        grouping owns the point is preferred.
        """
        with self._lock:
            results = list(self.results.values())

        fallback = None
        for result in results:
            point = result.region.point_at(world_position)
            if point is None:
                continue
            if point.cell_grouping == result.region.grouping:
                return result.height_at(world_position)
            if fallback is None:
                fallback = result.height_at(world_position)
        return fallback

    def _deduplicate(self, regions: List[Region], known: Dict[RegionKey, RegionResult]) -> List[Region]:
        """Drop regions describing a grouping component already seen."""
        unique: Dict[RegionKey, Region] = {}
        for region in regions:
            key = region_key(region)
            if key in known or key in unique:
                continue
            unique[key] = region
        return list(unique.values())

    def _synthesize(self, region: Region) -> Tuple[RegionProfile, HeightField]:
        profile = classify_region(region, self.topology)
        return profile, self.height_synthesis.synthesize(region, profile)

    def _build(self, region: Region, profile: RegionProfile, heights: HeightField) -> RegionResult:
        terrain_mesh = self.mesh_builder.build_terrain(region, heights, profile)
        water_mesh = self.mesh_builder.build_water(region, profile) if profile.requires_water else None
        return RegionResult(
            region=region,
            profile=profile,
            heights=heights,
            terrain_mesh=terrain_mesh,
            water_mesh=water_mesh,
        )

    def _store(self, result: RegionResult) -> RegionResult:
        key = result.key
        with self._lock:
            stored = self.results.setdefault(key, result)
            for cell_index in key:
                self._cell_regions.setdefault(cell_index, key)
            self._cell_regions.setdefault(result.region.start_cell.index, key)

        logger.info(
            "Region processed",
            cell_index=result.region.start_cell.index,
            sector_type=result.profile.sector_type.value,
            points=result.region.point_count,
            faces=result.terrain_mesh.face_count,
        )
        return stored
