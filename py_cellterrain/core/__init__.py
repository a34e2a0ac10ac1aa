"""
Core terrain generation functionality.
"""

from .worley_noise import WorleyNoise, CellData, CellRef, PointData
from .simplex_noise import SimplexNoise, FractalType
from .topology import TopologyUtil, SlopeDirectionError
from .sparse_grid import SparseGrid, GridResizeError
from .region_discovery import RegionDiscovery, Region
from .sector import SectorType, RegionProfile, classify_region
from .height_synthesis import HeightSynthesis, HeightField
from .mesh_builder import MeshBuilder, MeshBuffers
from .terrain_pipeline import TerrainPipeline, RegionResult

__all__ = ['WorleyNoise', 'CellData', 'CellRef', 'PointData', 'SimplexNoise', 'FractalType',
           'TopologyUtil', 'SlopeDirectionError', 'SparseGrid', 'GridResizeError',
           'RegionDiscovery', 'Region', 'SectorType', 'RegionProfile', 'classify_region',
           'HeightSynthesis', 'HeightField', 'MeshBuilder', 'MeshBuffers',
           'TerrainPipeline', 'RegionResult']
