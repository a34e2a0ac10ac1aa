"""
Configuration for terrain generation.
"""

from .config import Settings
from .terrain_settings import (
    TerrainSettings,
    DistanceFunction,
    CellularReturnType,
    Distance2EdgeBorder,
)

__all__ = ['Settings', 'TerrainSettings', 'DistanceFunction',
           'CellularReturnType', 'Distance2EdgeBorder']
