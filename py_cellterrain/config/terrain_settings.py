"""
Terrain generation settings.

All generation constants live in one validated model that is passed
explicitly into the samplers; there is no process-wide noise state.
Invalid values fail at construction with ``pydantic.ValidationError``.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DistanceFunction(str, Enum):
    """Distance metric between a sample and a jittered cell centroid."""

    NATURAL = "natural"
    MANHATTAN = "manhattan"
    EUCLIDEAN = "euclidean"


class CellularReturnType(str, Enum):
    """How a neighbour's distance combines with the nearest distance."""

    DISTANCE2 = "distance2"
    DISTANCE2_ADD = "distance2_add"
    DISTANCE2_SUB = "distance2_sub"
    DISTANCE2_MUL = "distance2_mul"
    DISTANCE2_DIV = "distance2_div"


class Distance2EdgeBorder(str, Enum):
    """Which classification a neighbour must differ in to count as an edge."""

    SECTOR = "sector"
    HEIGHT = "height"


class TerrainSettings(BaseModel):
    """Constants for cell sampling, grouping, heights and meshing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Cellular noise
    seed: int = Field(default=5678, description="Terrain seed")
    cell_frequency: float = Field(default=0.03, gt=0, description="Cells per world unit")
    cellular_jitter: float = Field(default=0.3, ge=0, lt=0.5, description="Centroid jitter in cell units")
    cell_edge_smoothing: float = Field(default=0.0, ge=0, description="Gradient perturbation amplitude")
    distance_function: DistanceFunction = DistanceFunction.NATURAL
    return_type: CellularReturnType = CellularReturnType.DISTANCE2_SUB
    distance2_edge_border: Distance2EdgeBorder = Distance2EdgeBorder.SECTOR

    # Height groups
    height_multiplier: float = Field(default=3.0, description="World height per height level")
    height_noise_frequency: float = Field(default=0.6, gt=0)
    height_level_count: int = Field(default=4, ge=1)

    # Cell groupings
    group_noise_frequency: float = Field(default=0.4, gt=0)
    group_count: int = Field(default=4, ge=1)

    # Slopes
    slope_length: float = Field(default=0.45, gt=0, description="Base ramp length in edge-distance units")
    slope_noise_frequency: float = Field(default=0.1, gt=0)

    # Lakes
    lake_margin: float = Field(default=0.1, ge=0, description="Shore width before the lake bed drops")
    lake_depth: float = Field(default=2.0, ge=0, description="Maximum lake depth below base height")
    lake_height_group_limit: int = Field(default=2, ge=0, description="Height groups below this can hold lakes")
    lake_min_sector_cells: int = Field(default=2, ge=0)

    # Mesh colouring
    cliff_threshold: float = Field(default=1.5, gt=0, description="Corner height spread rendered as cliff")
    edge_darkening: float = Field(default=0.3, ge=0, le=1)

    # Region point grids
    initial_grid_width: int = Field(default=10, ge=2)
    grid_padding: int = Field(default=3, ge=1)
    sample_spacing: int = Field(default=1, ge=1, description="World units between sample points")
