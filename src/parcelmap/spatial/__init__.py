"""Unified spatial model shared by every ingestion source.

Blocks group lots; lots carry a polygon ring, a derived center and a
mutable info record.
"""

from parcelmap.spatial.builder import SpatialModelBuilder
from parcelmap.spatial.models import (
    Block,
    Lot,
    LotInfo,
    MapBounds,
    MapStatistics,
    SpatialModel,
    lot_key,
)

__all__ = [
    "Block",
    "Lot",
    "LotInfo",
    "MapBounds",
    "MapStatistics",
    "SpatialModel",
    "SpatialModelBuilder",
    "lot_key",
]
