"""Ingestion sources that produce a SpatialModel.

Two sources ship with the package: a parametric generator driven by block
configurations and an adapter for GeoJSON-style feature collections.
Both satisfy the SpatialSource protocol.
"""

from parcelmap.ingest.base import SpatialSource
from parcelmap.ingest.generator import (
    BlockConfiguration,
    GridFill,
    LayoutGenerator,
    ManualLayout,
    load_layout_file,
)
from parcelmap.ingest.geojson import (
    FeatureCollectionAdapter,
    parse_feature_collection,
    to_feature_collection,
)
from parcelmap.ingest.registry import SourceRegistry

__all__ = [
    "BlockConfiguration",
    "FeatureCollectionAdapter",
    "GridFill",
    "LayoutGenerator",
    "ManualLayout",
    "SourceRegistry",
    "SpatialSource",
    "load_layout_file",
    "parse_feature_collection",
    "to_feature_collection",
]
