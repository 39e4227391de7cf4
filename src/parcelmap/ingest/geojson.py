"""Adapter from GeoJSON-style feature collections to the spatial model.

Each feature names its block in the ``quadra`` property and its lot in
``lote``. The adapter is permissive: features without a block are
dropped, features without a lot number get a synthesized one, and
malformed coordinates are kept in the ring but ignored for centers.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from parcelmap.core.config import AdapterConfig
from parcelmap.core.types import Point
from parcelmap.spatial.builder import SpatialModelBuilder
from parcelmap.spatial.geometry import bbox_midpoint, is_valid_number, square_around
from parcelmap.spatial.models import Lot, LotInfo, MapBounds, SpatialModel, lot_key, utcnow

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?\d+")


def block_sort_key(block_id: str) -> tuple[int, int, str]:
    """Sort key placing integer ids first in numeric order, then the rest lexically."""
    if _INTEGER_RE.fullmatch(block_id.strip()):
        return (0, int(block_id), "")
    return (1, 0, block_id)


def _coordinate(value: Any) -> float:
    return float(value) if is_valid_number(value) else math.nan


def _ring_point(value: Any) -> Point:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return (math.nan, math.nan)
    return (_coordinate(value[0]), _coordinate(value[1]))


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def extract_ring(geometry: Any, point_half_size: float) -> list[Point]:
    """Turn a feature geometry into a single polygon ring.

    Polygons contribute their outer ring only; points become a square of
    the given half size. Ring points that are not coordinate pairs are kept
    as (nan, nan). Unsupported geometries yield an empty ring.
    """
    if not isinstance(geometry, dict):
        return []
    coordinates = geometry.get("coordinates")
    geometry_type = geometry.get("type")

    if geometry_type == "Polygon":
        if not isinstance(coordinates, list) or not coordinates or not isinstance(coordinates[0], list):
            return []
        return [_ring_point(p) for p in coordinates[0]]

    if geometry_type == "Point":
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
            return []
        return square_around((_coordinate(coordinates[0]), _coordinate(coordinates[1])), point_half_size)

    return []


def parse_feature_collection(
    collection: dict[str, Any] | str | bytes,
    config: AdapterConfig | None = None,
    bounds: MapBounds | None = None,
) -> SpatialModel:
    """Build a fresh SpatialModel from a feature collection."""
    config = config or AdapterConfig()
    if isinstance(collection, (str, bytes)):
        collection = json.loads(collection)

    features = collection.get("features") if isinstance(collection, dict) else None
    if not isinstance(features, list):
        logger.warning("Feature collection has no feature list; producing an empty model")
        features = []

    now = utcnow()
    builder = SpatialModelBuilder(bounds=bounds)
    dropped = 0

    for index, feature in enumerate(features):
        if not isinstance(feature, dict):
            dropped += 1
            continue
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            properties = {}
        if _is_missing(properties.get("quadra")):
            logger.debug("Dropping feature %d: no quadra property", index)
            dropped += 1
            continue

        block_id = str(properties["quadra"])
        lote = properties.get("lote")
        lot_number = f"unknown-{index}" if _is_missing(lote) else str(lote)
        lot_id = lot_key(block_id, lot_number)

        ring = extract_ring(feature.get("geometry"), config.point_half_size)
        if len(ring) < 3:
            logger.debug("Dropping feature %d (%s): no usable polygon", index, lot_id)
            dropped += 1
            continue

        info = LotInfo.model_validate({
            **properties,
            "id": lot_id,
            "block": block_id,
            "lot": lot_number,
            "notes": properties.get("tipo") or "",
            "created_at": now,
            "updated_at": now,
        })
        builder.add_block(block_id, f"Quadra {block_id}")
        builder.add_lot(Lot(
            id=lot_id,
            block=block_id,
            lot_number=lot_number,
            coordinates=ring,
            center=bbox_midpoint(ring),
            info=info,
        ))

    model = builder.build(with_block_centers=True, sort_key=block_sort_key)
    logger.info(
        "Parsed %d features into %d lots across %d blocks (%d dropped)",
        len(features), model.lot_count, len(model.blocks), dropped,
    )
    return model


class FeatureCollectionAdapter:
    """SpatialSource over a feature collection held in memory."""

    def __init__(
        self,
        collection: dict[str, Any] | str | bytes,
        config: AdapterConfig | None = None,
        bounds: MapBounds | None = None,
        name: str = "geojson",
    ) -> None:
        self._collection = collection
        self._config = config or AdapterConfig()
        self._bounds = bounds
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def build(self) -> SpatialModel:
        return parse_feature_collection(self._collection, config=self._config, bounds=self._bounds)


def to_feature_collection(model: SpatialModel) -> dict[str, Any]:
    """Export every lot as a closed Polygon feature.

    Points with a non-numeric or NaN component are left out of the ring;
    lots left with fewer than three points are skipped.
    """
    features = []
    for lot in model.iter_lots():
        ring = [[x, y] for x, y in lot.coordinates if is_valid_number(x) and is_valid_number(y)]
        if len(ring) < 3:
            logger.warning("Lot %s has no valid polygon; not exported", lot.id)
            continue
        if ring[0] != ring[-1]:
            ring.append(list(ring[0]))
        features.append({
            "type": "Feature",
            "properties": {
                "id": lot.id,
                "quadra": lot.block,
                "lote": lot.lot_number,
                "area": lot.info.area,
                "status": lot.info.status,
                "info": lot.info.model_dump(mode="json", exclude_none=True),
            },
            "geometry": {"type": "Polygon", "coordinates": [ring]},
        })
    return {"type": "FeatureCollection", "features": features}
