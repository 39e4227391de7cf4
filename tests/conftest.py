"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest


def polygon_feature(
    ring: list[list[Any]],
    holes: list[list[list[Any]]] | None = None,
    **properties: Any,
) -> dict[str, Any]:
    """Build a Polygon feature with the given outer ring and properties."""
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": [ring, *(holes or [])]},
        "properties": properties,
    }


def point_feature(x: Any, y: Any, **properties: Any) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [x, y]},
        "properties": properties,
    }


SQUARE = [[0, 0], [10, 0], [10, 10], [0, 10]]


@pytest.fixture
def feature_collection() -> dict[str, Any]:
    """Two blocks, three lots, one of them a point feature."""
    return {
        "type": "FeatureCollection",
        "features": [
            polygon_feature(SQUARE, quadra=1, lote=1, tipo="Residencial"),
            polygon_feature([[20, 0], [30, 0], [30, 10], [20, 10]], quadra=1, lote=2),
            point_feature(100, 50, quadra=2, lote=1, owner="Jane Doe"),
        ],
    }
