"""Pure 2D helpers used by the spatial producers.

Centers computed here are deliberately simple: a lot center is the
midpoint of its bounding box and a block center is the plain mean of its
lot centers. Consumers depend on these exact numbers.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Any

from parcelmap.core.types import Point

ORIGIN: Point = (0.0, 0.0)


def rotate_point(point: Point, center: Point, angle_deg: float) -> Point:
    """Rotate *point* about *center* by *angle_deg* degrees (counter-clockwise in x/y)."""
    rad = math.radians(angle_deg)
    cos = math.cos(rad)
    sin = math.sin(rad)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return (dx * cos - dy * sin + center[0], dx * sin + dy * cos + center[1])


def rectangle(x: float, y: float, width: float, height: float) -> list[Point]:
    """Axis-aligned rectangle corners, starting at (x, y) and going clockwise on screen."""
    return [(x, y), (x + width, y), (x + width, y + height), (x, y + height)]


def rotated_rectangle(
    x: float,
    y: float,
    width: float,
    height: float,
    center: Point,
    angle_deg: float,
) -> list[Point]:
    """Rectangle with every corner rotated once about *center*.

    A zero angle returns the corners untouched so axis-aligned output is exact.
    """
    corners = rectangle(x, y, width, height)
    if angle_deg == 0:
        return corners
    return [rotate_point(p, center, angle_deg) for p in corners]


def square_around(point: Point, half_size: float) -> list[Point]:
    """Square polygon of side ``2 * half_size`` centered on *point*."""
    x, y = point
    return [
        (x - half_size, y - half_size),
        (x + half_size, y - half_size),
        (x + half_size, y + half_size),
        (x - half_size, y + half_size),
    ]


def is_valid_number(value: Any) -> bool:
    """True for real, finite-or-infinite, non-NaN numbers. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def bbox_midpoint(points: Iterable[Sequence[Any]]) -> Point:
    """Midpoint of the bounding box of the valid points.

    Components that are non-numeric or NaN are skipped independently.
    Returns the origin when no valid bound can be established.
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for p in points:
        if len(p) < 2:
            continue
        if not is_valid_number(p[0]) or not is_valid_number(p[1]):
            continue
        min_x = min(min_x, p[0])
        max_x = max(max_x, p[0])
        min_y = min(min_y, p[1])
        max_y = max(max_y, p[1])

    if math.isinf(min_x) or math.isinf(max_x) or math.isinf(min_y) or math.isinf(max_y):
        return ORIGIN
    return ((min_x + max_x) / 2, (min_y + max_y) / 2)


def mean_center(centers: Sequence[Point | None]) -> Point:
    """Unweighted arithmetic mean of *centers*.

    Missing centers add nothing to the sum but still count in the divisor.
    An empty input yields the origin.
    """
    divisor = len(centers)
    if divisor == 0:
        return ORIGIN
    sum_x = sum(c[0] for c in centers if c is not None)
    sum_y = sum(c[1] for c in centers if c is not None)
    return (sum_x / divisor, sum_y / divisor)
