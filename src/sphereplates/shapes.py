"""Primitive plate outlines built in the tangent plane of a centre point.

Each vertex is the centre moved a fixed angular distance along a
tangent direction, so the shapes are regular on the sphere rather than
in latitude/longitude.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from .models import GeoPoint, SphericalPolygon
from .sphere import tangent_basis, to_geo_point, to_unit_vector


def _offset(center: np.ndarray, direction: np.ndarray, angle: float) -> GeoPoint:
    return to_geo_point(math.cos(angle) * center + math.sin(angle) * direction)


def _ring(
    center: GeoPoint, offsets: Sequence[Tuple[float, float, float]]
) -> SphericalPolygon:
    """Polygon from ``(dx, dy, angle)`` triples in the centre's tangent frame."""
    c = to_unit_vector(center)
    right, up = tangent_basis(c)
    vertices = []
    for dx, dy, angle in offsets:
        direction = dx * right + dy * up
        direction = direction / np.linalg.norm(direction)
        vertices.append(_offset(c, direction, angle))
    return SphericalPolygon(tuple(vertices))


def circular_plate(center: GeoPoint, radius_deg: float, segments: int = 32) -> SphericalPolygon:
    """Regular *segments*-gon inscribed in the small circle of *radius_deg* around *center*.

    Vertices run counter-clockwise seen from outside the globe.
    """
    if segments < 3:
        raise ValueError("segments must be >= 3")
    if not 0.0 < radius_deg < 90.0:
        raise ValueError("radius_deg must be in (0, 90)")
    arc = math.radians(radius_deg)
    offsets = []
    for i in range(segments):
        a = 2.0 * math.pi * i / segments
        offsets.append((math.cos(a), math.sin(a), arc))
    return _ring(center, offsets)


def square_plate(center: GeoPoint, size_deg: float = 10.0) -> SphericalPolygon:
    """Square whose sides measure roughly *size_deg* near *center*.

    Corners sit half a diagonal away from the centre, counter-clockwise
    starting bottom-left in the local east/north frame.
    """
    if not 0.0 < size_deg < 120.0:
        raise ValueError("size_deg must be in (0, 120)")
    half_diagonal = math.radians(size_deg) / 2.0 * math.sqrt(2.0)
    corners = [(-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)]
    return _ring(center, [(dx, dy, half_diagonal) for dx, dy in corners])
