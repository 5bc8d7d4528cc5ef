"""Great-circle interpolation.

Functions
---------
- :func:`interpolate_arc` — evenly spaced points along the short arc
- :func:`polygon_outline` — closed boundary line of a polygon
- :func:`outline_positions` — outline scaled to the render shell
"""

from __future__ import annotations

from typing import List

import numpy as np

from .models import GeoPoint, SphericalPolygon
from .sphere import angle_between, rotate_about_axis, to_geo_point, to_render_position, to_unit_vector

_AXIS_EPSILON = 1e-12


def interpolate_arc(a: GeoPoint, b: GeoPoint, segments: int) -> List[GeoPoint]:
    """Return ``segments + 1`` points walking the great circle from *a* to *b*.

    The first and last entries are *a* and *b* themselves.  Intermediate
    points come from rotating *a* about the ``a × b`` axis.  When that axis
    is undefined (coincident or antipodal endpoints) the result is *a*
    repeated ``segments + 1`` times.
    """
    if segments < 0:
        raise ValueError("segments must be >= 0")

    va = to_unit_vector(a)
    vb = to_unit_vector(b)
    axis = np.cross(va, vb)
    if np.linalg.norm(axis) < _AXIS_EPSILON:
        return [a] * (segments + 1)
    if segments == 0:
        return [a]

    angle = angle_between(va, vb)
    points = [a]
    for i in range(1, segments):
        t = i / segments
        points.append(to_geo_point(rotate_about_axis(va, axis, angle * t)))
    points.append(b)
    return points


def polygon_outline(polygon: SphericalPolygon, segments: int = 30) -> List[GeoPoint]:
    """Closed boundary line through every edge of *polygon*.

    Shared corners appear once; the line ends back on the first vertex,
    so the result holds ``len(polygon) * segments + 1`` points.
    """
    if len(polygon) == 0:
        return []
    line: List[GeoPoint] = [polygon.vertices[0]]
    for start, end in polygon.edges():
        line.extend(interpolate_arc(start, end, segments)[1:])
    return line


def outline_positions(
    polygon: SphericalPolygon, radius: float, segments: int = 30
) -> np.ndarray:
    """:func:`polygon_outline` as an ``(K, 3)`` array on the render shell."""
    line = polygon_outline(polygon, segments)
    if not line:
        return np.zeros((0, 3))
    return np.vstack([to_render_position(p, radius) for p in line])
