"""Point-in-polygon test on the sphere.

Each polygon edge is an arc of the great circle whose plane normal is
``n = p1 × p2``.  Seen from the test point ``q``, the edge subtends a
signed angle whose sign is the sign of ``n · q`` (which side of the
edge's plane ``q`` lies on) and whose size is the angle between the
tangent directions from ``q`` towards ``p1`` and ``p2``.  Summing these
angles around the ring gives ``2π`` times the winding number.

A ring that winds around ``q`` also winds around ``-q``; the one it
actually encloses is the one on the polygon's side of the sphere, so a
point in the hemisphere opposite the polygon centroid never counts as
inside.  Polygons are expected to stay well inside a hemisphere.

Functions
---------
- :func:`winding_number` — signed winding count of the ring around a point
- :func:`winding_around` — the same on pre-converted unit vectors
- :func:`is_inside` — ``winding_number != 0``
"""

from __future__ import annotations

import math

import numpy as np

from .models import GeoPoint, SphericalPolygon
from .sphere import spherical_centroid, to_unit_vector, to_unit_vectors


def edge_turns(q: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """Signed angle (radians) each edge ``ring[i] → ring[i+1]`` sweeps as seen from *q*."""
    nxt = np.roll(ring, -1, axis=0)
    t1 = ring - np.outer(ring @ q, q)
    t2 = nxt - np.outer(nxt @ q, q)
    side = np.cross(ring, nxt) @ q
    return np.arctan2(side, np.einsum("ij,ij->i", t1, t2))


def winding_around(q: np.ndarray, ring: np.ndarray, centroid: np.ndarray) -> int:
    """Winding number of the unit-vector *ring* around unit vector *q*.

    Callers testing many points against one polygon convert the ring and
    its *centroid* once and call this directly.
    """
    if len(ring) < 3 or float(np.dot(q, centroid)) <= 0.0:
        return 0
    total = float(edge_turns(q, ring).sum())
    return int(round(total / (2.0 * math.pi)))


def winding_number(point: GeoPoint, polygon: SphericalPolygon) -> int:
    """How many times *polygon* winds around *point*.

    Positive for counter-clockwise rings seen from outside the sphere,
    negative for clockwise ones.  Reversing the ring flips the sign;
    rotating its start vertex changes nothing.
    """
    if len(polygon) < 3:
        return 0
    return winding_around(
        to_unit_vector(point),
        to_unit_vectors(polygon.vertices),
        spherical_centroid(polygon.vertices),
    )


def is_inside(point: GeoPoint, polygon: SphericalPolygon) -> bool:
    """True when *point* lies inside *polygon*.

    Points exactly on an edge may land either way.
    """
    return winding_number(point, polygon) != 0
