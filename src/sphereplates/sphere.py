"""Spherical coordinate kernel.

Every conversion between ``(lat, lon)`` and Cartesian space goes through
this module so the whole package shares one axis convention:

* ``+y`` is the north pole,
* ``(lat=0, lon=0)`` maps to ``+x``,
* ``(lat=0, lon=90)`` maps to ``-z``, so a map seen from outside the
  globe is not mirrored.

Unit vectors are plain ``numpy`` arrays of shape ``(3,)``.

Functions
---------
- :func:`to_unit_vector` / :func:`to_geo_point` — the core conversions
- :func:`to_render_position` — unit vector scaled by the plate radius
- :func:`angle_between`, :func:`angular_distance` — arc lengths
- :func:`rotate_about_axis`, :func:`nlerp`, :func:`slerp` — vector motion
- :func:`spherical_centroid`, :func:`polygon_angular_size` — polygon measures
- :func:`tangent_basis` — orthonormal frame of the tangent plane
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

from .models import GeoPoint

NORTH = np.array([0.0, 1.0, 0.0])
"""Unit vector of the north pole (``lat=90``)."""

EPSILON = 1e-12


# ═══════════════════════════════════════════════════════════════════
# Conversions
# ═══════════════════════════════════════════════════════════════════

def to_unit_vector(point: GeoPoint) -> np.ndarray:
    """Map a :class:`GeoPoint` to a unit vector.

    Longitude is used as-is, so wrapped inputs such as ``lon=540``
    land on the same vector as ``lon=180``.
    """
    lat = math.radians(point.lat)
    lon = math.radians(point.lon)
    cos_lat = math.cos(lat)
    return np.array([cos_lat * math.cos(lon), math.sin(lat), -cos_lat * math.sin(lon)])


def to_geo_point(vector: Sequence[float]) -> GeoPoint:
    """Inverse of :func:`to_unit_vector`.

    The input is renormalised first.  At the poles longitude is undefined
    and comes back as whatever ``atan2`` gives for the residual ``x, z``
    (usually ``0``).  A zero vector maps to ``(0, 0)``.
    """
    v = np.asarray(vector, dtype=float)
    norm = float(np.linalg.norm(v))
    if norm < EPSILON:
        return GeoPoint(0.0, 0.0)
    x, y, z = v / norm
    lat = math.degrees(math.asin(max(-1.0, min(1.0, y))))
    lon = math.degrees(math.atan2(-z, x))
    return GeoPoint(lat, lon)


def to_render_position(point: GeoPoint, radius: float) -> np.ndarray:
    """Position of *point* on a sphere of *radius* (the plate shell)."""
    return to_unit_vector(point) * radius


def to_unit_vectors(points: Iterable[GeoPoint]) -> np.ndarray:
    """Stack of unit vectors, shape ``(N, 3)``."""
    vectors = [to_unit_vector(p) for p in points]
    if not vectors:
        return np.zeros((0, 3))
    return np.vstack(vectors)


def normalize(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    if norm < EPSILON:
        return np.array(vector, dtype=float)
    return vector / norm


# ═══════════════════════════════════════════════════════════════════
# Angles
# ═══════════════════════════════════════════════════════════════════

def angle_between(u: np.ndarray, v: np.ndarray) -> float:
    """Angle in radians between two unit vectors.

    The dot product is clamped to ``[-1, 1]`` so rounding overshoot
    never turns into ``nan``.
    """
    dot = float(np.dot(u, v))
    return math.acos(max(-1.0, min(1.0, dot)))


def angular_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in radians."""
    return angle_between(to_unit_vector(a), to_unit_vector(b))


def polygon_angular_size(points: Sequence[GeoPoint]) -> float:
    """Largest pairwise angular distance between vertices, in degrees."""
    vectors = to_unit_vectors(points)
    if len(vectors) < 2:
        return 0.0
    dots = np.clip(vectors @ vectors.T, -1.0, 1.0)
    return math.degrees(math.acos(float(dots.min())))


def spherical_centroid(points: Sequence[GeoPoint]) -> np.ndarray:
    """Renormalised sum of vertex unit vectors.

    If the vectors cancel out the first vertex is returned instead.
    """
    vectors = to_unit_vectors(points)
    if len(vectors) == 0:
        return NORTH.copy()
    total = vectors.sum(axis=0)
    if np.linalg.norm(total) < EPSILON:
        return vectors[0].copy()
    return normalize(total)


# ═══════════════════════════════════════════════════════════════════
# Motion on the sphere
# ═══════════════════════════════════════════════════════════════════

def rotate_about_axis(vector: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation of *vector* about *axis* by *angle* radians.

    A zero-length axis leaves the vector unchanged.
    """
    norm = float(np.linalg.norm(axis))
    if norm < EPSILON:
        return np.array(vector, dtype=float)
    k = axis / norm
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        vector * cos_a
        + np.cross(k, vector) * sin_a
        + k * float(np.dot(k, vector)) * (1.0 - cos_a)
    )


def nlerp(u: np.ndarray, v: np.ndarray, t: float) -> np.ndarray:
    """Linear blend of two unit vectors, pushed back onto the sphere."""
    blended = u * (1.0 - t) + v * t
    if np.linalg.norm(blended) < EPSILON:
        return np.array(u, dtype=float)
    return normalize(blended)


def slerp(u: np.ndarray, v: np.ndarray, t: float) -> np.ndarray:
    """Constant-speed interpolation along the arc from *u* to *v*."""
    omega = angle_between(u, v)
    sin_omega = math.sin(omega)
    if sin_omega < 1e-9:
        return nlerp(u, v, t)
    return (math.sin((1.0 - t) * omega) * u + math.sin(t * omega) * v) / sin_omega


def tangent_basis(
    forward: np.ndarray, world_up: np.ndarray = NORTH
) -> Tuple[np.ndarray, np.ndarray]:
    """``(right, up)`` spanning the tangent plane at *forward*.

    ``right = world_up × forward`` and ``up = forward × right``.  When
    *forward* is parallel to *world_up* the ``+x`` axis stands in for it.
    ``(right, up, forward)`` is right-handed, so counter-clockwise in the
    plane faces outward.
    """
    right = np.cross(world_up, forward)
    if np.linalg.norm(right) < 1e-9:
        right = np.cross(np.array([1.0, 0.0, 0.0]), forward)
    right = normalize(right)
    up = normalize(np.cross(forward, right))
    return right, up
