"""Tangent-plane projection and triangulation.

Planar triangulators need 2-D input, so the sampled points are projected
onto the plane tangent to the sphere at their centroid.  Scattered point
clouds go through ``scipy.spatial.Delaunay``; ordered simple polygons
(a plate's own vertex ring) go through :func:`earclip`.

Triangles always come out counter-clockwise in the tangent plane, which
is outward facing on the sphere.

Functions
---------
- :func:`project_to_tangent_plane` — 3-D unit vectors → 2-D plane coords
- :func:`earclip` — ear-clipping triangulation of a simple polygon
- :func:`triangulate` — point cloud → :class:`~models.Mesh`
- :func:`triangulate_outline` — polygon vertices → :class:`~models.Mesh`
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.spatial import Delaunay, QhullError

from .containment import winding_around
from .models import GeoPoint, Mesh, PointCloud, SphericalPolygon
from .sphere import normalize, spherical_centroid, tangent_basis, to_unit_vectors

logger = logging.getLogger(__name__)

_AREA_EPSILON = 1e-14


# ═══════════════════════════════════════════════════════════════════
# Projection
# ═══════════════════════════════════════════════════════════════════


@dataclass
class TangentProjection:
    """Points flattened onto the tangent plane at *origin*.

    ``coords[i]`` is ``((v_i - origin) · right, (v_i - origin) · up)``.
    """

    origin: np.ndarray
    right: np.ndarray
    up: np.ndarray
    coords: np.ndarray

    def signed_areas(self, triangles: np.ndarray) -> np.ndarray:
        """Signed planar area of each triangle (positive = counter-clockwise)."""
        if len(triangles) == 0:
            return np.zeros(0)
        a = self.coords[triangles[:, 0]]
        b = self.coords[triangles[:, 1]]
        c = self.coords[triangles[:, 2]]
        return 0.5 * ((b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1])
                      - (c[:, 0] - a[:, 0]) * (b[:, 1] - a[:, 1]))

    def area(self, triangles: np.ndarray) -> float:
        """Total planar area covered by *triangles*."""
        return float(np.abs(self.signed_areas(triangles)).sum())

    def is_degenerate(self, tolerance: float = 1e-12) -> bool:
        """True when the projected points are coincident or collinear."""
        if len(self.coords) < 3:
            return True
        centred = self.coords - self.coords.mean(axis=0)
        singular = np.linalg.svd(centred, compute_uv=False)
        return bool(singular[-1] <= tolerance * max(float(singular[0]), 1.0))


def project_to_tangent_plane(
    vectors: np.ndarray,
    origin: Optional[np.ndarray] = None,
) -> TangentProjection:
    """Project unit vectors onto the tangent plane at *origin*.

    *origin* defaults to the renormalised mean of *vectors*.
    """
    vectors = np.asarray(vectors, dtype=float).reshape(-1, 3)
    if origin is None:
        origin = normalize(vectors.sum(axis=0)) if len(vectors) else np.array([0.0, 1.0, 0.0])
    right, up = tangent_basis(origin)
    offsets = vectors - origin
    coords = np.column_stack([offsets @ right, offsets @ up]) if len(vectors) else np.zeros((0, 2))
    return TangentProjection(origin=origin, right=right, up=up, coords=coords)


# ═══════════════════════════════════════════════════════════════════
# Ear clipping
# ═══════════════════════════════════════════════════════════════════


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def _point_in_triangle(p: np.ndarray, a: np.ndarray, b: np.ndarray, c: np.ndarray) -> bool:
    """Inclusive test for a counter-clockwise triangle."""
    return (
        _cross(a, b, p) >= -_AREA_EPSILON
        and _cross(b, c, p) >= -_AREA_EPSILON
        and _cross(c, a, p) >= -_AREA_EPSILON
    )


def earclip(coords: Sequence[Sequence[float]]) -> List[Tuple[int, int, int]]:
    """Triangulate a simple polygon given as an ordered ring of 2-D points.

    Holes are not supported.  Either winding is accepted; output triangles
    are counter-clockwise.  Collinear vertices are dropped without
    emitting a zero-area triangle, so a fully collinear ring yields ``[]``.
    """
    pts = np.asarray(coords, dtype=float).reshape(-1, 2)
    n = len(pts)
    if n < 3:
        return []

    order = list(range(n))
    signed = 0.0
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        signed += x1 * y2 - x2 * y1
    if signed < 0:
        order.reverse()

    triangles: List[Tuple[int, int, int]] = []
    while len(order) > 3:
        m = len(order)
        for k in range(m):
            i_prev, i_cur, i_next = order[k - 1], order[k], order[(k + 1) % m]
            a, b, c = pts[i_prev], pts[i_cur], pts[i_next]
            turn = _cross(a, b, c)
            if abs(turn) <= _AREA_EPSILON:
                del order[k]
                break
            if turn < 0:
                continue
            if any(
                _point_in_triangle(pts[j], a, b, c)
                for j in order
                if j not in (i_prev, i_cur, i_next)
            ):
                continue
            triangles.append((i_prev, i_cur, i_next))
            del order[k]
            break
        else:
            # No ear anywhere: the ring self-intersects.
            logger.debug("earclip stalled with %d vertices left", len(order))
            return triangles

    if len(order) == 3:
        a, b, c = (pts[i] for i in order)
        if abs(_cross(a, b, c)) > _AREA_EPSILON:
            triangles.append((order[0], order[1], order[2]))
    return triangles


# ═══════════════════════════════════════════════════════════════════
# Mesh builders
# ═══════════════════════════════════════════════════════════════════


def _anchor_first(vectors: np.ndarray, origin: np.ndarray) -> np.ndarray:
    """Index order that puts the point nearest *origin* first."""
    anchor = int(np.argmax(vectors @ origin))
    order = np.arange(len(vectors))
    if anchor:
        order = np.concatenate([[anchor], order[:anchor], order[anchor + 1:]])
    return order


def _orient(projection: TangentProjection, triangles: np.ndarray) -> np.ndarray:
    """Drop zero-area triangles and flip clockwise ones."""
    if len(triangles) == 0:
        return triangles.reshape(0, 3).astype(np.int64)
    areas = projection.signed_areas(triangles)
    keep = np.abs(areas) > _AREA_EPSILON
    triangles = triangles[keep].astype(np.int64)
    flip = areas[keep] < 0
    triangles[flip] = triangles[flip][:, [0, 2, 1]]
    return triangles


def triangulate(
    cloud: Union[PointCloud, Iterable[GeoPoint]],
    radius: float = 1.0,
    boundary: Optional[SphericalPolygon] = None,
) -> Mesh:
    """Triangulate a point cloud into a sphere-draped mesh.

    Parameters
    ----------
    cloud : PointCloud or iterable of GeoPoint
        Samples to connect.  The sample nearest the cloud centroid
        becomes vertex 0.
    radius : float
        Shell radius the output positions are scaled to.
    boundary : SphericalPolygon, optional
        When given, triangles whose centre falls outside it are removed,
        so concave plates do not get their notches filled in.

    Returns
    -------
    Mesh
        Empty when fewer than three points are given.  A degenerate
        (collinear or coincident) projection keeps its positions but has
        no triangles.
    """
    points = list(cloud)
    if len(points) < 3:
        return Mesh.empty()

    vectors = to_unit_vectors(points)
    origin = normalize(vectors.sum(axis=0))
    vectors = vectors[_anchor_first(vectors, origin)]
    projection = project_to_tangent_plane(vectors, origin)
    positions = vectors * radius

    if projection.is_degenerate():
        logger.debug("degenerate projection for %d points", len(points))
        return Mesh(positions=positions, triangles=np.zeros((0, 3), dtype=np.int64))

    try:
        simplices = Delaunay(projection.coords).simplices
    except QhullError as exc:
        logger.debug("qhull rejected %d points: %s", len(points), exc)
        return Mesh(positions=positions, triangles=np.zeros((0, 3), dtype=np.int64))

    triangles = _orient(projection, np.asarray(simplices))

    if boundary is not None and len(triangles):
        ring = to_unit_vectors(boundary.vertices)
        centroid = spherical_centroid(boundary.vertices)
        centres = vectors[triangles].sum(axis=1)
        keep = np.array(
            [winding_around(normalize(c), ring, centroid) != 0 for c in centres], dtype=bool,
        )
        triangles = triangles[keep]

    return Mesh(positions=positions, triangles=triangles)


def triangulate_outline(polygon: SphericalPolygon, radius: float = 1.0) -> Mesh:
    """Ear-clip a polygon's own vertex ring, with no interior samples."""
    if len(polygon) < 3:
        return Mesh.empty()
    vectors = to_unit_vectors(polygon.vertices)
    projection = project_to_tangent_plane(vectors)
    triangles = np.array(earclip(projection.coords), dtype=np.int64).reshape(-1, 3)
    return Mesh(positions=vectors * radius, triangles=triangles)
