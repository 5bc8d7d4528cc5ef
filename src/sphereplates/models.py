from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class GeoPoint:
    """A location on the sphere in degrees.

    Longitude may lie outside ``(-180, 180]``; the kernel wraps it.
    """

    lat: float
    lon: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class SphericalPolygon:
    """Closed ring of vertices joined by great-circle arcs.

    The last vertex connects back to the first; do not repeat it.
    """

    vertices: Tuple[GeoPoint, ...]

    @classmethod
    def from_lat_lon(cls, points: Iterable[Sequence[float]]) -> "SphericalPolygon":
        return cls(tuple(GeoPoint(float(p[0]), float(p[1])) for p in points))

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self.vertices)

    def edges(self) -> Iterator[Tuple[GeoPoint, GeoPoint]]:
        n = len(self.vertices)
        for i in range(n):
            yield self.vertices[i], self.vertices[(i + 1) % n]

    def reversed(self) -> "SphericalPolygon":
        return SphericalPolygon(tuple(reversed(self.vertices)))

    def rotated(self, k: int) -> "SphericalPolygon":
        """Same ring starting at vertex *k*."""
        if not self.vertices:
            return self
        k %= len(self.vertices)
        return SphericalPolygon(self.vertices[k:] + self.vertices[:k])


class PointCloud:
    """Insertion-ordered set of :class:`GeoPoint` with quantised keys.

    Coordinates are snapped to ``precision`` decimal places and keyed by
    the integer grid ``(round(lat * 10**precision), round(lon * 10**precision))``
    so near-duplicates from separate sampling passes collapse to one entry.
    """

    def __init__(self, points: Iterable[GeoPoint] = (), precision: int = 6) -> None:
        self.precision = precision
        self._scale = 10 ** precision
        self._points: Dict[Tuple[int, int], GeoPoint] = {}
        self.extend(points)

    def key(self, point: GeoPoint) -> Tuple[int, int]:
        return (int(round(point.lat * self._scale)), int(round(point.lon * self._scale)))

    def add(self, point: GeoPoint) -> bool:
        """Insert *point*; return *False* if it collapsed onto an existing key."""
        k = self.key(point)
        if k in self._points:
            return False
        self._points[k] = GeoPoint(k[0] / self._scale, k[1] / self._scale)
        return True

    def extend(self, points: Iterable[GeoPoint]) -> int:
        return sum(1 for p in points if self.add(p))

    def points(self) -> List[GeoPoint]:
        return list(self._points.values())

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points.values())

    def __contains__(self, point: object) -> bool:
        return isinstance(point, GeoPoint) and self.key(point) in self._points

    def __repr__(self) -> str:
        return f"PointCloud({len(self)} points, precision={self.precision})"


@dataclass
class Mesh:
    """Triangle mesh draped over the sphere.

    Attributes
    ----------
    positions : ndarray, shape (N, 3)
        Vertex positions in render space (unit vectors scaled by radius).
    triangles : ndarray, shape (M, 3)
        Vertex indices per triangle.
    colors : ndarray, shape (N, 3), optional
        Per-vertex RGB, when shading has been applied.
    """

    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    triangles: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))
    colors: Optional[np.ndarray] = None

    @classmethod
    def empty(cls) -> "Mesh":
        return cls()

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def triangle_areas(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(0)
        a = self.positions[self.triangles[:, 0]]
        b = self.positions[self.triangles[:, 1]]
        c = self.positions[self.triangles[:, 2]]
        return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)

    def surface_area(self) -> float:
        """Sum of flat triangle areas in render space."""
        return float(self.triangle_areas().sum())

    def vertex_normals(self) -> np.ndarray:
        """Area-weighted vertex normals; vertices without faces get their radial direction."""
        normals = np.zeros_like(self.positions, dtype=float)
        if not self.is_empty:
            a = self.positions[self.triangles[:, 0]]
            b = self.positions[self.triangles[:, 1]]
            c = self.positions[self.triangles[:, 2]]
            face_normals = np.cross(b - a, c - a)
            for corner in range(3):
                np.add.at(normals, self.triangles[:, corner], face_normals)
        lengths = np.linalg.norm(normals, axis=1)
        orphan = lengths < 1e-15
        if orphan.any():
            normals[orphan] = self.positions[orphan]
            lengths[orphan] = np.linalg.norm(self.positions[orphan], axis=1)
        lengths[lengths < 1e-15] = 1.0
        return normals / lengths[:, None]

    def validate(self) -> List[str]:
        errors: List[str] = []
        if self.positions.ndim != 2 or self.positions.shape[1] != 3:
            errors.append(f"positions must have shape (N, 3), got {self.positions.shape}")
        if self.triangles.ndim != 2 or self.triangles.shape[1] != 3:
            errors.append(f"triangles must have shape (M, 3), got {self.triangles.shape}")
            return errors
        if self.triangle_count:
            if self.triangles.min() < 0:
                errors.append("triangle index below zero")
            if self.triangles.max() >= self.vertex_count:
                errors.append(
                    f"triangle index {int(self.triangles.max())} out of range "
                    f"for {self.vertex_count} vertices"
                )
        if self.colors is not None and self.colors.shape != self.positions.shape:
            errors.append(
                f"colors shape {self.colors.shape} does not match positions {self.positions.shape}"
            )
        return errors


@dataclass(frozen=True)
class Plate:
    """One plate outline as handed over by the ingestion side."""

    id: str
    polygon: SphericalPolygon
    color: Color = (1.0, 0.33, 0.2)


@dataclass
class PlateMesh:
    """Everything the renderer needs for one plate."""

    plate_id: str
    mesh: Mesh
    outline: np.ndarray
    color: Color
    point_count: int = 0
