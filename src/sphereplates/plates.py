"""Plate meshing pipeline — polygon in, renderable :class:`~models.PlateMesh` out.

Usage
-----
>>> from sphereplates.plates import build_plate_mesh, DEFAULT_PLATE
>>> plate_mesh = build_plate_mesh(plate, DEFAULT_PLATE, rng=42)
>>> plate_mesh.mesh.positions, plate_mesh.mesh.triangles, plate_mesh.outline

Batches spawn one independent random stream per plate from a single
seed, so a batch is reproducible and each plate's mesh does not depend
on which other plates were built alongside it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import numpy as np

from .errors import InsufficientVerticesError, PlateError, PolygonExtentError
from .great_circle import outline_positions
from .grid import DEFAULT_GRID, GridConfig, RandomSource, generate_interior_samples
from .models import Color, Mesh, Plate, PlateMesh, SphericalPolygon
from .sphere import polygon_angular_size
from .triangulate import triangulate, triangulate_outline

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PlateConfig:
    """Settings for turning a plate outline into a mesh.

    Attributes
    ----------
    radius : float
        Shell radius; slightly above 1 so plates float over the globe.
    outline_segments : int
        Arc segments per edge of the boundary line.
    base_density : int
        Boundary sampling density handed to the grid generator.
    grid : GridConfig
        Ring sampler constants.
    interior : bool
        Sample the interior.  When *False* only the polygon's own
        vertices are ear-clipped.
    clip_to_polygon : bool
        Drop triangles whose centre falls outside the polygon.
    shade_vertices : bool
        Attach per-vertex colours darkening away from the centre.
    shade_falloff : float
        Brightness lost at the vertex farthest from the centre.
    max_extent_deg : float
        Polygons whose vertices span this many degrees or more are rejected.
    """

    radius: float = 1.02
    outline_segments: int = 30
    base_density: int = 10
    grid: GridConfig = DEFAULT_GRID
    interior: bool = True
    clip_to_polygon: bool = True
    shade_vertices: bool = False
    shade_falloff: float = 0.35
    max_extent_deg: float = 180.0


DEFAULT_PLATE = PlateConfig()

OUTLINE_ONLY = PlateConfig(interior=False)


# ═══════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════


def validate_polygon(polygon: SphericalPolygon, max_extent_deg: float = 180.0) -> float:
    """Check *polygon* can be meshed; return its angular extent in degrees.

    Raises
    ------
    InsufficientVerticesError
        Fewer than three vertices.
    PlateError
        A vertex latitude lies outside ``[-90, 90]`` (or is NaN).
    PolygonExtentError
        Two vertices are at least *max_extent_deg* apart.
    """
    if len(polygon) < 3:
        raise InsufficientVerticesError(len(polygon))
    for index, vertex in enumerate(polygon):
        if not -90.0 <= vertex.lat <= 90.0:
            raise PlateError(f"Vertex {index} latitude {vertex.lat} is outside [-90, 90]")
    extent = polygon_angular_size(polygon.vertices)
    if extent >= max_extent_deg - 1e-9:
        raise PolygonExtentError(extent, max_extent_deg)
    return extent


# ═══════════════════════════════════════════════════════════════════
# Decoration
# ═══════════════════════════════════════════════════════════════════


def shade_by_distance(mesh: Mesh, color: Color, falloff: float = 0.35) -> Mesh:
    """Return *mesh* with per-vertex colours fading away from vertex 0.

    Brightness drops linearly with chordal distance from the anchor
    vertex, reaching ``1 - falloff`` at the farthest vertex.
    """
    if mesh.vertex_count == 0:
        return replace(mesh, colors=np.zeros((0, 3)))
    distances = np.linalg.norm(mesh.positions - mesh.positions[0], axis=1)
    peak = float(distances.max())
    weights = distances / peak if peak > 0 else np.zeros_like(distances)
    brightness = 1.0 - falloff * weights
    colors = np.clip(np.outer(brightness, np.asarray(color, dtype=float)), 0.0, 1.0)
    return replace(mesh, colors=colors)


# ═══════════════════════════════════════════════════════════════════
# Builders
# ═══════════════════════════════════════════════════════════════════


def build_plate_mesh(
    plate: Plate,
    config: PlateConfig = DEFAULT_PLATE,
    rng: RandomSource = None,
) -> Optional[PlateMesh]:
    """Mesh one plate.

    Returns *None* when the plate has fewer than three vertices.  A plate
    whose samples project degenerately comes back with an empty mesh.

    Raises
    ------
    PlateError
        A vertex latitude is out of range.
    PolygonExtentError
        The polygon spans *config.max_extent_deg* or more.
    """
    polygon = plate.polygon
    try:
        validate_polygon(polygon, config.max_extent_deg)
    except InsufficientVerticesError as exc:
        logger.warning("Skipping plate %r: %s", plate.id, exc)
        return None

    outline = outline_positions(polygon, config.radius, config.outline_segments)

    if config.interior:
        cloud = generate_interior_samples(polygon, config.base_density, rng, config.grid)
        boundary = polygon if config.clip_to_polygon else None
        mesh = triangulate(cloud, radius=config.radius, boundary=boundary)
        point_count = len(cloud)
    else:
        mesh = triangulate_outline(polygon, radius=config.radius)
        point_count = len(polygon)

    if mesh.is_empty:
        logger.info("Plate %r produced no triangles from %d points", plate.id, point_count)

    if config.shade_vertices:
        mesh = shade_by_distance(mesh, plate.color, config.shade_falloff)

    logger.debug(
        "Plate %r: %d points, %d vertices, %d triangles",
        plate.id, point_count, mesh.vertex_count, mesh.triangle_count,
    )
    return PlateMesh(
        plate_id=plate.id,
        mesh=mesh,
        outline=outline,
        color=plate.color,
        point_count=point_count,
    )


def spawn_rngs(seed: Optional[int], count: int) -> List[np.random.Generator]:
    """*count* independent generators derived from one *seed*."""
    children = np.random.SeedSequence(seed).spawn(count)
    return [np.random.default_rng(child) for child in children]


def build_plate_meshes(
    plates: Sequence[Plate],
    config: PlateConfig = DEFAULT_PLATE,
    seed: Optional[int] = None,
) -> List[PlateMesh]:
    """Mesh every plate, skipping (and logging) the ones that cannot be meshed.

    Plate *i* always receives the *i*-th stream spawned from *seed*.
    """
    results: List[PlateMesh] = []
    for plate, rng in zip(plates, spawn_rngs(seed, len(plates))):
        try:
            plate_mesh = build_plate_mesh(plate, config, rng)
        except PlateError as exc:
            logger.warning("Skipping plate %r: %s", plate.id, exc)
            continue
        if plate_mesh is not None:
            results.append(plate_mesh)
    logger.info("Built %d of %d plate meshes", len(results), len(plates))
    return results

