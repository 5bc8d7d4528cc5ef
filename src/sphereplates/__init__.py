"""sphereplates — polygon plates draped on a globe.

Public API is organised into layers:

- **Core** — models, spherical kernel, great-circle arcs, containment
- **Meshing** — adaptive interior sampling, tangent-plane triangulation
- **Plates** — per-plate pipeline, primitive shapes, configuration
- **I/O** — plate JSON ingestion and mesh export
- **Rendering** — PNG preview (requires matplotlib)
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import GeoPoint, SphericalPolygon, PointCloud, Mesh, Plate, PlateMesh
from .errors import PlateError, InsufficientVerticesError, PolygonExtentError, PayloadError
from .sphere import (
    to_unit_vector,
    to_geo_point,
    to_render_position,
    angle_between,
    angular_distance,
    polygon_angular_size,
    spherical_centroid,
    rotate_about_axis,
    nlerp,
    slerp,
    tangent_basis,
)
from .great_circle import interpolate_arc, polygon_outline, outline_positions
from .containment import winding_number, winding_around, is_inside

# ── Meshing ─────────────────────────────────────────────────────────
from .grid import (
    GridConfig,
    GridParameters,
    DEFAULT_GRID,
    DENSE_GRID,
    COARSE_GRID,
    grid_parameters,
    generate_interior_samples,
)
from .triangulate import (
    TangentProjection,
    project_to_tangent_plane,
    earclip,
    triangulate,
    triangulate_outline,
)

# ── Plates ──────────────────────────────────────────────────────────
from .plates import (
    PlateConfig,
    DEFAULT_PLATE,
    OUTLINE_ONLY,
    validate_polygon,
    shade_by_distance,
    build_plate_mesh,
    build_plate_meshes,
)
from .shapes import circular_plate, square_plate

# ── I/O ─────────────────────────────────────────────────────────────
from .io import load_plates_json, save_plates_json
from .export import export_payload, export_json, validate_payload

# ── Logging ─────────────────────────────────────────────────────────
from .logging_config import setup_logging

# ── Rendering (requires matplotlib) ────────────────────────────────
from .render import render_png

__version__ = "0.1.0"
