from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np

from .models import PlateMesh


def render_png(
    plate_meshes: Sequence[PlateMesh],
    output_path: str | Path,
    face_alpha: float = 0.8,
    edge_color: str = "#ffffff",
    edge_alpha: float = 0.15,
    outline_color: str = "#ffffff",
    globe_color: str = "#223344",
    show_globe: bool = True,
    elevation: float = 20.0,
    azimuth: float = -60.0,
    dpi: int = 150,
) -> None:
    """Render plate meshes over a globe to PNG.

    Requires matplotlib; imported lazily to keep core package lightweight.
    """
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from mpl_toolkits.mplot3d.art3d import Poly3DCollection
    except ImportError as exc:  # pragma: no cover - requires optional dep
        raise RuntimeError(
            "matplotlib is required for rendering. Install with `pip install matplotlib`."
        ) from exc

    fig = plt.figure(figsize=(6, 6), facecolor="#000000")
    ax = fig.add_subplot(projection="3d")
    ax.set_facecolor("#000000")

    if show_globe:
        _draw_globe(ax, globe_color)

    for plate_mesh in plate_meshes:
        _draw_plate(ax, plate_mesh, Poly3DCollection, face_alpha, edge_color, edge_alpha)
        outline = plate_mesh.outline
        if len(outline):
            # Renderer space is y-up; matplotlib's 3-D axes are z-up.
            line = _z_up(outline)
            ax.plot(line[:, 0], line[:, 1], line[:, 2], color=outline_color, linewidth=1.0)

    ax.set_box_aspect((1, 1, 1))
    ax.set_xlim(-1.1, 1.1)
    ax.set_ylim(-1.1, 1.1)
    ax.set_zlim(-1.1, 1.1)
    ax.view_init(elev=elevation, azim=azimuth)
    ax.axis("off")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight", pad_inches=0)
    plt.close(fig)


def _draw_globe(ax, color: str) -> None:
    u = np.linspace(0.0, 2.0 * np.pi, 48)
    v = np.linspace(0.0, np.pi, 24)
    x = np.outer(np.cos(u), np.sin(v))
    y = np.outer(np.sin(u), np.sin(v))
    z = np.outer(np.ones_like(u), np.cos(v))
    ax.plot_surface(x, y, z, color=color, linewidth=0, alpha=0.6, shade=True)


def _draw_plate(
    ax,
    plate_mesh: PlateMesh,
    collection_cls,
    face_alpha: float,
    edge_color: str,
    edge_alpha: float,
) -> None:
    from matplotlib.colors import to_rgba

    mesh = plate_mesh.mesh
    if mesh.is_empty:
        return
    faces = _z_up(mesh.positions)[mesh.triangles]
    if mesh.colors is not None:
        face_colors = mesh.colors[mesh.triangles].mean(axis=1)
    else:
        face_colors = [plate_mesh.color] * len(faces)
    collection = collection_cls(faces, facecolors=face_colors, alpha=face_alpha)
    collection.set_edgecolor(to_rgba(edge_color, edge_alpha))
    ax.add_collection3d(collection)


def _z_up(points: np.ndarray) -> np.ndarray:
    """Rotate y-up render coordinates into matplotlib's z-up frame."""
    return np.column_stack([points[:, 0], -points[:, 2], points[:, 1]])
