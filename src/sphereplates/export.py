"""Mesh export — JSON payload for the external renderer.

Functions
---------
- :func:`export_payload` — build the export dict
- :func:`export_json` — write the payload to a JSON file
- :func:`validate_payload` — structural checks on a loaded payload
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .models import PlateMesh

_EXPORT_VERSION = "1.0"


def export_payload(
    plate_meshes: Sequence[PlateMesh],
    *,
    radius: float,
    seed: int | None = None,
    include_normals: bool = False,
    decimals: int = 6,
) -> Dict[str, Any]:
    """Build a JSON-serialisable description of every plate mesh.

    The returned dict has two top-level keys:

    ``metadata``
        Format version, shell radius, seed and totals.
    ``plates``
        One entry per plate with ``positions`` (flat ``[x, y, z, …]``),
        ``triangles`` (flat index list), ``outline`` (flat positions),
        ``color`` and, optionally, ``normals`` and ``colors``.
    """
    plates: List[Dict[str, Any]] = []
    for plate_mesh in plate_meshes:
        mesh = plate_mesh.mesh
        entry: Dict[str, Any] = {
            "id": plate_mesh.plate_id,
            "color": [round(c, 4) for c in plate_mesh.color],
            "point_count": plate_mesh.point_count,
            "vertex_count": mesh.vertex_count,
            "triangle_count": mesh.triangle_count,
            "positions": [round(float(v), decimals) for v in mesh.positions.ravel()],
            "triangles": [int(i) for i in mesh.triangles.ravel()],
            "outline": [round(float(v), decimals) for v in plate_mesh.outline.ravel()],
        }
        if include_normals:
            entry["normals"] = [round(float(v), decimals) for v in mesh.vertex_normals().ravel()]
        if mesh.colors is not None:
            entry["colors"] = [round(float(v), 4) for v in mesh.colors.ravel()]
        plates.append(entry)

    metadata = {
        "version": _EXPORT_VERSION,
        "generator": "sphereplates.export",
        "radius": radius,
        "seed": seed,
        "plate_count": len(plates),
        "vertex_count": sum(p["vertex_count"] for p in plates),
        "triangle_count": sum(p["triangle_count"] for p in plates),
    }
    return {"metadata": metadata, "plates": plates}


def export_json(
    plate_meshes: Sequence[PlateMesh],
    path: Union[str, Path],
    *,
    radius: float,
    seed: int | None = None,
    include_normals: bool = False,
    indent: int | None = None,
) -> Path:
    """Write :func:`export_payload` output to *path* and return the path."""
    payload = export_payload(
        plate_meshes, radius=radius, seed=seed, include_normals=include_normals,
    )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=indent), encoding="utf-8")
    return path


def validate_payload(payload: Dict[str, Any]) -> List[str]:
    """Return a list of problems with *payload*; empty means valid."""
    errors: List[str] = []
    for key in ("metadata", "plates"):
        if key not in payload:
            errors.append(f"missing top-level key '{key}'")
    if errors:
        return errors

    meta = payload["metadata"]
    for key in ("version", "radius", "plate_count"):
        if key not in meta:
            errors.append(f"metadata missing '{key}'")
    if meta.get("plate_count") != len(payload["plates"]):
        errors.append(
            f"plate_count {meta.get('plate_count')} != {len(payload['plates'])} plates"
        )

    for plate in payload["plates"]:
        pid = plate.get("id", "?")
        positions = plate.get("positions", [])
        triangles = plate.get("triangles", [])
        if len(positions) % 3:
            errors.append(f"plate {pid}: positions length {len(positions)} not a multiple of 3")
        if len(triangles) % 3:
            errors.append(f"plate {pid}: triangles length {len(triangles)} not a multiple of 3")
        n_vertices = len(positions) // 3
        if triangles and (min(triangles) < 0 or max(triangles) >= n_vertices):
            errors.append(f"plate {pid}: triangle index out of range for {n_vertices} vertices")
        if len(plate.get("color", [])) != 3:
            errors.append(f"plate {pid}: color must have 3 components")
        normals = plate.get("normals")
        if normals is not None and len(normals) != len(positions):
            errors.append(f"plate {pid}: normals length does not match positions")
    return errors
