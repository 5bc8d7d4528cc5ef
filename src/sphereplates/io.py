from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .errors import PayloadError
from .models import Color, Plate, SphericalPolygon

PathLike = Union[str, Path]

DEFAULT_COLOR: Color = (1.0, 0.33, 0.2)


def parse_color(value: Any) -> Color:
    """Accept ``[r, g, b]`` in ``0..1``, ``"#rrggbb"`` or a ``0xRRGGBB`` integer."""
    if value is None:
        return DEFAULT_COLOR
    if isinstance(value, str):
        text = value.lstrip("#")
        if len(text) != 6:
            raise PayloadError(f"Bad colour string: {value!r}")
        try:
            value = int(text, 16)
        except ValueError as exc:
            raise PayloadError(f"Bad colour string: {value!r}") from exc
    if isinstance(value, int) and not isinstance(value, bool):
        return ((value >> 16 & 0xFF) / 255.0, (value >> 8 & 0xFF) / 255.0, (value & 0xFF) / 255.0)
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    raise PayloadError(f"Bad colour: {value!r}")


def plates_from_dict(data: Dict[str, Any]) -> List[Plate]:
    entries = data.get("plates") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise PayloadError("Payload must have a 'plates' list")
    plates: List[Plate] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PayloadError(f"Plate {index} must be an object")
        points = entry.get("points")
        if not isinstance(points, list):
            raise PayloadError(f"Plate {index} has no 'points' list")
        try:
            polygon = SphericalPolygon.from_lat_lon(points)
        except (TypeError, ValueError, IndexError) as exc:
            raise PayloadError(f"Plate {index} has malformed points") from exc
        plate_id = str(entry.get("id", f"plate{index}"))
        plates.append(Plate(id=plate_id, polygon=polygon, color=parse_color(entry.get("color"))))
    return plates


def plates_to_dict(plates: Sequence[Plate]) -> Dict[str, Any]:
    return {
        "plates": [
            {
                "id": plate.id,
                "color": [round(c, 4) for c in plate.color],
                "points": [[p.lat, p.lon] for p in plate.polygon],
            }
            for plate in plates
        ]
    }


def load_plates_json(path: PathLike) -> List[Plate]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return plates_from_dict(data)


def save_plates_json(plates: Sequence[Plate], path: PathLike) -> None:
    Path(path).write_text(json.dumps(plates_to_dict(plates), indent=2), encoding="utf-8")
