"""sphereplates command-line interface."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import PlateError
from .io import load_plates_json, save_plates_json
from .logging_config import setup_logging
from .models import GeoPoint, Plate
from .plates import DEFAULT_PLATE, PlateConfig, build_plate_meshes, validate_polygon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Spherical plate mesher")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", dest="log_file")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Mesh every plate and export JSON")
    build.add_argument("--in", dest="input_path", required=True)
    build.add_argument("--out", dest="output_path", required=True)
    build.add_argument("--seed", type=int, default=None)
    build.add_argument("--density", type=int, default=DEFAULT_PLATE.base_density)
    build.add_argument("--radius", type=float, default=DEFAULT_PLATE.radius)
    build.add_argument("--outline-segments", type=int, default=DEFAULT_PLATE.outline_segments)
    build.add_argument("--outline-only", action="store_true",
                       help="Ear-clip plate vertices without interior sampling")
    build.add_argument("--no-clip", action="store_true",
                       help="Keep triangles outside concave plate outlines")
    build.add_argument("--shade", action="store_true", help="Attach per-vertex colours")
    build.add_argument("--normals", action="store_true", help="Include vertex normals")
    build.add_argument("--indent", type=int, default=None)

    validate = sub.add_parser("validate", help="Check plate outlines can be meshed")
    validate.add_argument("--in", dest="input_path", required=True)
    validate.add_argument("--max-extent", type=float, default=DEFAULT_PLATE.max_extent_deg)

    render = sub.add_parser("render", help="Render meshed plates to PNG")
    render.add_argument("--in", dest="input_path", required=True)
    render.add_argument("--out", dest="output_path", required=True)
    render.add_argument("--seed", type=int, default=None)
    render.add_argument("--dpi", type=int, default=150)
    render.add_argument("--no-globe", action="store_true")

    demo = sub.add_parser("demo", help="Write sample circle and square plates")
    demo.add_argument("--out", dest="output_path", required=True)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.command == "build":
        _cmd_build(args)

    elif args.command == "validate":
        _cmd_validate(args)

    elif args.command == "render":
        _cmd_render(args)

    elif args.command == "demo":
        _cmd_demo(args)


def _load(path: str) -> List[Plate]:
    try:
        return load_plates_json(path)
    except (OSError, ValueError) as exc:
        print(f"Cannot read {path}: {exc}")
        raise SystemExit(1)


def _config_from_args(args) -> PlateConfig:
    return replace(
        DEFAULT_PLATE,
        radius=args.radius,
        base_density=args.density,
        outline_segments=args.outline_segments,
        interior=not args.outline_only,
        clip_to_polygon=not args.no_clip,
        shade_vertices=args.shade,
    )


def _cmd_build(args) -> None:
    from .export import export_json

    plates = _load(args.input_path)
    config = _config_from_args(args)
    meshes = build_plate_meshes(plates, config, seed=args.seed)
    export_json(
        meshes,
        args.output_path,
        radius=config.radius,
        seed=args.seed,
        include_normals=args.normals,
        indent=args.indent,
    )
    print(f"Saved {args.output_path} ({len(meshes)} of {len(plates)} plates)")


def _cmd_validate(args) -> None:
    plates = _load(args.input_path)
    failures = 0
    for plate in plates:
        try:
            extent = validate_polygon(plate.polygon, args.max_extent)
        except PlateError as exc:
            failures += 1
            print(f"{plate.id}: {exc}")
        else:
            print(f"{plate.id}: OK ({len(plate.polygon)} vertices, extent {extent:.2f}°)")
    if failures:
        raise SystemExit(1)
    print("OK")


def _cmd_render(args) -> None:
    from .render import render_png

    plates = _load(args.input_path)
    meshes = build_plate_meshes(plates, DEFAULT_PLATE, seed=args.seed)
    render_png(meshes, args.output_path, dpi=args.dpi, show_globe=not args.no_globe)
    print(f"Saved {args.output_path}")


def _cmd_demo(args) -> None:
    from .shapes import circular_plate, square_plate

    plates = [
        Plate("circle", circular_plate(GeoPoint(30.0, -40.0), 15.0), (0.2, 0.8, 1.0)),
        Plate("square", square_plate(GeoPoint(-10.0, 20.0), 20.0), (1.0, 0.33, 0.2)),
    ]
    output = Path(args.output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    save_plates_json(plates, output)
    print(f"Saved {output}")


if __name__ == "__main__":
    main()
