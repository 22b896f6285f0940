"""CLI entrypoint: dataset validation and static map snapshots."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import load_style_config
from .geometry import GeometryStore
from .labels import load_map_labels
from .layout import LayoutConfigurationError
from .render import USMap
from .style import StyleConfig
from .util import read_json, setup_logging, write_text
from .validate import format_report_lines, validate_datasets

LOGGER = logging.getLogger("usmap.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="usmap",
        description="Responsive U.S. state map renderer.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--geometry", required=True, help="GeoJSON/TopoJSON/shapefile of states.")
        p.add_argument("--layer", default=None, help="Layer name inside the geometry file.")
        p.add_argument("--labels", required=True, help="Label adjustment + offshore table.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Cross-check geometry and label tables.")
    add_common(validate_p)

    render_p = subparsers.add_parser("render", help="Write a static HTML snapshot of the map.")
    add_common(render_p)
    render_p.add_argument("--style", default=None, help="Path to YAML style file.")
    render_p.add_argument("--width", type=float, default=960, help="Container width in pixels.")
    render_p.add_argument(
        "--exclude-dc",
        action="store_true",
        help="Drop the District of Columbia offshore box.",
    )
    render_p.add_argument("--output", required=True, help="Output HTML path.")
    return parser


def _load_store(path: Path, layer: str | None) -> GeometryStore:
    if layer is None and path.suffix.lower() in {".json", ".geojson"}:
        payload = read_json(path)
        if isinstance(payload, dict) and payload.get("type") == "FeatureCollection":
            return GeometryStore.from_geojson(payload)
    return GeometryStore.from_file(path, layer=layer)


def _run_validate(args: argparse.Namespace) -> int:
    store = _load_store(Path(args.geometry), args.layer)
    labels = load_map_labels(Path(args.labels))
    report = validate_datasets(store, labels)
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_render(args: argparse.Namespace) -> int:
    store = _load_store(Path(args.geometry), args.layer)
    labels = load_map_labels(Path(args.labels))
    style = load_style_config(args.style) if args.style else StyleConfig()
    try:
        usmap = USMap(store, labels, style, width=args.width, exclude_dc=args.exclude_dc)
    except LayoutConfigurationError as exc:
        LOGGER.error("Map configuration error: %s", exc)
        return 1
    output = write_text(Path(args.output), usmap.document.to_html())
    LOGGER.info("Map snapshot written to %s", output)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)
    try:
        if args.command == "validate":
            return _run_validate(args)
        if args.command == "render":
            return _run_render(args)
    except (FileNotFoundError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
