"""Command line interface for Grid Locator.

Usage examples (from repository root):

  python -m grid_locator.cli assign --lon -94.20 --lat 36.00
  python -m grid_locator.cli assign --lon -94.20 --lat 36.00 --json
  python -m grid_locator.cli neighbors --lon -94.20 --lat 36.00
  python -m grid_locator.cli nearest-grids --lon -94.20 --lat 36.00 --count 5
  python -m grid_locator.cli validate --file data/Grids.geojson --role grid
  python -m grid_locator.cli layers

Layer sources default to the values in ``Settings`` (``.env``); each can be
overridden per call with ``--grids``, ``--grid-oot``, ``--zones``,
``--feeders`` and ``--huts``.
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional

from grid_locator.auth.config import settings
from grid_locator.domain.results import AssignmentResult, NeighborGrids
from grid_locator.ingestion.layer_sources import (
    LayerSourceError,
    load_layer_source,
    role_sources,
)
from grid_locator.services.assignment import nearby_grids, neighbor_grids, resolve
from grid_locator.services.layer_catalog import LayerCatalog
from grid_locator.spatial.geometry_set import LayerLoadError

DIRECTION_NAMES = (("N", "North"), ("S", "South"), ("W", "West"), ("E", "East"))
DASH = "-"


def _overrides(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    return {
        "grid": args.grids,
        "grid_oot": args.grid_oot,
        "substation": args.zones,
        "feeder": args.feeders,
        "hut": args.huts,
    }


def _catalog(args: argparse.Namespace) -> LayerCatalog:
    catalog = LayerCatalog.from_settings(settings, _overrides(args))
    for role, message in catalog.last_errors.items():
        print(f"Warning: {role} layer not loaded ({message})")
    return catalog


def _layers_failed(catalog: LayerCatalog) -> bool:
    failed = catalog.unavailable_roles()
    if failed:
        print(f"Error: layers failed to load: {', '.join(failed)}")
    return bool(failed)


def _fmt(value) -> str:
    return DASH if value is None else str(value)


def _neighbor_lines(neighbors: NeighborGrids) -> List[str]:
    lines = []
    for key, label in DIRECTION_NAMES:
        entry = getattr(neighbors, key)
        if entry is None:
            lines.append(f"  {label}: {DASH}")
            continue
        note = " (nearest edge)" if entry.via_fallback else ""
        lines.append(f"  {label}: {_fmt(entry.code)} - {entry.distance_miles:.2f} mi{note}")
    return lines


def format_assignment(result: AssignmentResult) -> str:
    """Render a result the way the lookup panel lays it out."""
    hut = result.hut
    lines = [
        f"Location:    {result.lat:.6f}, {result.lon:.6f}",
        f"Substation:  {_fmt(result.substation_name)}",
        f"Hut:         {_fmt(hut.name) if hut else DASH}",
        f"Hut dist:    {f'~{hut.distance_miles:.2f} mi' if hut else DASH}",
        f"Feeder:      {_fmt(result.feeder.code)}",
        f"Feeder dist: {_fmt(result.feeder.distance_text)}",
        f"Grid:        {_fmt(result.grid.code)}",
        f"Grid (OOT):  {_fmt(result.grid.neighbor_fallback_code)}",
        "Adjacent grids:",
    ]
    lines.extend(_neighbor_lines(result.neighbors))
    return "\n".join(lines)


# ----------------------------- Command Handlers ----------------------------- #


def _cmd_assign(args: argparse.Namespace) -> int:
    catalog = _catalog(args)
    if _layers_failed(catalog):
        return 1
    result = resolve((args.lon, args.lat), catalog.snapshot(), catalog.options)
    if args.json:
        print(result.model_dump_json(indent=2, by_alias=True))
    else:
        print(format_assignment(result))
    return 0


def _cmd_neighbors(args: argparse.Namespace) -> int:
    catalog = _catalog(args)
    if _layers_failed(catalog):
        return 1
    layers = catalog.snapshot()
    if layers.grid is None:
        print("Grid layer is not loaded")
        return 1
    neighbors = neighbor_grids((args.lon, args.lat), layers, catalog.options)
    if args.json:
        print(neighbors.model_dump_json(indent=2, by_alias=True))
    else:
        print("\n".join(_neighbor_lines(neighbors)))
    return 0


def _cmd_nearest_grids(args: argparse.Namespace) -> int:
    catalog = _catalog(args)
    if _layers_failed(catalog):
        return 1
    layers = catalog.snapshot()
    if layers.grid is None:
        print("Grid layer is not loaded")
        return 1
    grids = nearby_grids((args.lon, args.lat), layers, k=args.count, options=catalog.options)
    if args.json:
        print(json.dumps([g.model_dump(by_alias=True) for g in grids], indent=2))
        return 0
    if not grids:
        print("No grids found")
        return 0
    for g in grids:
        print(f"{_fmt(g.code)} | {g.distance_miles:.2f} mi | {g.cardinal} ({g.bearing:.0f} deg)")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    _, family, aliases = role_sources(settings)[args.role]
    try:
        layer = load_layer_source(args.file, args.role, family, aliases)
    except (LayerSourceError, LayerLoadError) as exc:
        print(f"Invalid {args.role} layer: {exc}")
        return 1
    print(f"OK: {layer.name} ({layer.family or 'empty'}, {len(layer)} features)")
    return 0


def _cmd_layers(args: argparse.Namespace) -> int:
    catalog = _catalog(args)
    summary = catalog.snapshot().summary()
    if args.json:
        print(json.dumps({"layers": summary, "errors": catalog.last_errors}, indent=2))
        return 0
    for role, info in summary.items():
        if info is None:
            print(f"{role:<11} (absent)")
        else:
            print(f"{role:<11} {info['name']} | {info['family'] or 'empty'} | {info['feature_count']} features")
    return 1 if catalog.last_errors else 0


def _bounded(name: str, limit: float):
    def parse(text: str) -> float:
        try:
            value = float(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{name} must be a number, got {text!r}")
        if not -limit <= value <= limit:
            raise argparse.ArgumentTypeError(f"{name} must be within [-{limit:g}, {limit:g}], got {text}")
        return value
    return parse


def _add_point_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lon", type=_bounded("longitude", 180.0), required=True, help="Longitude (WGS84)")
    p.add_argument("--lat", type=_bounded("latitude", 90.0), required=True, help="Latitude (WGS84)")


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--grids", help="Grid polygons GeoJSON (path or URL)")
    p.add_argument("--grid-oot", dest="grid_oot", help="Out-of-territory grid polygons GeoJSON")
    p.add_argument("--zones", help="Substation zones GeoJSON")
    p.add_argument("--feeders", help="Feeders GeoJSON")
    p.add_argument("--huts", help="Service huts GeoJSON")
    p.add_argument("--json", action="store_true", help="Print JSON instead of text")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-locator",
        description="Resolve locations to utility grids, substations, feeders and huts",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_assign = sub.add_parser("assign", help="Full assignment for a point")
    _add_point_args(p_assign)
    _add_source_args(p_assign)
    p_assign.set_defaults(func=_cmd_assign)

    p_nb = sub.add_parser("neighbors", help="North/South/East/West neighbour grids")
    _add_point_args(p_nb)
    _add_source_args(p_nb)
    p_nb.set_defaults(func=_cmd_neighbors)

    p_near = sub.add_parser("nearest-grids", help="Grids ordered by centroid distance")
    _add_point_args(p_near)
    _add_source_args(p_near)
    p_near.add_argument("--count", type=int, default=settings.NEIGHBOR_GRID_COUNT,
                        help="Number of grids to list")
    p_near.set_defaults(func=_cmd_nearest_grids)

    p_val = sub.add_parser("validate", help="Validate a single layer file")
    p_val.add_argument("--file", required=True, help="GeoJSON path or URL")
    p_val.add_argument("--role", default="grid",
                       choices=["grid", "grid_oot", "substation", "feeder", "hut"],
                       help="Layer role (decides the expected geometry family)")
    p_val.set_defaults(func=_cmd_validate)

    p_layers = sub.add_parser("layers", help="Load configured layers and summarise them")
    _add_source_args(p_layers)
    p_layers.set_defaults(func=_cmd_layers)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
