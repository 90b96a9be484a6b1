#!/usr/bin/env python3
"""
CLI entry point for the loco activity tracker.

Defines the following commands:
  loco replay NAME FILE [--preset P]
  loco routes NAME
  loco totals NAME
  loco export NAME ROUTE_ID [--outdir DIR]
  loco serve NAME [--port 8000]
  loco version
"""

import sys
from argparse import ArgumentParser, Namespace
from importlib.metadata import PackageNotFoundError, version as _get_version

import uvicorn
from rich.console import Console
from rich.table import Table

from loco.analysis.config import PRESET_NAMES, ClassifierConfig
from loco.errors import LocoError
from loco.export import write_geojson
from loco.parsers.samples import load_samples
from loco.replay import replay as run_replay
from loco.server import create_app, db_path_for
from loco.storage.dao import DAO
from loco.utils.log import get_logger

logger = get_logger(__name__)
console = Console()


def replay(name: str, path: str, preset: str) -> int:
    """
    Replay a recorded sample file as one session and save the result.

    Parameters
    ----------
    name
        Tracker name, which dictates the SQLite database file name.
    path
        CSV file of recorded location/acceleration samples.
    preset
        Classifier threshold preset.
    """
    logger.info("Replay: name=%s, file=%s, preset=%s", name, path, preset)
    dao = DAO(db_path_for(name))
    result = run_replay(load_samples(path), dao=dao, cfg=ClassifierConfig.preset(preset))
    if result is None:
        logger.error("Replay did not start a session")
        return 1
    s = result.stats
    logger.info(
        "Session: %.1f m, %.0f s, %d steps, %.2f kcal, avg %.2f m/s",
        s.total_distance, s.duration, s.steps, s.calories, s.average_speed,
    )
    if result.route is None:
        logger.info("Nothing to save: no valid coordinates in the session")
    else:
        logger.info("Route built from %d points", len(result.route.points))
    return 0 if result.saved else 1


def routes(name: str) -> int:
    """
    List the saved routes.
    """
    table = Table(title=f"Routes ({name})")
    for col in ("id", "name", "points", "distance (m)", "duration (s)", "avg (m/s)"):
        table.add_column(col)
    for r in DAO(db_path_for(name)).get_routes():
        table.add_row(
            r.id,
            r.name,
            str(len(r.points)),
            f"{r.stats.total_distance:.1f}",
            f"{r.stats.duration:.0f}",
            f"{r.stats.average_speed:.2f}",
        )
    console.print(table)
    return 0


def totals(name: str) -> int:
    """
    Show the cumulative totals and the last session.
    """
    dao = DAO(db_path_for(name))
    t = dao.get_totals()
    table = Table(title=f"Totals ({name})")
    table.add_column("metric")
    table.add_column("value")
    table.add_row("sessions", str(t.sessions))
    table.add_row("distance (m)", f"{t.distance:.1f}")
    table.add_row("duration (s)", f"{t.duration:.0f}")
    table.add_row("calories", f"{t.calories:.2f}")
    table.add_row("steps", str(t.steps))
    last = dao.get_last_stats()
    if last is not None:
        table.add_row("last session (m)", f"{last.total_distance:.1f}")
    console.print(table)
    return 0


def export(name: str, route_id: str, outdir: str | None) -> int:
    """
    Export one saved route as GeoJSON.

    Parameters
    ----------
    name
        Tracker name, which dictates the SQLite database file name.
    route_id
        Id of the saved route.
    outdir
        Directory to write exported files into (default: cwd).
    """
    logger.info("Export: name=%s, route=%s, outdir=%s", name, route_id, outdir)
    route = DAO(db_path_for(name)).get_route(route_id)
    if route is None:
        logger.error("No route with id %s", route_id)
        return 1
    write_geojson(route, outdir or ".")
    return 0


def serve(name: str, port: int) -> int:
    """
    Spin up FastAPI+Uvicorn to serve saved routes.
    """
    logger.info("Serve: name=%s, port=%d", name, port)
    app = create_app(name)
    uvicorn.run(app, host="127.0.0.1", port=port)
    return 0


def version() -> int:
    """
    Print the installed loco package version.
    """
    try:
        ver = _get_version("loco")
    except PackageNotFoundError:
        ver = "unknown"
    logger.info("loco version %s", ver)
    return 0


def parse_args(argv: list[str] | None = None) -> Namespace:
    """
    Parse command-line arguments and return the populated namespace.
    """
    parser = ArgumentParser(prog="loco")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # loco replay
    p = subparsers.add_parser("replay", help="Replay recorded samples as a session.")
    p.add_argument("name", type=str, help="Tracker name.")
    p.add_argument("file", type=str, help="CSV file of recorded samples.")
    p.add_argument(
        "--preset", choices=PRESET_NAMES, default="default", help="Classifier threshold preset."
    )

    # loco routes
    p = subparsers.add_parser("routes", help="List saved routes.")
    p.add_argument("name", type=str, help="Tracker name.")

    # loco totals
    p = subparsers.add_parser("totals", help="Show cumulative totals.")
    p.add_argument("name", type=str, help="Tracker name.")

    # loco export
    p = subparsers.add_parser("export", help="Export a route as GeoJSON.")
    p.add_argument("name", type=str, help="Tracker name.")
    p.add_argument("route_id", type=str, help="Route id.")
    p.add_argument("--outdir", type=str, help="Output directory.")

    # loco serve
    p = subparsers.add_parser("serve", help="Serve via FastAPI + Uvicorn.")
    p.add_argument("name", type=str, help="Tracker name.")
    p.add_argument(
        "--port", type=int, default=8000, help="Port number to serve on."
    )

    # loco version
    subparsers.add_parser("version", help="Show loco version and exit.")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    Entry point: dispatch to the selected subcommand.
    """
    args = parse_args(argv)
    try:
        match args.command:
            case "replay":
                return replay(args.name, args.file, args.preset)
            case "routes":
                return routes(args.name)
            case "totals":
                return totals(args.name)
            case "export":
                return export(args.name, args.route_id, args.outdir)
            case "serve":
                return serve(args.name, args.port)
            case "version":
                return version()
            case _:
                return 1
    except LocoError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
