"""
Export saved routes for map renderers.
"""

import json
from pathlib import Path
from typing import Any, Optional

from loco.analysis.route import segments
from loco.utils.log import get_logger
from loco.utils.validate import Route

logger = get_logger(__name__)


def route_bounds(route: Route) -> Optional[dict[str, float]]:
    """
    Bounding box of a route's points, or None for an empty route.
    """
    if not route.points:
        return None
    lats = [p.lat for p in route.points]
    lons = [p.lon for p in route.points]
    return {
        "minLat": min(lats),
        "minLon": min(lons),
        "maxLat": max(lats),
        "maxLon": max(lons),
    }


def _point_feature(lon: float, lat: float, role: str) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": {"role": role},
    }


def route_to_geojson(route: Route) -> dict[str, Any]:
    """
    GeoJSON FeatureCollection of a route.

    One LineString per segment, each carrying its speed and colour, plus
    start and end Point features. Route stats go in the collection's
    properties.
    """
    features: list[dict[str, Any]] = []
    for seg in segments(route):
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "LineString",
                "coordinates": [[seg.start.lon, seg.start.lat], [seg.end.lon, seg.end.lat]],
            },
            "properties": {"speed": seg.speed, "color": seg.color},
        })
    if route.points:
        first, last = route.points[0], route.points[-1]
        features.append(_point_feature(first.lon, first.lat, "start"))
        features.append(_point_feature(last.lon, last.lat, "end"))

    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "id": route.id,
            "name": route.name,
            "created_at": route.created_at,
            "bounds": route_bounds(route),
            **route.stats.model_dump(mode="json"),
        },
    }


def write_geojson(route: Route, outdir: str | Path) -> Path:
    """
    Write `<route id>.geojson` into `outdir` and return its path.
    """
    out = Path(outdir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"{route.id}.geojson"
    path.write_text(json.dumps(route_to_geojson(route), indent=2), encoding="utf-8")
    logger.info("Wrote %s (%d points)", path, len(route.points))
    return path
