# loco/server.py
"""
FastAPI server exposing saved routes, stats and logs to a map renderer.
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import JSONResponse

from loco.analysis.route import segments
from loco.export import route_to_geojson
from loco.storage.dao import DAO
from loco.utils.log import get_logger
from loco.utils.validate import ActivityLogEntry, Route, RouteSegment, SessionStats, Totals

logger = get_logger(__name__)


def db_path_for(name: str) -> str:
    """SQLite file backing the tracker named `name`."""
    return f"loco_{name}.sqlite"


def create_app(name: str, db_path: Optional[str] = None) -> FastAPI:
    """
    Build a FastAPI instance bound to a specific tracker database.
    """
    app = FastAPI()
    app.state.name = name
    app.state.db_path = db_path or db_path_for(name)

    def _dao(request: Request) -> DAO:
        return DAO(request.app.state.db_path)

    def _route_or_404(request: Request, route_id: str) -> Route:
        route = _dao(request).get_route(route_id)
        if route is None:
            raise HTTPException(status_code=404, detail=f"route {route_id} not found")
        return route

    @app.get("/api/status", response_class=JSONResponse)
    async def status() -> JSONResponse:
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.get("/api/routes", response_model=list[Route])
    async def get_routes(request: Request):
        return _dao(request).get_routes()

    @app.get("/api/routes/{route_id}", response_model=Route)
    async def get_route(request: Request, route_id: str):
        return _route_or_404(request, route_id)

    @app.get("/api/routes/{route_id}/segments", response_model=list[RouteSegment])
    async def get_route_segments(request: Request, route_id: str):
        """
        return consecutive point pairs with the speed and colour to draw them in.
        """
        return list(segments(_route_or_404(request, route_id)))

    @app.get("/api/routes/{route_id}/geojson", response_class=JSONResponse)
    async def get_route_geojson(request: Request, route_id: str) -> JSONResponse:
        return JSONResponse(status_code=200, content=route_to_geojson(_route_or_404(request, route_id)))

    @app.get("/api/totals", response_model=Totals)
    async def get_totals(request: Request):
        return _dao(request).get_totals()

    @app.get("/api/last-session", response_model=Optional[SessionStats])
    async def get_last_session(request: Request):
        return _dao(request).get_last_stats()

    @app.get("/api/logs", response_model=list[ActivityLogEntry])
    async def get_logs(request: Request):
        return _dao(request).get_logs()

    return app
