import json
import sqlite3
from sqlite3 import Connection
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from loco.errors import StorageError
from loco.storage.db import init_db
from loco.utils.log import get_logger
from loco.utils.validate import ActivityLogEntry, Route, SessionStats, Totals

logger = get_logger(__name__)

KEY_LOGS = "activity_logs"
KEY_LAST_STATS = "last_session_stats"
KEY_TOTALS = "total_stats"
KEY_ROUTES = "saved_routes"

_LOGS = TypeAdapter(list[ActivityLogEntry])
_ROUTES = TypeAdapter(list[Route])


class DAO:
    """
    Encapsulates all reads/writes against the tracker's key/value DB.

    Every payload is a JSON document stored under one of the KEY_* names.
    sqlite and decoding failures surface as StorageError.
    """

    def __init__(self, db_path: str):
        """
        Create/connect and apply schema if needed.
        """
        self.db_path = db_path
        try:
            self.conn: Connection = init_db(db_path)
        except sqlite3.Error as e:
            raise StorageError(f"cannot open {db_path}: {e}") from e

    def close(self) -> None:
        self.conn.close()

    # ------------------------------------------------------------------
    # raw key/value access

    def put(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under `key`, replacing any previous one.
        """
        try:
            with self.conn:
                self._put(key, value)
        except sqlite3.Error as e:
            raise StorageError(f"cannot write {key}: {e}") from e

    def _put(self, key: str, value: Any) -> None:
        self.conn.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
              value      = excluded.value,
              updated_at = CAST(strftime('%s', 'now') AS INTEGER)
            """,
            (key, json.dumps(value)),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the decoded value stored under `key`, or `default`.
        """
        try:
            row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"cannot read {key}: {e}") from e
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except ValueError as e:
            raise StorageError(f"corrupt payload under {key}: {e}") from e

    def _get_model(self, key: str, adapter: TypeAdapter, default: Any) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise StorageError(f"invalid payload under {key}: {e}") from e

    # ------------------------------------------------------------------
    # activity logs

    def save_logs(self, log: Sequence[ActivityLogEntry]) -> None:
        """
        Replace the stored activity log.
        """
        self.put(KEY_LOGS, _LOGS.dump_python(list(log), mode="json"))

    def get_logs(self) -> list[ActivityLogEntry]:
        return self._get_model(KEY_LOGS, _LOGS, [])

    # ------------------------------------------------------------------
    # stats and totals

    def get_last_stats(self) -> Optional[SessionStats]:
        return self._get_model(KEY_LAST_STATS, TypeAdapter(SessionStats), None)

    def get_totals(self) -> Totals:
        return self._get_model(KEY_TOTALS, TypeAdapter(Totals), Totals())

    @staticmethod
    def _add_to_totals(totals: Totals, stats: SessionStats) -> Totals:
        return Totals(
            sessions=totals.sessions + 1,
            distance=totals.distance + stats.total_distance,
            duration=totals.duration + stats.duration,
            calories=totals.calories + stats.calories,
            steps=totals.steps + stats.steps,
        )

    def save_stats(self, stats: SessionStats) -> Totals:
        """
        Store the last session's stats and add them to the cumulative totals.

        Returns
        -------
        Totals
            The updated totals.
        """
        totals = self._add_to_totals(self.get_totals(), stats)
        try:
            with self.conn:
                self._put(KEY_LAST_STATS, stats.model_dump(mode="json"))
                self._put(KEY_TOTALS, totals.model_dump(mode="json"))
        except sqlite3.Error as e:
            raise StorageError(f"cannot save stats: {e}") from e
        return totals

    # ------------------------------------------------------------------
    # routes

    def get_routes(self) -> list[Route]:
        return self._get_model(KEY_ROUTES, _ROUTES, [])

    def get_route(self, route_id: str) -> Optional[Route]:
        """
        Return the saved route with the given id, if any.
        """
        for route in self.get_routes():
            if route.id == route_id:
                return route
        return None

    @staticmethod
    def _unique_route(routes: list[Route], route: Route) -> Route:
        """
        Return `route` under an id that is free or already holds this same route.

        Two sessions starting in the same millisecond share a base id; the
        later one is stored as `<id>-2`, `<id>-3`, ...
        """
        saved = {r.id: r for r in routes}
        candidate, n = route, 1
        while candidate.id in saved and saved[candidate.id] != candidate:
            n += 1
            candidate = route.model_copy(update={"id": f"{route.id}-{n}"})
        return candidate

    def _merge_route(self, routes: list[Route], route: Route) -> tuple[list[Route], Route]:
        stored = self._unique_route(routes, route)
        # an identical route saved twice replaces itself
        kept = [r for r in routes if r.id != stored.id]
        kept.append(stored)
        return sorted(kept, key=lambda r: r.created_at), stored

    def add_route(self, route: Route) -> Route:
        """
        Add a route to the saved routes.

        Returns
        -------
        Route
            The route as stored; its id carries a numeric suffix when another
            route already uses the original id.
        """
        routes, stored = self._merge_route(self.get_routes(), route)
        self.put(KEY_ROUTES, _ROUTES.dump_python(routes, mode="json"))
        return stored

    # ------------------------------------------------------------------

    def save_session(
        self,
        stats: SessionStats,
        log: Sequence[ActivityLogEntry],
        route: Optional[Route],
    ) -> Totals:
        """
        Persist everything a finished session produces in one transaction:
        the log, the last stats, the updated totals and, if any, the route.

        Either every key is written or none is, so a failed save can be
        retried without counting the session twice.
        """
        totals = self._add_to_totals(self.get_totals(), stats)
        routes = None
        if route is not None:
            routes, route = self._merge_route(self.get_routes(), route)
        try:
            with self.conn:
                self._put(KEY_LOGS, _LOGS.dump_python(list(log), mode="json"))
                self._put(KEY_LAST_STATS, stats.model_dump(mode="json"))
                self._put(KEY_TOTALS, totals.model_dump(mode="json"))
                if routes is not None:
                    self._put(KEY_ROUTES, _ROUTES.dump_python(routes, mode="json"))
        except sqlite3.Error as e:
            raise StorageError(f"cannot save session: {e}") from e
        logger.info(
            "Saved session: %d entries, route=%s, totals=%d sessions",
            len(log), route.id if route else None, totals.sessions,
            extra={"route_id": route.id if route else None, "sessions": totals.sessions},
        )
        return totals
