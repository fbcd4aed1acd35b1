# Stores parsed routes in an embedded SQLite database so they survive restarts.
#
# A route is flattened into three tables: every coordinate it references is a
# row in `locations`, the route itself is a row in `routes` pointing at four of
# them, and each step is a row in `steps` pointing back at its route.

import logging
import sqlite3

from route_structures import Coordinates, Route, RouteBounds, RouteDetails, RouteStep

logger = logging.getLogger(__name__)

# Bump whenever a table changes. A mismatch drops every cached route.
SCHEMA_VERSION = 2

ROUTES_TABLE = "routes"
STEPS_TABLE = "steps"
LOCATIONS_TABLE = "locations"

CREATE_TABLES = (
    f"""CREATE TABLE IF NOT EXISTS {ROUTES_TABLE} (
        _id INTEGER PRIMARY KEY AUTOINCREMENT,
        distance INTEGER,
        duration INTEGER,
        end_addr TEXT,
        end_loc INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        start_addr TEXT,
        start_loc INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        bounds_tl INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        bounds_br INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        polyline TEXT NOT NULL,
        copyrights TEXT,
        summary TEXT,
        warnings TEXT
    )""",
    f"""CREATE TABLE IF NOT EXISTS {STEPS_TABLE} (
        _id INTEGER PRIMARY KEY AUTOINCREMENT,
        route_id INTEGER REFERENCES {ROUTES_TABLE}(_id),
        position INTEGER NOT NULL,
        distance INTEGER,
        duration INTEGER,
        end_loc INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        start_loc INTEGER REFERENCES {LOCATIONS_TABLE}(_id),
        travel_mode TEXT,
        instr TEXT,
        points TEXT
    )""",
    f"""CREATE TABLE IF NOT EXISTS {LOCATIONS_TABLE} (
        _id INTEGER PRIMARY KEY AUTOINCREMENT,
        lat REAL,
        lng REAL
    )""",
)


class StorageError(Exception):
    """Raised when the route database cannot be read or written."""


class RouteStore:
    """
    Route cache backed by a single SQLite file.

    The connection is opened once and must be released with close() (or by
    using the store as a context manager). One store is meant for one
    sequential user; it performs no locking of its own.
    """

    def __init__(self, path: str = ":memory:"):
        self.path = path
        try:
            self.connection = sqlite3.connect(path)
            self.connection.row_factory = sqlite3.Row
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StorageError(f"Could not open route database at {path}: {e}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.connection.close()

    def _ensure_schema(self):
        version = self.connection.execute("PRAGMA user_version").fetchone()[0]
        with self.connection:
            if version != SCHEMA_VERSION:
                if version != 0:
                    logger.warning(
                        "Upgrading route database %s from version %d to %d, which will destroy all cached routes",
                        self.path, version, SCHEMA_VERSION)
                for table in (STEPS_TABLE, ROUTES_TABLE, LOCATIONS_TABLE):
                    self.connection.execute(f"DROP TABLE IF EXISTS {table}")
            for statement in CREATE_TABLES:
                self.connection.execute(statement)
            # PRAGMA does not accept bound parameters.
            self.connection.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")

    # --- Writing ---

    def _insert_location(self, location: Coordinates) -> int:
        cursor = self.connection.execute(
            f"INSERT INTO {LOCATIONS_TABLE} (lat, lng) VALUES (?, ?)",
            (location.lat, location.lng))
        return cursor.lastrowid

    def _insert_step(self, step: RouteStep, route_id: int, position: int) -> int:
        if step.distance < 0 or step.duration < 0:
            raise ValueError(f"Step {position} has a negative distance or duration")
        end_loc_id = self._insert_location(step.end_location)
        start_loc_id = self._insert_location(step.start_location)
        cursor = self.connection.execute(
            f"""INSERT INTO {STEPS_TABLE}
                (route_id, position, distance, duration, end_loc, start_loc, travel_mode, instr, points)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (route_id, position, step.distance, step.duration, end_loc_id, start_loc_id,
             step.travel_mode, step.instructions, step.points))
        return cursor.lastrowid

    def _insert_route(self, route: Route) -> int:
        end_loc_id = self._insert_location(route.end_location)
        start_loc_id = self._insert_location(route.start_location)
        bounds_tl_id = self._insert_location(route.bounds.north_east)
        bounds_br_id = self._insert_location(route.bounds.south_west)

        cursor = self.connection.execute(
            f"""INSERT INTO {ROUTES_TABLE}
                (distance, duration, end_addr, end_loc, start_addr, start_loc,
                 bounds_tl, bounds_br, polyline, copyrights, summary, warnings)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (route.distance, route.duration, route.end_address, end_loc_id,
             route.start_address, start_loc_id, bounds_tl_id, bounds_br_id,
             route.encoded_polyline, route.details.copyrights,
             route.details.summary, route.details.warnings))
        route_id = cursor.lastrowid

        for position, step in enumerate(route.steps):
            self._insert_step(step, route_id, position)
        return route_id

    def insert_route(self, route: Route) -> int | None:
        """Inserts a route with all its steps. Returns its id, or None if the insert failed."""
        try:
            with self.connection:
                return self._insert_route(route)
        except (sqlite3.Error, OverflowError, ValueError):
            logger.exception("Could not insert route %r -> %r",
                             getattr(route, "start_address", None),
                             getattr(route, "end_address", None))
            return None

    def _clear(self):
        for table in (STEPS_TABLE, ROUTES_TABLE, LOCATIONS_TABLE):
            self.connection.execute(f"DELETE FROM {table}")

    def delete_all(self) -> bool:
        """Empties the cache. Must be called before writing a new result set."""
        try:
            with self.connection:
                self._clear()
        except sqlite3.Error:
            logger.exception("Could not clear route database %s", self.path)
            return False
        return True

    def replace_all(self, routes) -> list[int]:
        """Clears the cache and writes `routes` in one transaction."""
        try:
            with self.connection:
                self._clear()
                return [self._insert_route(route) for route in routes]
        except (sqlite3.Error, OverflowError, ValueError) as e:
            raise StorageError(f"Could not replace cached routes: {e}") from e

    # --- Reading ---

    def _get_location(self, location_id: int) -> Coordinates:
        row = self.connection.execute(
            f"SELECT lat, lng FROM {LOCATIONS_TABLE} WHERE _id = ?",
            (location_id,)).fetchone()
        if row is None:
            return Coordinates()
        return Coordinates(lat=row["lat"], lng=row["lng"])

    def _get_steps(self, route_id: int) -> list[RouteStep]:
        rows = self.connection.execute(
            f"""SELECT distance, duration, end_loc, start_loc, travel_mode, instr, points
                FROM {STEPS_TABLE} WHERE route_id = ? ORDER BY position, _id""",
            (route_id,)).fetchall()

        steps = []
        for row in rows:
            step = RouteStep.Builder(self._get_location(row["start_loc"]),
                                     self._get_location(row["end_loc"]))
            step.distance(row["distance"] or 0)
            step.duration(row["duration"] or 0)
            step.travel_mode(row["travel_mode"])
            step.instructions(row["instr"])
            step.points(row["points"])
            steps.append(step.build())
        return steps

    def _build_route(self, row: sqlite3.Row) -> Route:
        return Route(
            distance=row["distance"],
            duration=row["duration"],
            start_address=row["start_addr"] or "",
            end_address=row["end_addr"] or "",
            start_location=self._get_location(row["start_loc"]),
            end_location=self._get_location(row["end_loc"]),
            bounds=RouteBounds(north_east=self._get_location(row["bounds_tl"]),
                               south_west=self._get_location(row["bounds_br"])),
            encoded_polyline=row["polyline"],
            details=RouteDetails(copyrights=row["copyrights"] or "",
                                 summary=row["summary"] or "",
                                 warnings=row["warnings"] or ""),
            steps=self._get_steps(row["_id"]),
        )

    def get_route(self, route_id: int) -> Route | None:
        try:
            row = self.connection.execute(
                f"SELECT * FROM {ROUTES_TABLE} WHERE _id = ?", (route_id,)).fetchone()
            if row is None:
                return None
            return self._build_route(row)
        except (sqlite3.Error, ValueError) as e:
            raise StorageError(f"Could not read route {route_id}: {e}") from e

    def get_all_routes(self) -> list[Route]:
        try:
            rows = self.connection.execute(
                f"SELECT * FROM {ROUTES_TABLE} ORDER BY _id").fetchall()
            return [self._build_route(row) for row in rows]
        except (sqlite3.Error, ValueError) as e:
            raise StorageError(f"Could not read cached routes: {e}") from e

    def count(self) -> int:
        return self.connection.execute(f"SELECT COUNT(*) FROM {ROUTES_TABLE}").fetchone()[0]
