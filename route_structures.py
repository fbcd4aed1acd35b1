# Defines the standardized, internal data structures for cached routes.

from dataclasses import dataclass, field

import polyline_codec


@dataclass
class Coordinates:
    """A standardized representation of geographic coordinates."""
    lat: float = 0.0
    lng: float = 0.0

    def copy(self) -> "Coordinates":
        return Coordinates(lat=self.lat, lng=self.lng)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class City:
    """A single autocomplete prediction."""
    id: str
    description: str


class RouteBounds:
    """
    The rectangle (north-east and south-west corners) enclosing a route.
    Both corners are private copies of the coordinates passed in.
    """

    def __init__(self, north_east: Coordinates | None = None, south_west: Coordinates | None = None):
        self._north_east = north_east.copy() if north_east else Coordinates()
        self._south_west = south_west.copy() if south_west else Coordinates()

    @property
    def north_east(self) -> Coordinates:
        return self._north_east

    @property
    def south_west(self) -> Coordinates:
        return self._south_west

    def __eq__(self, other):
        if not isinstance(other, RouteBounds):
            return NotImplemented
        return (self._north_east == other._north_east
                and self._south_west == other._south_west)

    def __repr__(self):
        return f"RouteBounds(north_east={self._north_east!r}, south_west={self._south_west!r})"


@dataclass
class RouteDetails:
    """Free-text details that come with a route."""
    copyrights: str = ""
    summary: str = ""
    warnings: str = ""


@dataclass(frozen=True)
class RouteStep:
    """
    One instruction of a route leg. Use RouteStep.Builder to create it:

        RouteStep.Builder(start, end).distance(120).travel_mode("DRIVING").build()
    """
    start_location: Coordinates
    end_location: Coordinates
    distance: int = 0
    duration: int = 0
    travel_mode: str = ""
    instructions: str = ""
    points: str = ""

    def decoded_points(self) -> list[tuple[float, float]]:
        return polyline_codec.decode(self.points)

    class Builder:
        """Collects the optional step fields in any order before build()."""

        def __init__(self, start_location: Coordinates, end_location: Coordinates):
            self._start = start_location.copy()
            self._end = end_location.copy()
            self._distance = 0
            self._duration = 0
            self._travel_mode = ""
            self._instructions = ""
            self._points = ""

        def distance(self, meters: int) -> "RouteStep.Builder":
            if meters < 0:
                raise ValueError(f"Step distance must not be negative, got {meters}")
            self._distance = int(meters)
            return self

        def duration(self, seconds: int) -> "RouteStep.Builder":
            if seconds < 0:
                raise ValueError(f"Step duration must not be negative, got {seconds}")
            self._duration = int(seconds)
            return self

        def travel_mode(self, mode: str) -> "RouteStep.Builder":
            self._travel_mode = mode or ""
            return self

        def instructions(self, text: str) -> "RouteStep.Builder":
            self._instructions = text or ""
            return self

        def points(self, encoded: str) -> "RouteStep.Builder":
            self._points = encoded or ""
            return self

        def build(self) -> "RouteStep":
            return RouteStep(
                start_location=self._start.copy(),
                end_location=self._end.copy(),
                distance=self._distance,
                duration=self._duration,
                travel_mode=self._travel_mode,
                instructions=self._instructions,
                points=self._points,
            )


@dataclass
class Route:
    """A standardized representation of a single-leg route."""
    distance: int = 0
    duration: int = 0
    start_address: str = ""
    end_address: str = ""
    start_location: Coordinates = field(default_factory=Coordinates)
    end_location: Coordinates = field(default_factory=Coordinates)
    bounds: RouteBounds = field(default_factory=RouteBounds)
    encoded_polyline: str = ""
    details: RouteDetails = field(default_factory=RouteDetails)
    steps: list[RouteStep] = field(default_factory=list)

    def decoded_polyline(self) -> list[tuple[float, float]]:
        return polyline_codec.decode(self.encoded_polyline)
