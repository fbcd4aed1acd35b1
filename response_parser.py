# Normalizes raw Google Places / Directions responses into our route structures.

import json
import logging

from response_status import ResponseStatus, classify_status
from route_structures import City, Coordinates, Route, RouteBounds, RouteDetails, RouteStep

logger = logging.getLogger(__name__)


class MalformedPayloadError(ValueError):
    """Raised (in strict mode) when a response does not have the expected shape."""


def _load(raw) -> dict:
    """Accepts raw response text/bytes or an already decoded document."""
    if isinstance(raw, dict):
        return raw
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedPayloadError(
            f"Expected a JSON object at the top level, got {type(data).__name__}")
    return data


def _require_list(parent: dict, key: str) -> list:
    value = parent.get(key)
    if not isinstance(value, list):
        raise MalformedPayloadError(f"Missing or invalid '{key}' array")
    return value


def _object(parent: dict, key: str) -> dict:
    value = parent.get(key)
    return value if isinstance(value, dict) else {}


def _string(parent: dict, key: str) -> str:
    value = parent.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _int_from_object(parent: dict, object_name: str, item_name: str = "value") -> int:
    # distance / duration come as {"text": "1.2 km", "value": 1234}
    value = _object(parent, object_name).get(item_name)
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError, OverflowError):
        return 0


def _string_from_object(parent: dict, object_name: str, item_name: str) -> str:
    return _string(_object(parent, object_name), item_name)


def _coordinates(parent: dict, object_name: str) -> Coordinates:
    location = _object(parent, object_name)
    try:
        return Coordinates(lat=float(location.get("lat", 0.0)),
                           lng=float(location.get("lng", 0.0)))
    except (TypeError, ValueError):
        return Coordinates()


def parse_cities(raw, strict: bool = False) -> list[City]:
    """Extracts the autocomplete predictions. Returns [] for a malformed response."""
    cities = []
    try:
        data = _load(raw)
        for i, item in enumerate(_require_list(data, "predictions")):
            try:
                if item["id"] is None or item["description"] is None:
                    raise KeyError("id" if item["id"] is None else "description")
                cities.append(City(id=_string(item, "id"), description=_string(item, "description")))
            except (KeyError, TypeError) as e:
                if strict:
                    raise MalformedPayloadError(f"Prediction {i} is missing {e}") from e
                logger.warning("Skipping prediction %d: missing %s", i, e)
    except MalformedPayloadError as e:
        if strict:
            raise
        logger.warning("Could not parse predictions: %s", e)
        return []
    return cities


def _parse_step(item: dict) -> RouteStep:
    builder = RouteStep.Builder(_coordinates(item, "start_location"),
                                _coordinates(item, "end_location"))
    return (builder
            .distance(_int_from_object(item, "distance"))
            .duration(_int_from_object(item, "duration"))
            .instructions(_string(item, "html_instructions"))
            .travel_mode(_string(item, "travel_mode"))
            .points(_string_from_object(item, "polyline", "points"))
            .build())


def _parse_steps(steps: list) -> list[RouteStep]:
    result = []
    for item in steps:
        if isinstance(item, dict):
            result.append(_parse_step(item))
    return result


def _parse_details(route_item: dict) -> RouteDetails:
    warnings = route_item.get("warnings")
    if not isinstance(warnings, list):
        warnings = []
    return RouteDetails(
        copyrights=_string(route_item, "copyrights"),
        summary=_string(route_item, "summary"),
        warnings="".join(f"{warning}\n" for warning in warnings),
    )


def _parse_bounds(route_item: dict) -> RouteBounds:
    bounds = _object(route_item, "bounds")
    return RouteBounds(north_east=_coordinates(bounds, "northeast"),
                       south_west=_coordinates(bounds, "southwest"))


def _parse_route(route_item: dict) -> Route:
    if not isinstance(route_item, dict):
        raise MalformedPayloadError("Route entry is not an object")
    legs = _require_list(route_item, "legs")
    # A route requested without waypoints has exactly one leg.
    if not legs or not isinstance(legs[0], dict):
        raise MalformedPayloadError("Route has no legs")
    leg = legs[0]

    steps = leg.get("steps")
    try:
        parsed_steps = _parse_steps(steps if isinstance(steps, list) else [])
    except ValueError as e:
        raise MalformedPayloadError(f"Invalid step: {e}") from e

    return Route(
        distance=_int_from_object(leg, "distance"),
        duration=_int_from_object(leg, "duration"),
        start_address=_string(leg, "start_address"),
        end_address=_string(leg, "end_address"),
        start_location=_coordinates(leg, "start_location"),
        end_location=_coordinates(leg, "end_location"),
        bounds=_parse_bounds(route_item),
        encoded_polyline=_string_from_object(route_item, "overview_polyline", "points"),
        details=_parse_details(route_item),
        steps=parsed_steps,
    )


def parse_routes(raw, strict: bool = False) -> list[Route]:
    """Extracts every route of a directions response. Returns [] for a malformed response."""
    routes = []
    try:
        data = _load(raw)
        for i, route_item in enumerate(_require_list(data, "routes")):
            try:
                routes.append(_parse_route(route_item))
            except MalformedPayloadError as e:
                if strict:
                    raise
                logger.warning("Skipping route %d: %s", i, e)
    except MalformedPayloadError as e:
        if strict:
            raise
        logger.warning("Could not parse routes: %s", e)
        return []
    return routes


def parse_status(raw, strict: bool = False) -> ResponseStatus | None:
    """Reads the top-level status token. Returns None if the response is not JSON."""
    try:
        data = _load(raw)
    except MalformedPayloadError as e:
        if strict:
            raise
        logger.warning("Could not parse response status: %s", e)
        return None
    status = classify_status(_string(data, "status"), strict=strict)
    if not status.recognized:
        logger.warning("Unrecognized response status %r treated as OK", status.raw)
    return status


def decode_route_points(route: Route) -> list[tuple[float, float]]:
    """All step geometries of a route joined in order, for drawing the full path."""
    points = []
    for step in route.steps:
        points.extend(step.decoded_points())
    if not points:
        points = route.decoded_polyline()
    return points
