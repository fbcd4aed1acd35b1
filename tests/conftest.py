import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from route_structures import Coordinates, Route, RouteBounds, RouteDetails, RouteStep


def make_step(n: int) -> dict:
    return {
        "distance": {"text": f"{n * 100} m", "value": n * 100},
        "duration": {"text": f"{n} min", "value": n * 60},
        "start_location": {"lat": 38.5 + n, "lng": -120.2 - n},
        "end_location": {"lat": 38.6 + n, "lng": -120.3 - n},
        "html_instructions": f"Head <b>north</b> on Road {n}",
        "travel_mode": "DRIVING",
        "polyline": {"points": "_p~iF~ps|U"},
    }


@pytest.fixture
def directions_payload() -> dict:
    return {
        "status": "OK",
        "geocoded_waypoints": [],
        "routes": [
            {
                "bounds": {
                    "northeast": {"lat": 43.252, "lng": -120.2},
                    "southwest": {"lat": 38.5, "lng": -126.453},
                },
                "copyrights": "Map data ©2024",
                "legs": [
                    {
                        "distance": {"text": "312 km", "value": 312000},
                        "duration": {"text": "3 hours 5 mins", "value": 11100},
                        "start_address": "Sacramento, CA, USA",
                        "end_address": "Eureka, CA, USA",
                        "start_location": {"lat": 38.5, "lng": -120.2},
                        "end_location": {"lat": 43.252, "lng": -126.453},
                        "steps": [make_step(1), make_step(2), make_step(3)],
                        "traffic_speed_entry": [],
                        "via_waypoint": [],
                    }
                ],
                "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"},
                "summary": "CA-299 W",
                "warnings": ["Road works ahead", "Toll road"],
                "waypoint_order": [],
            }
        ],
    }


@pytest.fixture
def directions_text(directions_payload) -> str:
    return json.dumps(directions_payload)


@pytest.fixture
def sample_route() -> Route:
    steps = [
        RouteStep.Builder(Coordinates(1.0 + i, 2.0 + i), Coordinates(1.5 + i, 2.5 + i))
        .distance(100 * (i + 1))
        .duration(30 * (i + 1))
        .travel_mode("WALKING")
        .instructions(f"Turn <b>left</b> #{i}")
        .points("_p~iF~ps|U")
        .build()
        for i in range(3)
    ]
    return Route(
        distance=600,
        duration=180,
        start_address="Start Street 1",
        end_address="End Avenue 9",
        start_location=Coordinates(1.0, 2.0),
        end_location=Coordinates(3.5, 4.5),
        bounds=RouteBounds(Coordinates(3.5, 4.5), Coordinates(1.0, 2.0)),
        encoded_polyline="_p~iF~ps|U_ulLnnqC",
        details=RouteDetails(copyrights="Map data", summary="Main road", warnings="Careful\n"),
        steps=steps,
    )
