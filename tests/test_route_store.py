import sqlite3

import pytest

import route_store
from response_parser import parse_routes
from route_store import RouteStore, StorageError
from route_structures import Coordinates, Route, RouteStep


@pytest.fixture
def store():
    with RouteStore() as store:
        yield store


def test_empty_store_returns_no_routes(store):
    assert store.get_all_routes() == []
    assert store.count() == 0


def test_round_trip_preserves_route(store, sample_route):
    route_id = store.insert_route(sample_route)

    routes = store.get_all_routes()

    assert route_id is not None
    assert len(routes) == 1
    assert routes[0] == sample_route
    assert [step.instructions for step in routes[0].steps] == [
        "Turn <b>left</b> #0", "Turn <b>left</b> #1", "Turn <b>left</b> #2"]


def test_round_trip_parsed_route(store, directions_text):
    parsed = parse_routes(directions_text)[0]

    route_id = store.insert_route(parsed)

    assert store.get_route(route_id) == parsed


def test_every_coordinate_gets_its_own_row(store, sample_route):
    store.insert_route(sample_route)

    count = store.connection.execute("SELECT COUNT(*) FROM locations").fetchone()[0]

    # start, end, two bounds corners, then two per step
    assert count == 4 + 2 * len(sample_route.steps)


def test_get_route_unknown_id(store, sample_route):
    store.insert_route(sample_route)

    assert store.get_route(9999) is None


def test_routes_come_back_in_insert_order(store, sample_route):
    other = Route(distance=1, duration=2, start_address="A", end_address="B", encoded_polyline="")
    first_id = store.insert_route(sample_route)
    second_id = store.insert_route(other)

    routes = store.get_all_routes()

    assert second_id > first_id
    assert routes == [sample_route, other]
    assert routes[1].steps == []


def test_steps_follow_position_not_row_id(store, sample_route):
    route_id = store.insert_route(sample_route)
    # Reverse the row ids of the steps; the stored position must still win.
    store.connection.execute("UPDATE steps SET _id = _id + 1000")
    store.connection.execute("UPDATE steps SET _id = 2000 - _id")
    store.connection.commit()

    steps = store.get_route(route_id).steps

    assert [step.distance for step in steps] == [100, 200, 300]


def test_delete_all_empties_store(store, sample_route):
    store.insert_route(sample_route)
    store.insert_route(sample_route)

    assert store.delete_all()
    assert store.get_all_routes() == []
    assert store.connection.execute("SELECT COUNT(*) FROM locations").fetchone()[0] == 0


def test_delete_all_on_empty_store(store):
    assert store.delete_all()
    assert store.get_all_routes() == []


def test_insert_failure_returns_none_and_rolls_back(store, sample_route):
    sample_route.encoded_polyline = None  # violates NOT NULL

    assert store.insert_route(sample_route) is None
    assert store.connection.execute("SELECT COUNT(*) FROM locations").fetchone()[0] == 0


def test_delete_all_failure_returns_false():
    store = RouteStore()
    store.close()

    assert store.delete_all() is False


def test_replace_all(store, sample_route):
    store.insert_route(Route(start_address="old"))

    ids = store.replace_all([sample_route, sample_route])

    assert len(ids) == 2
    assert [r.start_address for r in store.get_all_routes()] == ["Start Street 1"] * 2


def test_replace_all_failure_keeps_old_routes(store, sample_route):
    store.insert_route(Route(start_address="old"))
    broken = Route(encoded_polyline=None)

    with pytest.raises(StorageError):
        store.replace_all([sample_route, broken])

    assert [r.start_address for r in store.get_all_routes()] == ["old"]


def test_routes_survive_reopen(tmp_path, sample_route):
    path = str(tmp_path / "routes.db")
    with RouteStore(path) as store:
        store.insert_route(sample_route)

    with RouteStore(path) as store:
        assert store.get_all_routes() == [sample_route]


def test_schema_version_mismatch_drops_data(tmp_path, sample_route):
    path = str(tmp_path / "routes.db")
    with RouteStore(path) as store:
        store.insert_route(sample_route)
        store.connection.execute(f"PRAGMA user_version = {route_store.SCHEMA_VERSION - 1}")

    with RouteStore(path) as store:
        assert store.get_all_routes() == []
        version = store.connection.execute("PRAGMA user_version").fetchone()[0]
        assert version == route_store.SCHEMA_VERSION


def test_unopenable_path_raises(tmp_path):
    with pytest.raises(StorageError):
        RouteStore(str(tmp_path / "missing" / "routes.db"))


def test_read_after_close_raises(sample_route):
    store = RouteStore()
    store.close()

    with pytest.raises(StorageError):
        store.get_all_routes()


def test_stored_coordinates_are_copies(store, sample_route):
    store.insert_route(sample_route)
    route = store.get_all_routes()[0]

    route.start_location.lat = 99.0

    assert store.get_all_routes()[0].start_location == Coordinates(1.0, 2.0)
    assert isinstance(store.connection, sqlite3.Connection)


def test_too_large_integer_returns_none(store, sample_route):
    sample_route.distance = 10 ** 30

    assert store.insert_route(sample_route) is None
    assert store.count() == 0
    assert store.connection.execute("SELECT COUNT(*) FROM locations").fetchone()[0] == 0


def test_replace_all_wraps_integer_overflow(store, sample_route):
    store.insert_route(Route(start_address="old"))
    sample_route.duration = 10 ** 30

    with pytest.raises(StorageError):
        store.replace_all([sample_route])

    assert [r.start_address for r in store.get_all_routes()] == ["old"]


def test_negative_step_is_not_stored(store, sample_route):
    sample_route.steps.append(RouteStep(Coordinates(), Coordinates(), distance=-1))

    assert store.insert_route(sample_route) is None
    assert store.count() == 0


def test_negative_stored_step_raises_storage_error(store, sample_route):
    route_id = store.insert_route(sample_route)
    store.connection.execute("UPDATE steps SET distance = -1")
    store.connection.commit()

    with pytest.raises(StorageError):
        store.get_all_routes()
    with pytest.raises(StorageError):
        store.get_route(route_id)
