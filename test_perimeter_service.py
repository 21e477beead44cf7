import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from conftest import MANAGER, WORKER
from core.exceptions import Forbidden, InvalidInput
from models.perimeter import PerimeterConfig
from services.perimeter_service import (
    PerimeterService,
    check_location,
    is_within_perimeter,
)
from utils.geofence import Coordinate, distance_km


def _config(lat=0.0, long=0.0, radius_km=1.0):
    return PerimeterConfig(center_lat=lat, center_long=long, radius_km=radius_km)


def test_no_perimeter_admits_any_location():
    assert is_within_perimeter(Coordinate(89.0, 179.0), None)
    check = check_location(Coordinate(10, 10), None)
    assert check.enforced is False
    assert check.within is True
    assert check.distance_km is None


def test_exact_radius_counts_as_inside():
    location = Coordinate(1.0, 0.0)
    radius = distance_km(location, Coordinate(0.0, 0.0))
    assert is_within_perimeter(location, _config(radius_km=radius))


def test_outside_radius_is_rejected():
    assert not is_within_perimeter(Coordinate(1.0, 0.0), _config(radius_km=100))


def test_check_location_reports_distance_and_radius():
    check = check_location(Coordinate(37.8, -122.5), _config(37.7749, -122.4194, 1))
    assert check.enforced is True
    assert check.within is False
    assert check.distance_km == pytest.approx(7.61, abs=0.05)
    assert check.radius_km == 1


def test_manager_sets_perimeter(session):
    config = PerimeterService.set_perimeter(session, MANAGER, 37.7749, -122.4194, 1.5)

    assert config.id is not None
    assert config.radius_km == 1.5
    assert PerimeterService.latest(session).id == config.id


def test_second_set_updates_the_singleton_row(session):
    first = PerimeterService.set_perimeter(session, MANAGER, 10, 20, 1)
    first_id = first.id
    second = PerimeterService.set_perimeter(session, MANAGER, 11, 21, 2)

    assert second.id == first_id
    assert (second.center_lat, second.center_long, second.radius_km) == (11, 21, 2)
    assert len(session.exec(select(PerimeterConfig)).all()) == 1


def test_null_field_means_clear(session):
    PerimeterService.set_perimeter(session, MANAGER, 10, 20, 5)

    result = PerimeterService.set_perimeter(session, MANAGER, 10, 20, None)

    assert result is None
    assert PerimeterService.latest(session) is None


def test_clear_is_idempotent(session):
    PerimeterService.clear_perimeter(session, MANAGER)
    PerimeterService.clear_perimeter(session, MANAGER)
    assert PerimeterService.latest(session) is None


@pytest.mark.parametrize(
    "lat, long, radius",
    [(91, 0, 1), (-90.5, 0, 1), (0, 181, 1), (0, -180.1, 1), (0, 0, 0), (0, 0, -3)],
)
def test_out_of_range_values_are_invalid(session, lat, long, radius):
    with pytest.raises(InvalidInput):
        PerimeterService.set_perimeter(session, MANAGER, lat, long, radius)
    assert PerimeterService.latest(session) is None


def test_worker_cannot_set_perimeter(session):
    PerimeterService.set_perimeter(session, MANAGER, 10, 20, 5)

    with pytest.raises(Forbidden):
        PerimeterService.set_perimeter(session, WORKER, 0, 0, 1)

    stored = PerimeterService.latest(session)
    assert (stored.center_lat, stored.center_long, stored.radius_km) == (10, 20, 5)


def test_worker_cannot_clear_perimeter_even_via_null_fields(session):
    PerimeterService.set_perimeter(session, MANAGER, 10, 20, 5)

    with pytest.raises(Forbidden):
        PerimeterService.set_perimeter(session, WORKER, None, None, None)
    with pytest.raises(Forbidden):
        PerimeterService.clear_perimeter(session, WORKER)

    assert PerimeterService.latest(session) is not None


def test_failed_update_keeps_previous_perimeter(session, monkeypatch):
    PerimeterService.set_perimeter(session, MANAGER, 10, 20, 5)

    def fail_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", fail_commit)
    with pytest.raises(OperationalError):
        PerimeterService.set_perimeter(session, MANAGER, 1, 2, 3)
    with pytest.raises(OperationalError):
        PerimeterService.clear_perimeter(session, MANAGER)

    monkeypatch.undo()
    stored = PerimeterService.latest(session)
    assert (stored.center_lat, stored.center_long, stored.radius_km) == (10, 20, 5)
