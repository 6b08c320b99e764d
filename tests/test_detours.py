import math

import pytest

from detours import arc_detour, circles_to_polygons, tangential_pivots, zones_on_path
from geometry import distance_m
from models import DangerZone, Point

START = Point(0.0, 0.0)
END = Point(0.0, 0.01)


@pytest.mark.parametrize(
    "zone, start, end",
    [
        (DangerZone(lat=0.0005, lon=0.005, radius_m=100.0), START, END),
        (DangerZone(lat=0.0, lon=0.005, radius_m=100.0), START, END),
        (DangerZone(lat=52.5200, lon=13.4050, radius_m=80.0), Point(52.515, 13.400), Point(52.526, 13.411)),
        (DangerZone(lat=-33.87, lon=151.21, radius_m=0.0), Point(-33.875, 151.2), Point(-33.86, 151.22)),
    ],
)
@pytest.mark.parametrize("buffer_m", [0.0, 30.0, 120.0])
def test_pivots_clear_radius_plus_buffer(zone, start, end, buffer_m) -> None:
    pivots = tangential_pivots(zone, start, end, buffer_m)
    assert len(pivots) == 2
    for pivot in pivots:
        assert distance_m(pivot, zone) >= zone.radius_m + buffer_m - 0.5


def test_pivots_sit_on_opposite_sides_of_the_zone() -> None:
    zone = DangerZone(lat=0.0005, lon=0.005, radius_m=100.0)
    left, right = tangential_pivots(zone, START, END, 30.0)
    assert distance_m(left, right) == pytest.approx(260.0, abs=0.5)
    # zone is north of the line, so the pivots lie east and west of it
    assert left.lat == pytest.approx(zone.lat, abs=1e-9)
    assert right.lat == pytest.approx(zone.lat, abs=1e-9)
    assert left.lon > zone.lon > right.lon


def test_pivots_for_zone_on_midpoint_are_perpendicular_to_travel() -> None:
    zone = DangerZone(lat=0.0, lon=0.005, radius_m=100.0)
    north, south = tangential_pivots(zone, START, END, 30.0)
    assert north.lon == pytest.approx(0.005, abs=1e-9)
    assert south.lon == pytest.approx(0.005, abs=1e-9)
    assert north.lat == pytest.approx(130.0 / 111_000)
    assert south.lat == pytest.approx(-130.0 / 111_000)


def test_arc_detour_sweeps_steps_points_on_the_circle() -> None:
    zone = DangerZone(lat=0.0005, lon=0.005, radius_m=100.0)
    points = arc_detour(START, END, zone, steps=5, buffer_m=40.0)
    assert len(points) == 5
    for p in points:
        assert distance_m(p, zone) == pytest.approx(140.0, abs=0.5)

    # starts toward the midpoint (due south of the center) ...
    assert points[0].lon == pytest.approx(zone.lon, abs=1e-9)
    assert points[0].lat < zone.lat
    # ... and turns ~60 degrees
    a0 = math.atan2(points[0].lat - zone.lat, points[0].lon - zone.lon)
    a4 = math.atan2(points[-1].lat - zone.lat, points[-1].lon - zone.lon)
    assert abs(a4 - a0) == pytest.approx(math.pi / 3, abs=0.01)


def test_arc_detour_side_follows_cross_product_sign() -> None:
    north_zone = DangerZone(lat=0.0005, lon=0.005, radius_m=100.0)
    south_zone = DangerZone(lat=-0.0005, lon=0.005, radius_m=100.0)
    north_arc = arc_detour(START, END, north_zone, steps=3)
    south_arc = arc_detour(START, END, south_zone, steps=3)
    # mirrored zones sweep mirrored arcs: both turn toward the end point
    assert north_arc[-1].lon > north_zone.lon
    assert south_arc[-1].lon > south_zone.lon


def test_arc_detour_rejects_zero_steps() -> None:
    with pytest.raises(ValueError):
        arc_detour(START, END, DangerZone(lat=0.0, lon=0.005, radius_m=10.0), steps=0)


def test_circles_to_polygons_builds_closed_rings() -> None:
    zones = [
        DangerZone(lat=51.5, lon=-0.12, radius_m=100.0),
        DangerZone(lat=51.51, lon=-0.13, radius_m=40.0),
    ]
    polygons = circles_to_polygons(zones, sides=12)
    assert len(polygons) == 2
    for zone, polygon in zip(zones, polygons):
        assert polygon["type"] == "Polygon"
        ring = polygon["coordinates"][0]
        assert len(ring) == 13
        assert ring[0] == ring[-1]
        for lon, lat in ring:
            assert distance_m(Point(lat, lon), zone) == pytest.approx(zone.radius_m, abs=0.5)


def test_circles_to_polygons_needs_three_sides() -> None:
    with pytest.raises(ValueError):
        circles_to_polygons([DangerZone(lat=0.0, lon=0.0, radius_m=1.0)], sides=2)


def test_zones_on_path_uses_radius_plus_buffer() -> None:
    touching = DangerZone(lat=120 / 111_000, lon=0.005, radius_m=100.0)  # 120 m off the line
    distant = DangerZone(lat=300 / 111_000, lon=0.005, radius_m=100.0)
    assert zones_on_path(START, END, [touching, distant], buffer_m=40.0) == [touching]
    assert zones_on_path(START, END, [touching, distant], buffer_m=0.0) == []
