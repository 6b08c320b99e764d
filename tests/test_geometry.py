import pytest

from geometry import (
    distance_m,
    equirect_m,
    from_local_xy,
    haversine_m,
    point_to_segment_m,
    segment_intersects_circle,
    to_local_xy,
)
from models import DangerZone, Point


@pytest.mark.parametrize(
    "a, b",
    [
        ((0.0, 0.0), (0.0, 0.01)),
        ((52.52, 13.40), (52.54, 13.43)),
        ((-33.86, 151.20), (-33.89, 151.18)),
        ((60.17, 24.93), (60.20, 24.97)),
    ],
)
def test_flat_distance_agrees_with_great_circle_within_one_percent(a, b) -> None:
    exact = haversine_m(a[0], a[1], b[0], b[1])
    approx = equirect_m(a[0], a[1], b[0], b[1])
    assert exact < 5_000
    assert approx == pytest.approx(exact, rel=0.01)


def test_distance_is_symmetric_and_zero_on_self() -> None:
    a, b = Point(48.85, 2.35), Point(48.86, 2.36)
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))
    assert distance_m(a, a) == 0.0


def test_local_projection_round_trips() -> None:
    origin = Point(52.0, 13.0)
    p = Point(52.003, 13.004)
    x, y = to_local_xy(origin, p)
    assert from_local_xy(origin, x, y) == pytest.approx((p.lat, p.lon))


def test_point_to_segment_interior_projection() -> None:
    a, b = Point(0.0, 0.0), Point(0.0, 0.01)
    assert point_to_segment_m(Point(0.001, 0.005), a, b) == pytest.approx(111.0)


def test_point_to_segment_clamps_to_endpoints() -> None:
    a, b = Point(0.0, 0.0), Point(0.0, 0.01)
    assert point_to_segment_m(Point(0.0, 0.02), a, b) == pytest.approx(1110.0)
    assert point_to_segment_m(Point(0.0, -0.01), a, b) == pytest.approx(1110.0)


def test_point_to_degenerate_segment_is_point_distance() -> None:
    a = Point(10.0, 10.0)
    p = Point(10.001, 10.0)
    assert point_to_segment_m(p, a, a) == pytest.approx(distance_m(p, a), rel=1e-6)


def test_segment_intersects_circle_with_and_without_buffer() -> None:
    a, b = Point(0.0, 0.0), Point(0.0, 0.01)
    on_line = DangerZone(lat=0.0, lon=0.005, radius_m=100.0)
    off_line = DangerZone(lat=0.002, lon=0.005, radius_m=100.0)  # ~222 m north

    assert segment_intersects_circle(a, b, on_line)
    assert not segment_intersects_circle(a, b, off_line)
    assert segment_intersects_circle(a, b, off_line, buffer_m=150.0)
