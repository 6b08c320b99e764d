"""
path_safety.py

Checks whether a polyline stays outside every danger circle.

Consecutive points are sampled at evenly spaced sub-positions, so a
segment that cuts through a zone between two safe vertices is still
caught. Sampling is approximate; use geometry.segment_intersects_circle
for an exact test.
"""

from typing import Iterable, Optional, Sequence

from geometry import distance_m, interpolate
from models import DangerZone, Point

MIN_SUBDIVISIONS = 5


def point_in_zone(point, zone: DangerZone) -> bool:
    return distance_m(point, zone) <= zone.radius_m


def point_in_any_zone(point, zones: Iterable[DangerZone]) -> bool:
    return any(point_in_zone(point, z) for z in zones)


def _sample_points(route: Sequence[Point], subdivisions: int):
    for i, point in enumerate(route):
        yield point
        if i < len(route) - 1:
            nxt = route[i + 1]
            for j in range(1, subdivisions):
                lat, lon = interpolate(point, nxt, j / subdivisions)
                yield Point(lat, lon)


def is_safe(
    route: Sequence[Point],
    zones: Sequence[DangerZone],
    subdivisions: int = MIN_SUBDIVISIONS,
) -> bool:
    """
    Return True only if every sampled point of the route clears every zone.

    Args:
        route: ordered route points.
        zones: danger circles to avoid.
        subdivisions: segments are split into this many parts; must be >= 5.
    """
    if subdivisions < MIN_SUBDIVISIONS:
        raise ValueError(f"subdivisions must be >= {MIN_SUBDIVISIONS}, got {subdivisions}")
    if not zones:
        return True
    for sample in _sample_points(route, subdivisions):
        if point_in_any_zone(sample, zones):
            return False
    return True


def first_offending_zone(
    route: Sequence[Point],
    zones: Sequence[DangerZone],
    subdivisions: int = MIN_SUBDIVISIONS,
) -> Optional[DangerZone]:
    """
    The zone containing the earliest sampled route point that lies in any zone.

    Uses the same sampling as is_safe, so is_safe(route) is False exactly
    when this returns a zone.
    """
    for sample in _sample_points(route, subdivisions):
        for zone in zones:
            if point_in_zone(sample, zone):
                return zone
    return None
