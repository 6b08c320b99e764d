"""
detours.py

Waypoint geometry for routing around a danger circle.

- tangential_pivots: two candidate waypoints on either side of a zone.
- arc_detour: a smoother multi-point sweep around one side of a zone.
- circles_to_polygons: regular n-gons for services that avoid polygons.

All offsets are computed on the local meter grid from geometry.py, so a
pivot placed at radius + buffer really is that many meters from the
center at any latitude.
"""

from typing import Any, Dict, List, Sequence
import math

from geometry import from_local_xy, segment_intersects_circle, to_local_xy
from models import DangerZone, Point

ARC_SWEEP_RAD = math.pi / 3  # ~60 degrees


def _base_angle(zone: DangerZone, start: Point, end: Point) -> float:
    """Angle (local grid) from the zone center to the start-end midpoint."""
    mid = Point((start.lat + end.lat) / 2, (start.lon + end.lon) / 2)
    x, y = to_local_xy(zone, mid)
    if x == 0 and y == 0:
        # midpoint on the center: use the travel direction so the pivots
        # fall perpendicular to the line
        sx, sy = to_local_xy(zone, start)
        ex, ey = to_local_xy(zone, end)
        return math.atan2(ey - sy, ex - sx)
    return math.atan2(y, x)


def _offset(zone: DangerZone, angle: float, dist_m: float) -> Point:
    lat, lon = from_local_xy(zone, dist_m * math.cos(angle), dist_m * math.sin(angle))
    return Point(lat, lon)


def tangential_pivots(
    zone: DangerZone, start: Point, end: Point, buffer_m: float = 30.0
) -> List[Point]:
    """
    Two points radius + buffer away from the zone center, at +/-90 degrees
    from the direction of the start-end midpoint.

    The first pivot is on the counter-clockwise side.
    """
    base = _base_angle(zone, start, end)
    dist = zone.radius_m + buffer_m
    return [_offset(zone, base + math.pi / 2, dist), _offset(zone, base - math.pi / 2, dist)]


def arc_detour(
    start: Point,
    end: Point,
    zone: DangerZone,
    steps: int = 5,
    buffer_m: float = 40.0,
) -> List[Point]:
    """
    Sweep `steps` points around the zone at radius + buffer.

    The arc starts at the direction of the start-end midpoint and turns
    toward the side given by the sign of cross(start->end, start->zone),
    covering about 60 degrees.
    """
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    sx, sy = to_local_xy(zone, start)
    ex, ey = to_local_xy(zone, end)
    # zone center is the local origin, so start->zone is (-sx, -sy)
    cross = (ex - sx) * (-sy) - (ey - sy) * (-sx)
    side = 1 if cross > 0 else -1

    base = _base_angle(zone, start, end)
    dist = zone.radius_m + buffer_m
    delta = ARC_SWEEP_RAD / (steps - 1) if steps > 1 else 0.0
    return [_offset(zone, base + side * delta * i, dist) for i in range(steps)]


def circles_to_polygons(zones: Sequence[DangerZone], sides: int = 12) -> List[Dict[str, Any]]:
    """
    Approximate each circle with a closed regular n-gon.

    Returns GeoJSON Polygon geometries; coordinates are [lon, lat] and the
    ring repeats its first vertex at the end.
    """
    if sides < 3:
        raise ValueError(f"A polygon needs at least 3 sides, got {sides}")
    polygons = []
    for z in zones:
        ring = []
        for i in range(sides):
            p = _offset(z, (i / sides) * 2 * math.pi, z.radius_m)
            ring.append([p.lon, p.lat])
        ring.append(ring[0])
        polygons.append({"type": "Polygon", "coordinates": [ring]})
    return polygons


def zone_on_path(start: Point, end: Point, zone: DangerZone, buffer_m: float = 40.0) -> bool:
    """True if the radius + buffer band of the zone touches the direct start-end line."""
    return segment_intersects_circle(start, end, zone, buffer_m)


def zones_on_path(
    start: Point, end: Point, zones: Sequence[DangerZone], buffer_m: float = 40.0
) -> List[DangerZone]:
    return [z for z in zones if zone_on_path(start, end, z, buffer_m)]
