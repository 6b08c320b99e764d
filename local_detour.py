"""
local_detour.py

Dependency-free last resort: start from the straight line and keep
inserting one detour point beside whichever zone a segment crosses,
until nothing crosses or the pass limit is hit.

No street network is involved, so the result is a guide line rather
than a walkable street route.
"""

from typing import List, Optional, Sequence
import math

from geometry import distance_m, from_local_xy, segment_intersects_circle, to_local_xy
from models import DangerZone, Point
from path_safety import point_in_any_zone


def detour_around(a: Point, b: Point, zone: DangerZone, buffer_m: float = 30.0) -> Point:
    """
    A point radius + buffer from the zone center, perpendicular to a-b.

    The side with the shorter a -> point -> b walk wins, left on a tie.
    """
    ax, ay = to_local_xy(zone, a)
    bx, by = to_local_xy(zone, b)
    dx, dy = bx - ax, by - ay
    length = math.hypot(dx, dy)
    if length == 0:
        px, py = 0.0, 1.0
    else:
        px, py = -dy / length, dx / length

    dist = zone.radius_m + buffer_m
    candidates = []
    for sign in (1, -1):
        lat, lon = from_local_xy(zone, sign * px * dist, sign * py * dist)
        candidates.append(Point(lat, lon))
    return min(candidates, key=lambda p: distance_m(a, p) + distance_m(p, b))


def _first_crossing(path: Sequence[Point], zones: Sequence[DangerZone], buffer_m: float):
    for i in range(len(path) - 1):
        for zone in zones:
            if segment_intersects_circle(path[i], path[i + 1], zone, buffer_m):
                return i, zone
    return None


def local_safe_path(
    start: Point,
    end: Point,
    zones: Sequence[DangerZone],
    max_passes: int = 20,
    intersect_buffer_m: float = 5.0,
    detour_buffer_m: float = 30.0,
) -> List[Point]:
    """
    Insert detour points until no segment comes within radius + buffer of a zone.

    Always terminates after `max_passes` insertions; the caller must verify
    the result since a dense zone layout can leave it unsafe.
    """
    path = [start, end]
    for _ in range(max_passes):
        hit = _first_crossing(path, zones, intersect_buffer_m)
        if hit is None:
            break
        i, zone = hit
        path.insert(i + 1, detour_around(path[i], path[i + 1], zone, detour_buffer_m))
    return path


def local_route(
    start: Point,
    end: Point,
    zones: Sequence[DangerZone],
    max_passes: int = 20,
    intersect_buffer_m: float = 5.0,
    detour_buffer_m: float = 30.0,
) -> Optional[List[Point]]:
    """local_safe_path, or None if an inserted point landed inside a zone."""
    path = local_safe_path(start, end, zones, max_passes, intersect_buffer_m, detour_buffer_m)
    if any(point_in_any_zone(p, zones) for p in path):
        return None
    return path
