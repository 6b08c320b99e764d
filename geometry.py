"""
geometry.py

Distance and intersection primitives on a locally-flat projection of
latitude/longitude. Good to about 1% of the great-circle distance over
spans under ~5 km, which is all pedestrian routing needs.

Every function accepts any object exposing `lat` and `lon` attributes
(Point, DangerZone, graph node views wrapped in Point, ...).
"""

from typing import Tuple
import math

METERS_PER_DEG = 111_000.0
EARTH_RADIUS_M = 6371000.0


def haversine_m(lat1, lon1, lat2, lon2) -> float:
    """Great-circle distance in meters. Reference for the flat approximation."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(
        dlambda / 2
    ) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def equirect_m(lat1, lon1, lat2, lon2) -> float:
    """Equirectangular distance in meters, longitude scaled by cos(mean latitude)."""
    dy = (lat1 - lat2) * METERS_PER_DEG
    dx = (lon1 - lon2) * METERS_PER_DEG * math.cos(math.radians((lat1 + lat2) / 2))
    return math.hypot(dx, dy)


def distance_m(a, b) -> float:
    return equirect_m(a.lat, a.lon, b.lat, b.lon)


def to_local_xy(origin, p) -> Tuple[float, float]:
    """
    Project p onto a flat meter grid centered on origin.

    x grows east, y grows north.
    """
    kx = METERS_PER_DEG * math.cos(math.radians(origin.lat))
    return (p.lon - origin.lon) * kx, (p.lat - origin.lat) * METERS_PER_DEG


def from_local_xy(origin, x: float, y: float) -> Tuple[float, float]:
    """Inverse of to_local_xy. Returns (lat, lon)."""
    kx = METERS_PER_DEG * math.cos(math.radians(origin.lat))
    return origin.lat + y / METERS_PER_DEG, origin.lon + x / kx


def point_to_segment_m(p, a, b) -> float:
    """
    Minimum distance in meters from p to the segment a-b.

    The projection parameter t is clamped to [0, 1] so the closest
    point never leaves the segment.
    """
    ax, ay = to_local_xy(p, a)
    bx, by = to_local_xy(p, b)
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(ax, ay)
    # p sits at the origin of the local grid
    t = -(ax * dx + ay * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(ax + t * dx, ay + t * dy)


def segment_intersects_circle(a, b, zone, buffer_m: float = 0.0) -> bool:
    """True if segment a-b passes within radius + buffer of the zone center."""
    return point_to_segment_m(zone, a, b) < zone.radius_m + buffer_m


def interpolate(a, b, t: float) -> Tuple[float, float]:
    """Linear interpolation in degree space. Returns (lat, lon)."""
    return a.lat + (b.lat - a.lat) * t, a.lon + (b.lon - a.lon) * t
