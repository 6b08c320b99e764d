"""
models.py

Dataclasses for points, danger zones and routing results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import math


def _coord(data: Dict[str, Any], *keys: str) -> float:
    for key in keys:
        if key in data:
            try:
                value = float(data[key])
            except (TypeError, ValueError):
                raise ValueError(f"Coordinate '{key}' must be numeric, got {data[key]!r}")
            if not math.isfinite(value):
                raise ValueError(f"Coordinate '{key}' must be finite, got {data[key]!r}")
            return value
    raise ValueError(f"Missing coordinate, expected one of {keys}")


@dataclass(frozen=True)
class Point:
    """A geographic coordinate in decimal degrees."""
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        """
        Parse a point from a JSON-like dict.

        Accepts {"lat", "lon"}, {"latitude", "longitude"} or {"lat", "lng"}.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Point must be an object, got {type(data).__name__}")
        lat = _coord(data, "lat", "latitude")
        lon = _coord(data, "lon", "lng", "longitude")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180.0 <= lon <= 180.0:
            raise ValueError(f"Longitude out of range: {lon}")
        return cls(lat=lat, lon=lon)


@dataclass(frozen=True)
class DangerZone:
    """
    A circular hazard reported by a user.

    Attributes:
        lat, lon: center of the circle.
        radius_m: radius in meters (>= 0).
        zone_id: identifier owned by the reporting subsystem (display only).
        description: free text shown to users (display only).
    """
    lat: float
    lon: float
    radius_m: float
    zone_id: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not math.isfinite(self.radius_m) or self.radius_m < 0:
            raise ValueError(f"Danger zone radius must be a finite number >= 0, got {self.radius_m}")

    @property
    def center(self) -> Point:
        return Point(self.lat, self.lon)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DangerZone":
        if not isinstance(data, dict):
            raise ValueError(f"Danger zone must be an object, got {type(data).__name__}")
        center = Point.from_dict(data)
        radius = _coord(data, "radius_m", "radius")
        zone_id = data.get("id", data.get("zone_id"))
        return cls(
            lat=center.lat,
            lon=center.lon,
            radius_m=radius,
            zone_id=None if zone_id is None else str(zone_id),
            description=data.get("description"),
        )


ROUTE_OK = "ok"
ROUTE_NONE = "no_route"
ROUTE_INPUT_INVALID = "input_invalid"


@dataclass(frozen=True)
class RouteResult:
    """
    Outcome of one safe-routing request.

    Attributes:
        status: "ok", "no_route" or "input_invalid".
        points: ordered route points from start to end (empty unless ok).
        source: name of the strategy that produced the route.
        reason: reason code explaining a failure.
    """
    status: str
    points: Tuple[Point, ...] = field(default_factory=tuple)
    source: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ROUTE_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "source": self.source,
            "reason": self.reason,
            "route": [[p.lat, p.lon] for p in self.points],
        }


def parse_zones(items: List[Dict[str, Any]]) -> List[DangerZone]:
    if not isinstance(items, list):
        raise ValueError("zones must be a list")
    return [DangerZone.from_dict(item) for item in items]
