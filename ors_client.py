"""
ors_client.py

Thin wrapper around the OpenRouteService (ORS) Python client to fetch
walking routes that avoid danger zones given as polygons.
"""

from typing import Any, Dict, List, Optional, Sequence
import logging

import openrouteservice
import requests
from openrouteservice import exceptions as ors_exceptions

from config import get_ors_api_key
from detours import circles_to_polygons
from logging_utils import log_event
from models import DangerZone, Point


def create_ors_client(api_key: Optional[str] = None, timeout_s: float = 10.0) -> openrouteservice.Client:
    """
    Create and return an OpenRouteService client using API key from config.
    """
    return openrouteservice.Client(
        key=api_key or get_ors_api_key(),
        timeout=timeout_s,
        retry_over_query_limit=False,
    )


def avoid_polygons_option(zones: Sequence[DangerZone], sides: int = 12) -> Dict[str, Any]:
    """ORS `avoid_polygons` value: all zones as one MultiPolygon."""
    polygons = circles_to_polygons(zones, sides=sides)
    return {
        "type": "MultiPolygon",
        "coordinates": [poly["coordinates"] for poly in polygons],
    }


def fetch_route_geojson(
    client: openrouteservice.Client,
    start: Point,
    end: Point,
    zones: Sequence[DangerZone] = (),
    profile: str = "foot-walking",
    sides: int = 12,
) -> Dict[str, Any]:
    """
    Fetch a route from ORS between start and end that avoids `zones`.

    Args:
        client: ORS client.
        start, end: route endpoints.
        zones: danger circles, sent as polygons.
        profile: ORS profile, 'foot-walking' for pedestrians.
        sides: polygon sides used to approximate each circle.

    Returns:
        GeoJSON-like dictionary of the route response.
    """
    # ORS expects list of [lon, lat] pairs
    coords = [[start.lon, start.lat], [end.lon, end.lat]]
    options = {"avoid_polygons": avoid_polygons_option(zones, sides)} if zones else None
    return client.directions(
        coordinates=coords,
        profile=profile,
        format="geojson",
        instructions=False,
        preference="shortest",
        options=options,
    )


def extract_polyline(route_geojson: Dict[str, Any]) -> List[Point]:
    """
    Route points from an ORS GeoJSON 'directions' response.
    """
    if not isinstance(route_geojson, dict):
        raise ValueError("ORS route response is not an object.")
    features = route_geojson.get("features", [])
    if not isinstance(features, list) or not features:
        raise ValueError("No features in ORS route response.")

    first_feature = features[0]
    geometry = first_feature.get("geometry") if isinstance(first_feature, dict) else None
    if not isinstance(geometry, dict):
        raise ValueError("ORS route feature has no geometry.")

    # Coordinates are [lon, lat]
    coords = geometry.get("coordinates") or []
    return [Point(float(c[1]), float(c[0])) for c in coords]


def fetch_avoiding_route(
    client: openrouteservice.Client,
    start: Point,
    end: Point,
    zones: Sequence[DangerZone],
    profile: str = "foot-walking",
    sides: int = 12,
) -> Optional[List[Point]]:
    """
    Route points from ORS, or None when the call fails or returns no usable route.
    """
    try:
        route_geojson = fetch_route_geojson(client, start, end, zones, profile=profile, sides=sides)
        points = extract_polyline(route_geojson)
    except (
        ors_exceptions.ApiError,
        ors_exceptions.HTTPError,
        ors_exceptions.Timeout,
        requests.RequestException,
        ValueError,
        TypeError,
        IndexError,
    ) as e:
        log_event("ors_request_failed", level=logging.WARNING, error=f"{type(e).__name__}: {e}")
        return None

    if len(points) < 2:
        log_event("ors_request_failed", level=logging.WARNING, error="route with fewer than two points")
        return None
    return points
