"""
osrm_client.py

Async wrapper around the OSRM HTTP API for walking directions and
nearest-road snapping.

Every public call absorbs failures (timeouts, transport errors, non-2xx
status, non-"Ok" payloads, malformed JSON) and returns None, so callers
always have a defined next step.
"""

from typing import Any, Dict, List, Optional, Sequence
import asyncio
import logging

import httpx

from errors import ServiceUnavailable
from logging_utils import log_event
from models import Point


def _format_osrm_error(resp: httpx.Response) -> str:
    """Best-effort decode of OSRM JSON error payloads."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and (data.get("code") or data.get("message")):
        return f"OSRM {resp.status_code} {data.get('code') or ''}: {data.get('message') or ''}".strip()

    body = (resp.text or "").strip().replace("\n", " ")
    if len(body) > 240:
        body = body[:240] + "..."
    return f"OSRM {resp.status_code}: {body}" if body else f"OSRM HTTP {resp.status_code}"


def _coord(p: Point) -> str:
    # OSRM expects lon,lat
    return f"{p.lon:.6f},{p.lat:.6f}"


class OSRMClient:
    """
    One client per routing request; close it (or use `async with`) when done.

    Args:
        base_url: OSRM server root, e.g. https://router.project-osrm.org
        profile: OSRM profile, 'foot' for walking.
        route_timeout_s: budget for a single /route call.
        snap_timeout_s: budget for a single /nearest call.
        transport: optional httpx transport (tests pass a MockTransport).
    """

    def __init__(
        self,
        *,
        base_url: str,
        profile: str = "foot",
        route_timeout_s: float = 6.0,
        snap_timeout_s: float = 0.8,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.route_timeout_s = route_timeout_s
        self.snap_timeout_s = snap_timeout_s
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(route_timeout_s),
            headers={"accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "OSRMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _get_json(self, url: str, params: Dict[str, str], timeout_s: float) -> Dict[str, Any]:
        try:
            resp = await asyncio.wait_for(
                self._client.get(url, params=params, timeout=timeout_s), timeout_s
            )
        except asyncio.TimeoutError as e:
            raise ServiceUnavailable(f"OSRM request timed out after {timeout_s}s") from e
        except httpx.HTTPError as e:
            # some httpx errors stringify to ""
            raise ServiceUnavailable(f"{type(e).__name__}: {e!r}") from e

        if resp.status_code != 200:
            raise ServiceUnavailable(_format_osrm_error(resp))
        try:
            data = resp.json()
        except ValueError as e:
            raise ServiceUnavailable("OSRM returned invalid JSON") from e
        if not isinstance(data, dict) or data.get("code") != "Ok":
            code = data.get("code") if isinstance(data, dict) else None
            raise ServiceUnavailable(f"OSRM error code={code}")
        return data

    async def fetch_route(self, points: Sequence[Point]) -> Optional[List[Point]]:
        """
        Walking route through `points` in order (start, waypoints..., end).

        Returns the full route geometry, or None on any failure.
        """
        if len(points) < 2:
            raise ValueError("A route needs at least two points")
        coords = ";".join(_coord(p) for p in points)
        url = f"{self.base_url}/route/v1/{self.profile}/{coords}"
        params = {"overview": "full", "geometries": "geojson"}
        try:
            data = await self._get_json(url, params, self.route_timeout_s)
            try:
                geometry = data["routes"][0]["geometry"]["coordinates"]
                route = [Point(float(lat), float(lon)) for lon, lat in geometry]
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise ServiceUnavailable(f"Malformed OSRM route payload: {e!r}") from e
            if len(route) < 2:
                raise ServiceUnavailable("OSRM returned a route with fewer than two points")
            return route
        except ServiceUnavailable as e:
            log_event("osrm_request_failed", level=logging.WARNING, service="route", waypoints=len(points), error=str(e))
            return None

    async def snap_to_road(self, point: Point) -> Optional[Point]:
        """Nearest point on the walkable road network, or None."""
        url = f"{self.base_url}/nearest/v1/{self.profile}/{_coord(point)}"
        try:
            data = await self._get_json(url, {"number": "1"}, self.snap_timeout_s)
            try:
                lon, lat = data["waypoints"][0]["location"]
                return Point(float(lat), float(lon))
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise ServiceUnavailable(f"Malformed OSRM nearest payload: {e!r}") from e
        except ServiceUnavailable as e:
            log_event("osrm_request_failed", level=logging.WARNING, service="nearest", error=str(e))
            return None
