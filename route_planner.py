"""
route_planner.py

Single entry point for safe walking routes.

The planner owns an ordered chain of strategies sharing one contract,
`async find(start, end, zones) -> list[Point] | None`:

  offline graph A*  ->  OSRM orchestrator  ->  ORS avoid-polygons  ->  local detour

Endpoints are validated before any strategy runs. Every candidate,
whatever its source, is re-checked by the safety verifier; the first
safe one wins. The planner never returns an unsafe route.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence
import asyncio
import logging

import httpx
import networkx as nx

from astar_planner import find_path
from config import Settings, get_settings
from errors import AssetUnavailable, InputInvalid, NoPathFound, SafeRoutingError
from graph_builder import load_road_graph
from local_detour import local_route
from logging_utils import log_event
from models import ROUTE_INPUT_INVALID, ROUTE_NONE, ROUTE_OK, DangerZone, Point, RouteResult
from online_router import OnlineRouteOrchestrator
from ors_client import create_ors_client, fetch_avoiding_route
from osrm_client import OSRMClient
from path_safety import MIN_SUBDIVISIONS, is_safe, point_in_any_zone


class OfflineGraphStrategy:
    name = "offline_graph"

    def __init__(self, graph: nx.Graph) -> None:
        self.graph = graph

    async def find(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> Optional[List[Point]]:
        path = find_path(self.graph, start, end, zones)
        if not path:
            return None
        # walks to and from the snapped nodes belong to the route and get verified with it
        if path[0] != start:
            path.insert(0, start)
        if path[-1] != end:
            path.append(end)
        return path


class OsrmStrategy:
    """Runs the online orchestrator against a fresh OSRM client per request."""

    name = "osrm"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self.transport = transport

    async def find(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> Optional[List[Point]]:
        s = self.settings
        async with OSRMClient(
            base_url=s.osrm_base_url,
            profile=s.osrm_profile,
            route_timeout_s=s.route_timeout_s,
            snap_timeout_s=s.snap_timeout_s,
            transport=self.transport,
        ) as client:
            orchestrator = OnlineRouteOrchestrator(
                client,
                fast_path_timeout_s=s.fast_path_timeout_s,
                path_buffer_m=s.path_buffer_m,
                fallback_buffers_m=s.fallback_buffers_m,
                max_depth=s.fallback_max_depth,
                max_requests=s.fallback_max_requests,
                subdivisions=s.safety_subdivisions,
            )
            return await orchestrator.route(start, end, zones)


class OrsAvoidPolygonStrategy:
    """
    ORS avoid-polygons directions on a private worker pool.

    The pool is never joined by the event loop, so a call that outlives
    `timeout_s` is abandoned instead of holding up the routing request.
    """

    name = "ors_avoid_polygons"

    def __init__(self, client, profile: str = "foot-walking", sides: int = 12, timeout_s: float = 10.0) -> None:
        self.client = client
        self.profile = profile
        self.sides = sides
        self.timeout_s = timeout_s
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="ors")

    async def find(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> Optional[List[Point]]:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(
            self._executor, fetch_avoiding_route, self.client, start, end, zones, self.profile, self.sides
        )
        try:
            return await asyncio.wait_for(call, self.timeout_s)
        except asyncio.TimeoutError:
            log_event("ors_request_failed", level=logging.WARNING, error=f"timed out after {self.timeout_s}s")
            return None


class LocalDetourStrategy:
    name = "local_detour"

    def __init__(self, max_passes: int = 20, intersect_buffer_m: float = 5.0, detour_buffer_m: float = 30.0) -> None:
        self.max_passes = max_passes
        self.intersect_buffer_m = intersect_buffer_m
        self.detour_buffer_m = detour_buffer_m

    async def find(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> Optional[List[Point]]:
        return local_route(
            start, end, zones, self.max_passes, self.intersect_buffer_m, self.detour_buffer_m
        )


class SafeRouter:
    """
    Args:
        strategies: tried in order; the first verified-safe result wins.
        subdivisions: sampling density for the final safety check.
    """

    def __init__(self, strategies: Sequence, subdivisions: int = MIN_SUBDIVISIONS) -> None:
        self.strategies = list(strategies)
        self.subdivisions = subdivisions

    @property
    def strategy_names(self) -> List[str]:
        return [s.name for s in self.strategies]

    async def route_async(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> RouteResult:
        zones = tuple(zones)
        for label, point in (("start", start), ("end", end)):
            if point_in_any_zone(point, zones):
                log_event("route_input_invalid", endpoint=label, lat=point.lat, lon=point.lon)
                return RouteResult(status=ROUTE_INPUT_INVALID, reason=InputInvalid.reason_code)

        for strategy in self.strategies:
            try:
                candidate = await strategy.find(start, end, zones)
            except SafeRoutingError as e:
                log_event("route_strategy_result", level=logging.WARNING, strategy=strategy.name, outcome=e.reason_code, error=str(e))
                continue

            if not candidate:
                log_event("route_strategy_result", strategy=strategy.name, outcome="none")
                continue
            if not is_safe(candidate, zones, self.subdivisions):
                log_event("route_rejected_unsafe", level=logging.WARNING, strategy=strategy.name, points=len(candidate))
                continue

            log_event("route_strategy_result", strategy=strategy.name, outcome="ok", points=len(candidate))
            return RouteResult(status=ROUTE_OK, points=tuple(candidate), source=strategy.name)

        log_event("route_no_result", strategies=self.strategy_names, zones=len(zones))
        return RouteResult(status=ROUTE_NONE, reason=NoPathFound.reason_code)

    def route(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> RouteResult:
        return asyncio.run(self.route_async(start, end, zones))

    def route_or_raise(self, start: Point, end: Point, zones: Sequence[DangerZone]) -> RouteResult:
        """Like route(), but raises InputInvalid or NoPathFound instead of returning a failed result."""
        result = self.route(start, end, zones)
        if result.status == ROUTE_INPUT_INVALID:
            raise InputInvalid("Start or end point lies inside a danger zone")
        if not result.ok:
            raise NoPathFound("No safe route found by any strategy")
        return result


def build_router(
    settings: Optional[Settings] = None,
    graph: Optional[nx.Graph] = None,
    load_graph: bool = True,
    osrm_transport: Optional[httpx.AsyncBaseTransport] = None,
    ors_client=None,
) -> SafeRouter:
    """
    Assemble the default strategy chain.

    The road graph is loaded once here (unless given) and owned by the
    returned router; a missing or broken asset only drops the offline
    strategy. The ORS strategy is added when an API key or client is
    available, the local detour when enabled in settings.
    """
    s = settings or get_settings()

    if graph is None and load_graph:
        try:
            graph = load_road_graph(s.road_graph_path, precision=s.node_precision)
        except AssetUnavailable as e:
            log_event("road_graph_unavailable", level=logging.WARNING, path=s.road_graph_path, error=str(e))

    strategies: list = []
    if graph is not None:
        strategies.append(OfflineGraphStrategy(graph))
    strategies.append(OsrmStrategy(s, transport=osrm_transport))
    if ors_client is None and s.ors_api_key:
        ors_client = create_ors_client(s.ors_api_key, timeout_s=s.ors_timeout_s)
    if ors_client is not None:
        strategies.append(
            OrsAvoidPolygonStrategy(ors_client, profile=s.ors_profile, sides=s.polygon_sides, timeout_s=s.ors_timeout_s)
        )
    if s.local_detour_enabled:
        strategies.append(
            LocalDetourStrategy(s.local_max_passes, s.local_intersect_buffer_m, s.local_detour_buffer_m)
        )
    return SafeRouter(strategies, subdivisions=s.safety_subdivisions)
