"""
online_router.py

Safe walking routes from an online directions service.

Two sub-strategies, tried in order:

  1. Fast path: pivots around every zone that touches the direct line are
     snapped to the street network in parallel, then one route through
     all surviving anchors is raced against a short timer.
  2. Fallback: request the direct route; if it enters a zone, split the
     leg at a pivot beside the first offending zone and solve both halves
     recursively, widening the pivot buffer until one works.

The recursion depth and the number of directions requests are both
bounded, so pathological zone layouts end in None rather than runaway
recursion.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import asyncio
import logging

from detours import tangential_pivots, zones_on_path
from geometry import distance_m
from logging_utils import log_event
from models import DangerZone, Point
from path_safety import MIN_SUBDIVISIONS, first_offending_zone, is_safe, point_in_any_zone


def _discard_result(task: "asyncio.Future") -> None:
    # the race was lost; retrieve the outcome so it is not reported as unhandled
    if not task.cancelled():
        task.exception()


@dataclass
class LegBudget:
    """Directions requests still allowed for one fallback search."""
    remaining: int

    def take(self) -> bool:
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return True


class OnlineRouteOrchestrator:
    """
    Args:
        client: directions/snapping service exposing
                `async fetch_route(points) -> list[Point] | None` and
                `async snap_to_road(point) -> Point | None` (see OSRMClient).
        fast_path_timeout_s: race timer for the single anchored request.
        path_buffer_m: buffer used both to find zones on the direct line and
                       to place fast-path pivots.
        fallback_buffers_m: widening pivot buffers tried per offending zone.
        max_depth: deepest recursion level the fallback may reach.
        max_requests: directions requests allowed per fallback search.
        subdivisions: sampling density handed to the safety verifier.
    """

    def __init__(
        self,
        client,
        *,
        fast_path_timeout_s: float = 1.2,
        path_buffer_m: float = 40.0,
        fallback_buffers_m: Sequence[float] = (30.0, 60.0, 90.0, 120.0),
        max_depth: int = 6,
        max_requests: int = 64,
        subdivisions: int = MIN_SUBDIVISIONS,
    ) -> None:
        self.client = client
        self.fast_path_timeout_s = fast_path_timeout_s
        self.path_buffer_m = path_buffer_m
        self.fallback_buffers_m = tuple(fallback_buffers_m)
        self.max_depth = max_depth
        self.max_requests = max_requests
        self.subdivisions = subdivisions

    async def route(
        self, start: Point, end: Point, zones: Sequence[DangerZone]
    ) -> Optional[List[Point]]:
        if not zones:
            return await self.client.fetch_route([start, end])

        quick = await self.fast_path(start, end, zones)
        if quick is not None:
            return quick
        return await self.fallback(start, end, zones)

    # ------------------------------------------------------------------ fast path

    async def snap_anchors(
        self, start: Point, end: Point, zones: Sequence[DangerZone]
    ) -> List[Point]:
        """
        Snapped pivots for every zone on the direct line, nearest to start first.

        Snap queries run concurrently and all of them are awaited; a failed
        or slow query only drops its own candidate.
        """
        candidates: List[Point] = []
        for zone in zones_on_path(start, end, zones, self.path_buffer_m):
            candidates.extend(tangential_pivots(zone, start, end, self.path_buffer_m))
        if not candidates:
            return []

        results = await asyncio.gather(
            *(self.client.snap_to_road(c) for c in candidates), return_exceptions=True
        )
        anchors = []
        for result in results:
            if isinstance(result, BaseException):
                log_event("snap_query_failed", level=logging.WARNING, error=repr(result))
            elif result is not None and not point_in_any_zone(result, zones):
                anchors.append(result)
        anchors.sort(key=lambda p: distance_m(start, p))
        return anchors

    async def fast_path(
        self, start: Point, end: Point, zones: Sequence[DangerZone]
    ) -> Optional[List[Point]]:
        anchors = await self.snap_anchors(start, end, zones)
        if not anchors:
            return None

        task = asyncio.ensure_future(self.client.fetch_route([start, *anchors, end]))
        done, _ = await asyncio.wait({task}, timeout=self.fast_path_timeout_s)
        if not done:
            # stop waiting; the in-flight request is left to finish on its own
            task.add_done_callback(_discard_result)
            log_event("fast_path_timeout", timeout_s=self.fast_path_timeout_s, anchors=len(anchors))
            return None

        route = task.result()
        if route and is_safe(route, zones, self.subdivisions):
            return route
        return None

    # ------------------------------------------------------------------- fallback

    async def fallback(
        self, start: Point, end: Point, zones: Sequence[DangerZone]
    ) -> Optional[List[Point]]:
        budget = LegBudget(self.max_requests)
        return await self.build_safe_leg(start, end, zones, depth=0, budget=budget)

    async def build_safe_leg(
        self,
        start: Point,
        end: Point,
        zones: Sequence[DangerZone],
        depth: int,
        budget: LegBudget,
    ) -> Optional[List[Point]]:
        """
        Safe route for one leg, splitting it around offending zones.

        Returns None when depth exceeds max_depth, the request budget is
        spent, the service gives no route, or every pivot fails.
        """
        if depth > self.max_depth:
            log_event("fallback_depth_exceeded", depth=depth, max_depth=self.max_depth)
            return None
        if not budget.take():
            log_event("fallback_budget_exhausted", max_requests=self.max_requests)
            return None

        route = await self.client.fetch_route([start, end])
        if not route:
            return None
        if is_safe(route, zones, self.subdivisions):
            return route

        offending = first_offending_zone(route, zones, self.subdivisions)
        if offending is None:
            return None

        for buffer_m in self.fallback_buffers_m:
            for pivot in tangential_pivots(offending, start, end, buffer_m):
                if point_in_any_zone(pivot, zones):
                    continue
                first_half = await self.build_safe_leg(start, pivot, zones, depth + 1, budget)
                if not first_half:
                    continue
                second_half = await self.build_safe_leg(pivot, end, zones, depth + 1, budget)
                if not second_half:
                    continue
                return first_half + second_half[1:]
        return None
