# astar_planner.py

from typing import Dict, List, Optional, Sequence, Tuple
import heapq
import itertools

import networkx as nx

from geometry import equirect_m, segment_intersects_circle
from models import DangerZone, Point
from path_safety import point_in_any_zone


def node_point(G: nx.Graph, n) -> Point:
    data = G.nodes[n]
    return Point(data["lat"], data["lon"])


def distance_heuristic(G: nx.Graph, u, v) -> float:
    """Straight-line distance in meters; never overestimates a road path."""
    nu, nv = G.nodes[u], G.nodes[v]
    return equirect_m(nu["lat"], nu["lon"], nv["lat"], nv["lon"])


def nearest_node(G: nx.Graph, point: Point):
    """
    Closest graph node to `point` by linear scan.

    Ties go to the first node in insertion order. Returns None on an
    empty graph.
    """
    best = None
    best_d = float("inf")
    for n, data in G.nodes(data=True):
        d = equirect_m(point.lat, point.lon, data["lat"], data["lon"])
        if d < best_d:
            best, best_d = n, d
    return best


def _blocked(G: nx.Graph, u, v, zones: Sequence[DangerZone]) -> bool:
    pv = node_point(G, v)
    if point_in_any_zone(pv, zones):
        return True
    pu = node_point(G, u)
    return any(segment_intersects_circle(pu, pv, z) for z in zones)


def astar_safe_path(
    G: nx.Graph, start, goal, zones: Sequence[DangerZone] = ()
) -> Tuple[List, float]:
    """
    A* on the road graph using edge 'length' (meters) as cost.

    Neighbors inside a danger zone, or reached over an edge that cuts
    through one, are never relaxed. Equal f-scores pop in push order
    (FIFO), which keeps results deterministic.

    Returns (node_path, total_length_m); ([], inf) when the goal is
    unreachable.
    """
    if point_in_any_zone(node_point(G, start), zones) or point_in_any_zone(
        node_point(G, goal), zones
    ):
        return [], float("inf")

    counter = itertools.count()
    open_heap: List[Tuple[float, int, str]] = []
    heapq.heappush(open_heap, (distance_heuristic(G, start, goal), next(counter), start))
    came_from: Dict = {}
    g: Dict = {start: 0.0}
    closed = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path, g[goal]
        closed.add(current)

        for nbr in G.neighbors(current):
            if nbr in closed or _blocked(G, current, nbr, zones):
                continue
            tentative = g[current] + G[current][nbr]["length"]
            if tentative < g.get(nbr, float("inf")):
                g[nbr] = tentative
                came_from[nbr] = current
                f = tentative + distance_heuristic(G, nbr, goal)
                heapq.heappush(open_heap, (f, next(counter), nbr))

    return [], float("inf")


def find_path(
    G: Optional[nx.Graph], start: Point, end: Point, zones: Sequence[DangerZone] = ()
) -> Optional[List[Point]]:
    """
    Snap start/end to their nearest nodes and search between them.

    Returns the node coordinates in travel order, or None when there is
    no graph, the graph is empty, or no zone-free path exists.
    """
    if G is None:
        return None
    start_node = nearest_node(G, start)
    goal_node = nearest_node(G, end)
    if start_node is None or goal_node is None:
        return None

    path_nodes, _ = astar_safe_path(G, start_node, goal_node, zones)
    if not path_nodes:
        return None
    return [node_point(G, n) for n in path_nodes]
