# graph_builder.py

from typing import Any, Dict, Iterable, List, Sequence, Tuple
import json
from pathlib import Path

import networkx as nx

from errors import AssetUnavailable
from geometry import equirect_m
from logging_utils import log_event


def node_key(lat: float, lon: float, precision: int = 6) -> str:
    """
    Stable node id: coordinates rounded to `precision` decimals.

    At 6 decimals (~0.1 m) the ends of two street polylines meeting at the
    same intersection collapse into one node.
    """
    return f"{lat:.{precision}f},{lon:.{precision}f}"


def build_road_graph(
    polylines: Iterable[Sequence[Tuple[float, float]]],
    precision: int = 6,
) -> nx.Graph:
    """
    Build an undirected road graph from street centerlines.

    Args:
        polylines: ordered (lat, lon) sequences, one per street segment.
        precision: decimal digits used to merge coincident vertices.

    Returns:
        G: nx.Graph with nodes: key -> {lat, lon}
           and edges carrying `length` in meters.
    """
    G = nx.Graph()

    for poly in polylines:
        if len(poly) < 2:
            continue

        prev_key = None
        prev_lat = prev_lon = 0.0
        for (lat, lon) in poly:
            key = node_key(lat, lon, precision)
            if key not in G:
                # first vertex seen keeps its exact coordinates
                G.add_node(key, lat=float(lat), lon=float(lon))

            if prev_key is not None and prev_key != key:
                d = equirect_m(prev_lat, prev_lon, lat, lon)
                # parallel segments between the same pair: keep the shorter one
                if not G.has_edge(prev_key, key) or G[prev_key][key]["length"] > d:
                    G.add_edge(prev_key, key, length=d)

            prev_key, prev_lat, prev_lon = key, lat, lon

    return G


def polylines_from_geojson(geojson: Dict[str, Any]) -> List[List[Tuple[float, float]]]:
    """
    Extract (lat, lon) polylines from a GeoJSON FeatureCollection.

    LineString and MultiLineString features are used; everything else
    (points, polygons, ...) is skipped. GeoJSON stores [lon, lat].
    """
    if not isinstance(geojson, dict) or not isinstance(geojson.get("features"), list):
        raise AssetUnavailable("Road network asset is not a GeoJSON FeatureCollection")

    polylines: List[List[Tuple[float, float]]] = []
    for feature in geojson["features"]:
        if not isinstance(feature, dict):
            raise AssetUnavailable(f"Road network feature is not an object: {feature!r}")
        geometry = feature.get("geometry") or {}
        if not isinstance(geometry, dict):
            raise AssetUnavailable(f"Road network geometry is not an object: {geometry!r}")
        gtype = geometry.get("type")
        coords = geometry.get("coordinates") or []
        if gtype == "LineString":
            lines = [coords]
        elif gtype == "MultiLineString":
            lines = coords
        else:
            continue
        try:
            for line in lines:
                polylines.append([(float(c[1]), float(c[0])) for c in line])
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            raise AssetUnavailable(f"Malformed coordinates in road network asset: {e}") from e
    return polylines


def load_road_graph(path: str, precision: int = 6) -> nx.Graph:
    """
    Load the offline road graph from a GeoJSON file.

    Raises AssetUnavailable when the file is missing, unreadable,
    malformed, or contains no usable street segments.
    """
    asset = Path(path)
    try:
        with asset.open("r", encoding="utf-8") as fh:
            geojson = json.load(fh)
    except (OSError, ValueError) as e:
        raise AssetUnavailable(f"Road network asset {asset} not found or invalid: {e}") from e

    G = build_road_graph(polylines_from_geojson(geojson), precision=precision)
    if G.number_of_nodes() == 0:
        raise AssetUnavailable(f"Road network asset {asset} contains no street segments")

    log_event(
        "road_graph_loaded",
        path=str(asset),
        nodes=G.number_of_nodes(),
        edges=G.number_of_edges(),
    )
    return G
