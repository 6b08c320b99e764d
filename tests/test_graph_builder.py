import json

import pytest

from errors import AssetUnavailable
from graph_builder import build_road_graph, load_road_graph, node_key, polylines_from_geojson


def grid_polylines(size: int):
    coords = [i * 0.001 for i in range(size)]
    return [[(lat, lon) for lon in coords] for lat in coords] + [[(lat, lon) for lat in coords] for lon in coords]


def test_edges_are_symmetric_with_equal_weights() -> None:
    G = build_road_graph(grid_polylines(4))
    assert G.number_of_edges() > 0
    for u, v, data in G.edges(data=True):
        assert G.has_edge(v, u)
        assert G[v][u]["length"] == data["length"]


def test_shared_endpoints_merge_into_one_node() -> None:
    G = build_road_graph(
        [
            [(0.0, 0.0), (0.0, 0.001)],
            [(0.0000001, 0.001), (0.001, 0.001)],  # same corner, ~1 cm off
        ]
    )
    assert G.number_of_nodes() == 3
    assert G.number_of_edges() == 2
    corner = node_key(0.0, 0.001)
    assert G.degree(corner) == 2
    # the first vertex seen keeps its exact coordinates
    assert G.nodes[corner]["lat"] == 0.0


def test_edge_weight_is_flat_distance_in_meters() -> None:
    G = build_road_graph([[(0.0, 0.0), (0.0, 0.001)]])
    (_, _, data), = G.edges(data=True)
    assert data["length"] == pytest.approx(111.0)


def test_duplicate_segments_keep_shortest_weight_and_skip_short_polylines() -> None:
    G = build_road_graph(
        [
            [(0.0, 0.0), (0.0, 0.001)],
            [(0.0, 0.001), (0.0, 0.0)],
            [(0.5, 0.5)],
        ]
    )
    assert G.number_of_nodes() == 2
    assert G.number_of_edges() == 1


def test_polylines_from_geojson_reads_line_features_only() -> None:
    geojson = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[13.40, 52.52], [13.41, 52.53]]}},
            {
                "type": "Feature",
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [[[13.0, 52.0], [13.1, 52.1]], [[13.2, 52.2], [13.3, 52.3]]],
                },
            },
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [13.0, 52.0]}},
            {"type": "Feature", "geometry": None},
        ],
    }
    polylines = polylines_from_geojson(geojson)
    assert polylines == [
        [(52.52, 13.40), (52.53, 13.41)],
        [(52.0, 13.0), (52.1, 13.1)],
        [(52.2, 13.2), (52.3, 13.3)],
    ]


def test_polylines_from_geojson_rejects_non_collections() -> None:
    with pytest.raises(AssetUnavailable):
        polylines_from_geojson({"type": "Feature"})
    with pytest.raises(AssetUnavailable):
        polylines_from_geojson(
            {"features": [{"geometry": {"type": "LineString", "coordinates": [["x", "y"], [1, 2]]}}]}
        )


def test_load_road_graph_from_file(tmp_path) -> None:
    path = tmp_path / "osm_roads.json"
    path.write_text(
        json.dumps(
            {
                "type": "FeatureCollection",
                "features": [
                    {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[0.0, 0.0], [0.001, 0.0], [0.002, 0.0]]}},
                ],
            }
        ),
        encoding="utf-8",
    )
    G = load_road_graph(str(path))
    assert G.number_of_nodes() == 3
    assert G.number_of_edges() == 2


@pytest.mark.parametrize(
    "content",
    [
        None,
        "{not json",
        json.dumps({"type": "FeatureCollection", "features": []}),
        json.dumps({"type": "FeatureCollection", "features": ["oops"]}),
        json.dumps({"type": "FeatureCollection", "features": [{"geometry": [0.0, 0.0]}]}),
        json.dumps({"type": "FeatureCollection", "features": [{"geometry": "LineString"}]}),
        json.dumps({"type": "FeatureCollection", "features": [{"geometry": {"type": "MultiLineString", "coordinates": [5]}}]}),
    ],
)
def test_load_road_graph_signals_asset_unavailable(tmp_path, content) -> None:
    path = tmp_path / "osm_roads.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    with pytest.raises(AssetUnavailable):
        load_road_graph(str(path))
