import json

from geoshapes import assembler
from geoshapes.schemas import EntityKind

POLYGON = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}


def test_point_feature_from_clean_properties():
    features = assembler.assemble_features(EntityKind.POINT, [], [{"id": "Q1", "geo": [1, 2], "name": "x"}])
    assert features == [
        {
            "type": "Feature",
            "id": "Q1",
            "properties": {"name": "x"},
            "geometry": {"type": "Point", "coordinates": [1, 2]},
        }
    ]


def test_point_falls_back_to_query_coordinate():
    properties = [{"id": "Q1", "name": "x"}, {"id": "Q2", "geo": [3, 4]}]
    coordinates = {"Q1": [1.0, 2.0], "Q2": [9.0, 9.0]}
    features = assembler.assemble_features(EntityKind.POINT, [], properties, coordinates=coordinates)
    assert [f["geometry"]["coordinates"] for f in features] == [[1.0, 2.0], [3, 4]]
    assert features[0]["properties"] == {"name": "x"}


def test_point_without_any_coordinate():
    features = assembler.assemble_features(EntityKind.POINT, [], [{"id": "Q1"}])
    assert features[0]["geometry"] == {"type": "Point", "coordinates": None}


def test_points_without_properties():
    assert assembler.assemble_features(EntityKind.POINT, [], None) == []
    assert assembler.assemble_features(EntityKind.POINT, [], []) == []


def test_point_drops_custom_id_column():
    features = assembler.assemble_features(
        EntityKind.POINT, [], [{"id": "Q1", "geo": [1, 2], "item": "Q1"}], id_column="item"
    )
    assert features[0]["properties"] == {}


def test_shape_without_properties_keeps_geometry():
    rows = [{"id": "Q2", "data": json.dumps(POLYGON)}]
    features = assembler.assemble_features(EntityKind.SHAPE, rows, None)
    assert features == [{"type": "Feature", "id": "Q2", "properties": {}, "geometry": POLYGON}]


def test_shape_joins_first_matching_properties():
    rows = [
        {"id": "Q2", "data": json.dumps(POLYGON)},
        {"id": "Q3", "data": json.dumps(POLYGON)},
    ]
    properties = [
        {"id": "Q3", "name": "three"},
        {"id": "Q2", "name": "first"},
        {"id": "Q2", "name": "second"},
    ]
    features = assembler.assemble_features(EntityKind.LINE, rows, properties)
    assert [f["id"] for f in features] == ["Q2", "Q3"]
    assert features[0]["properties"] == {"name": "first"}
    assert features[1]["properties"] == {"name": "three"}
    # inputs are not modified
    assert properties[1] == {"id": "Q2", "name": "first"}


def test_properties_without_geometry_are_ignored_for_shapes():
    assert assembler.assemble_features(EntityKind.SHAPE, [], [{"id": "Q2", "name": "x"}]) == []


def test_wrap_result_geojson():
    features = [{"type": "Feature", "id": "Q2", "properties": {}, "geometry": POLYGON}]
    assert assembler.wrap_result(features, use_geojson=True) == {"type": "FeatureCollection", "features": features}


def test_wrap_result_topojson_keeps_properties():
    features = [
        {"type": "Feature", "id": "Q2", "properties": {"name": "x", "stroke-width": 2}, "geometry": POLYGON},
        {"type": "Feature", "id": "Q1", "properties": {"nested": {"a": [1]}}, "geometry": {"type": "Point", "coordinates": [5, 5]}},
    ]
    result = assembler.wrap_result(features, use_geojson=False)
    assert result["type"] == "Topology"
    objects = result["objects"][assembler.TOPOLOGY_OBJECT]["geometries"]
    assert [o["properties"] for o in objects] == [f["properties"] for f in features]
    assert [o["id"] for o in objects] == ["Q2", "Q1"]
