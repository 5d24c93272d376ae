"""
Result assembly: join geometry rows with sanitized properties, then wrap the
features as GeoJSON or TopoJSON.
"""

from __future__ import annotations

import json
from typing import Any

import topojson

from .schemas import EntityKind
from .wikidata import GEO_COLUMN

TOPOLOGY_OBJECT = "data"
QUANTIZATION = 10000


def _point_feature(
    properties: dict[str, Any],
    id_column: str | None,
    coordinates: dict[str, list[float]],
) -> dict[str, Any]:
    props = dict(properties)
    entity_id = props.pop("id", None)
    if id_column:
        props.pop(id_column, None)
    point = props.pop(GEO_COLUMN, None)
    if not isinstance(point, list):
        point = coordinates.get(entity_id)
    return {
        "type": "Feature",
        "id": entity_id,
        "properties": props,
        "geometry": {"type": "Point", "coordinates": point},
    }


def _shape_feature(row: dict[str, Any], properties_by_id: dict[str, dict[str, Any]]) -> dict[str, Any]:
    props = dict(properties_by_id.get(row["id"]) or {})
    props.pop("id", None)
    return {
        "type": "Feature",
        "id": row["id"],
        "properties": props,
        "geometry": json.loads(row["data"]),
    }


def assemble_features(
    kind: EntityKind,
    geo_rows: list[dict[str, Any]],
    properties: list[dict[str, Any]] | None,
    *,
    id_column: str | None = None,
    coordinates: dict[str, list[float]] | None = None,
) -> list[dict[str, Any]]:
    """
    Points take their geometry from the `geo` property of each sanitized row,
    or from the coordinate the query service returned for that id.
    Lines and shapes produce one feature per geometry row, with the first
    sanitized row of the same id as properties (or none at all).
    """
    if kind == EntityKind.POINT:
        return [_point_feature(row, id_column, coordinates or {}) for row in properties or []]

    properties_by_id: dict[str, dict[str, Any]] = {}
    for row in properties or []:
        properties_by_id.setdefault(row.get("id"), row)
    return [_shape_feature(row, properties_by_id) for row in geo_rows or []]


def _has_geometry(feature: dict[str, Any]) -> bool:
    geometry = feature.get("geometry")
    return bool(geometry) and geometry.get("coordinates") is not None


def to_topology(features: list[dict[str, Any]]) -> dict[str, Any]:
    """
    TopoJSON with one GeometryCollection, `data`. Each geometry object keeps
    its feature's id and the full properties object.
    """
    encoded: list[dict[str, Any]] = []
    result: dict[str, Any] = {"type": "Topology", "arcs": []}

    drawable = [feature["geometry"] for feature in features if _has_geometry(feature)]
    if drawable:
        topo = topojson.Topology(drawable, prequantize=QUANTIZATION, object_name=TOPOLOGY_OBJECT)
        result = json.loads(topo.to_json())
        encoded = list(result["objects"][TOPOLOGY_OBJECT]["geometries"])

    geometries: list[dict[str, Any]] = []
    for feature in features:
        obj = encoded.pop(0) if _has_geometry(feature) else {"type": None}
        obj.pop("properties", None)
        obj.pop("id", None)
        if feature.get("id") is not None:
            obj["id"] = feature["id"]
        obj["properties"] = feature.get("properties")
        geometries.append(obj)

    result["objects"] = {TOPOLOGY_OBJECT: {"type": "GeometryCollection", "geometries": geometries}}
    return result


def wrap_result(features: list[dict[str, Any]], *, use_geojson: bool) -> dict[str, Any]:
    result = {"type": "FeatureCollection", "features": features}
    if use_geojson:
        return result
    return to_topology(features)
