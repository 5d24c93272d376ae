"""
SPARQL JSON result value parsing.

A binding looks like `{"type": "uri", "value": "http://www.wikidata.org/entity/Q42"}`
or `{"type": "literal", "value": "12", "datatype": "http://www.w3.org/2001/XMLSchema#integer"}`.
`parse_value()` turns it into a plain Python value.
"""

from __future__ import annotations

import re
from typing import Any

ENTITY_PREFIX = "http://www.wikidata.org/entity/"

XSD = "http://www.w3.org/2001/XMLSchema#"
GEO_WKT_LITERAL = "http://www.opengis.net/ont/geosparql#wktLiteral"

_INTEGER_TYPES = {
    XSD + name
    for name in (
        "integer",
        "int",
        "long",
        "short",
        "byte",
        "nonNegativeInteger",
        "nonPositiveInteger",
        "positiveInteger",
        "negativeInteger",
        "unsignedInt",
        "unsignedLong",
        "unsignedShort",
        "unsignedByte",
    )
}
_FLOAT_TYPES = {XSD + "decimal", XSD + "double", XSD + "float"}

ENTITY_ID_RE = re.compile(r"^[QPL][1-9][0-9]*$")

# Optional "<globe uri> " prefix, e.g. coordinates on the Moon.
_WKT_POINT_RE = re.compile(
    r"^\s*(?:<[^>]*>\s*)?Point\s*\(\s*(?P<lon>[-+0-9.eE]+)\s+(?P<lat>[-+0-9.eE]+)\s*\)\s*$",
    re.IGNORECASE,
)


def parse_entity_id(value: dict[str, Any] | None) -> str | None:
    """
    Entity id of a URI binding (`.../entity/Q42` -> `Q42`), or None.
    """
    if not value or value.get("type") != "uri":
        return None
    uri = str(value.get("value") or "")
    if not uri.startswith(ENTITY_PREFIX):
        return None
    entity_id = uri[len(ENTITY_PREFIX):]
    return entity_id if ENTITY_ID_RE.match(entity_id) else None


def parse_wkt_point(text: str) -> list[float] | None:
    match = _WKT_POINT_RE.match(text or "")
    if match is None:
        return None
    try:
        return [float(match.group("lon")), float(match.group("lat"))]
    except ValueError:
        return None


def parse_value(value: dict[str, Any] | None) -> Any:
    """
    Convert one binding to a plain value.

    Entity URIs become ids, other URIs stay strings, numeric and boolean
    literals are converted, WKT points become `[lon, lat]`. Anything else is
    returned as its string value.
    """
    if not value:
        return None

    kind = value.get("type")
    raw = value.get("value")
    if raw is None:
        return None
    raw = str(raw)

    if kind == "uri":
        return parse_entity_id(value) or raw

    datatype = value.get("datatype")
    if datatype in _INTEGER_TYPES:
        try:
            return int(raw)
        except ValueError:
            return raw
    if datatype in _FLOAT_TYPES:
        try:
            return float(raw)
        except ValueError:
            return raw
    if datatype == XSD + "boolean":
        return raw.strip().lower() in {"true", "1"}
    if datatype == GEO_WKT_LITERAL:
        return parse_wkt_point(raw) or raw
    return raw
