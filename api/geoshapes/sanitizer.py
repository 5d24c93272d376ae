"""
Property sanitization through the MediaWiki `sanitize-mapdata` API.

Query-service values are free-form, so they are sent to the wiki as a fake
GeoJSON document and only the sanitized properties are used in the output.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from core.config import GeoShapesConfig

from . import values
from .errors import SanitizationError
from .schemas import RawPropertyRow

SANITIZE_ACTION = "sanitize-mapdata"

# SPARQL cannot produce column names with '-', so simplestyle
# properties arrive with '_' instead.
SIMPLESTYLE_PROPERTIES = {
    "fill_opacity": "fill-opacity",
    "marker_color": "marker-color",
    "marker_size": "marker-size",
    "marker_symbol": "marker-symbol",
    "stroke_opacity": "stroke-opacity",
    "stroke_width": "stroke-width",
}


def build_features(rows: list[RawPropertyRow]) -> list[dict[str, Any]]:
    """
    One placeholder Feature per row. Only the properties matter; the geometry
    is a fixed point so the document is valid GeoJSON.
    """
    features: list[dict[str, Any]] = []
    for row in rows:
        properties: dict[str, Any] = {}
        for key, raw in row.columns.items():
            if not raw:
                continue
            value = values.parse_value(raw)
            if value is None or value == "":
                continue
            properties[SIMPLESTYLE_PROPERTIES.get(key, key)] = value
        features.append(
            {
                "type": "Feature",
                "id": row.id,
                "properties": properties,
                "geometry": {"type": "Point", "coordinates": [0, 0]},
            }
        )
    return features


def _error_text(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("info") or error.get("code") or json.dumps(error))
    return str(error)


def _parse_sanitized(body: Any) -> list[dict[str, Any]]:
    if not isinstance(body, dict):
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} results")
    if body.get("error"):
        raise SanitizationError(_error_text(body["error"]))

    envelope = body.get(SANITIZE_ACTION)
    if not isinstance(envelope, dict):
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} results")
    if envelope.get("error"):
        raise SanitizationError(_error_text(envelope["error"]))
    if not envelope.get("sanitized"):
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} results")

    try:
        sanitized = json.loads(envelope["sanitized"])
    except (TypeError, ValueError) as e:
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} sanitized value results") from e
    if not isinstance(sanitized, list):
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} sanitized value results")
    return sanitized


async def sanitize_properties(
    *,
    client: httpx.AsyncClient,
    config: GeoShapesConfig,
    rows: list[RawPropertyRow],
) -> list[dict[str, Any]] | None:
    """
    Return `[{**sanitized_properties, "id": entity_id}, ...]`, or None when
    there is nothing to sanitize.
    """
    features = build_features(rows)
    if not features:
        return None

    resp = await client.post(
        config.mwapi_url,
        data={
            "format": "json",
            "formatversion": "2",
            "action": SANITIZE_ACTION,
            "text": json.dumps(features),
        },
        headers=dict(config.mwapi_headers),
    )
    if not resp.is_success:
        body = resp.text[:500]
        raise SanitizationError(f"{SANITIZE_ACTION} request failed: {resp.status_code} {body}")

    try:
        body = resp.json()
    except ValueError as e:
        raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} results") from e

    clean: list[dict[str, Any]] = []
    for item in _parse_sanitized(body):
        if not isinstance(item, dict):
            raise SanitizationError(f"Unexpected api action={SANITIZE_ACTION} sanitized value results")
        clean.append({**(item.get("properties") or {}), "id": item.get("id")})
    return clean
