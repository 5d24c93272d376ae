"""
Query service (SPARQL) client for geoshapes.

Request:  GET <WDQS_URL>?format=json&query=...
Response: {"results": {"bindings": [{"<column>": {"type": ..., "value": ...}}, ...]}}
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.config import GeoShapesConfig

from . import values
from .errors import FeatureDisabled, InvalidGraphId, MalformedGraphResponse, MissingIdColumn, UnexpectedContentType
from .schemas import EntityKind, RawPropertyRow

SPARQL_RESULTS_TYPE = "application/sparql-results+json"
DEFAULT_ID_COLUMN = "id"
GEO_COLUMN = "geo"

logger = logging.getLogger(__name__)


def points_query(ids: list[str] | tuple[str, ...], coordinate_predicate: str) -> str:
    formatted_ids = " ".join("wd:" + entity_id for entity_id in ids)
    return (
        "SELECT ?id ?geo WHERE { VALUES ?id { " + formatted_ids + " } "
        "?id " + coordinate_predicate + " ?geo }"
    )


def _require_column(binding: dict[str, Any], column: str, *, custom: bool) -> dict[str, Any]:
    value = binding.get(column)
    if value is None:
        message = f"SPARQL query result does not contain {column!r} column."
        if not custom:
            message += (
                " Use `idcolumn` argument to specify column name,"
                " or change the query to return `id` column."
            )
        raise MissingIdColumn(message)
    return value


def process_row(binding: dict[str, Any], custom_id_column: str | None = None) -> RawPropertyRow:
    """
    Validate one result row: resolve the entity id and parse the coordinate.

    The remaining columns are kept raw; they are only parsed once we know the
    object is worth sanitizing.
    """
    id_column = custom_id_column or DEFAULT_ID_COLUMN
    id_value = _require_column(binding, id_column, custom=bool(custom_id_column))
    entity_id = values.parse_entity_id(id_value)
    if not entity_id:
        raise InvalidGraphId(
            f"SPARQL query result id column {id_column!r} is expected to be a valid Wikidata id"
        )

    columns = {key: value for key, value in binding.items() if key != id_column}
    coordinate = None
    if columns.get(GEO_COLUMN):
        coordinate = values.parse_wkt_point(str(columns[GEO_COLUMN].get("value") or ""))
    return RawPropertyRow(id=entity_id, columns=columns, coordinate=coordinate)


async def run_query(
    *,
    client: httpx.AsyncClient,
    config: GeoShapesConfig,
    kind: EntityKind,
    query: str | None,
    ids: list[str] | tuple[str, ...],
    id_column: str | None = None,
    client_ip: str | None = None,
) -> list[RawPropertyRow]:
    """
    Run the request's SPARQL query (or the default point query) and return
    one RawPropertyRow per result row, in result order.
    """
    # Without a query only the requested ids are used.
    if not query and ids and kind == EntityKind.POINT:
        query = points_query(ids, config.coordinate_predicate)
    if not query:
        return []
    if not config.graph_query_enabled:
        raise FeatureDisabled("Query service is not configured")

    headers = dict(config.sparql_headers)
    if client_ip:
        headers["X-Client-IP"] = client_ip

    resp = await client.get(
        config.wdqs_url,
        params={"format": "json", "query": query},
        headers=headers,
    )

    content_type = resp.headers.get("content-type", "")
    if not resp.is_success:
        raise MalformedGraphResponse(f"SPARQL query failed with status {resp.status_code}")
    if not content_type.startswith(SPARQL_RESULTS_TYPE):
        raise UnexpectedContentType(f"Unexpected content type {content_type}")

    try:
        data: Any = resp.json()
    except ValueError as e:
        raise MalformedGraphResponse("SPARQL query result is not valid JSON") from e
    results = data.get("results") if isinstance(data, dict) else None
    bindings = results.get("bindings") if isinstance(results, dict) else None
    if not isinstance(bindings, list):
        raise MalformedGraphResponse('SPARQL query result does not have "results.bindings"')

    rows = [process_row(binding, id_column) for binding in bindings]
    logger.debug("wdqs_rows kind=%s rows=%s", kind.value, len(rows))
    return rows
