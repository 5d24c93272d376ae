"""
Geoshapes orchestration.

Flow:
1) Validate request params (ids, query, sql params)
2) Run the SPARQL query (explicit, or the default one for points)
3) In parallel: fetch geometries from Postgres and sanitize the query properties
4) Join both by entity id and return GeoJSON or TopoJSON
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Mapping

import httpx

from core.config import GeoShapesConfig

from . import assembler, repository, sanitizer, wikidata
from .errors import FeatureDisabled, InvalidId, InvalidInput, TooManyIds
from .schemas import EntityKind, GeoShapesRequest

ID_RE = re.compile(r"^Q[1-9][0-9]{0,15}$")

logger = logging.getLogger(__name__)


def parse_ids(raw: str | None) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for token in (raw or "").split(","):
        if token:
            seen.setdefault(token, None)
    return tuple(seen)


def parse_request(kind: EntityKind, params: Mapping[str, Any], config: GeoShapesConfig) -> GeoShapesRequest:
    """
    Validate raw request params. No I/O.
    """
    raw_ids = params.get("ids")
    query = params.get("query")
    if not raw_ids and not query:
        raise InvalidInput('"ids" or "query" parameter must be given')
    if query and not config.graph_query_enabled:
        raise FeatureDisabled('"query" parameter is not enabled')

    ids = parse_ids(raw_ids)
    if len(ids) > config.max_id_count:
        raise TooManyIds(f"Not more than {config.max_id_count} ids allowed")
    for entity_id in ids:
        if not ID_RE.match(entity_id):
            raise InvalidId(f'Invalid Wikidata id "{entity_id}"')

    return GeoShapesRequest(
        kind=kind,
        ids=ids,
        sparql_query=query or None,
        id_column=params.get("idcolumn") or None,
        use_geojson=bool(params.get("getgeojson")),
        query_name=params.get("sql") or None,
    )


async def _gather_or_cancel(*coros: Any) -> list[Any]:
    """
    Like asyncio.gather, but the first failure cancels the other tasks.
    """
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def execute(
    kind: EntityKind,
    params: Mapping[str, Any],
    *,
    config: GeoShapesConfig,
    client: httpx.AsyncClient,
    client_ip: str | None = None,
) -> dict[str, Any]:
    start = time.monotonic()
    request = parse_request(kind, params, config)
    repository.check_params(kind, request.query_name, params, config=config)

    raw_properties = await wikidata.run_query(
        client=client,
        config=config,
        kind=kind,
        query=request.sparql_query,
        ids=request.ids,
        id_column=request.id_column,
        client_ip=client_ip,
    )

    all_ids = list(dict.fromkeys([*request.ids, *(row.id for row in raw_properties)]))
    geo_rows, clean_properties = await _gather_or_cancel(
        repository.fetch_geometries(kind, all_ids, request.query_name, params, config=config),
        sanitizer.sanitize_properties(client=client, config=config, rows=raw_properties),
    )

    coordinates: dict[str, list[float]] = {}
    for row in raw_properties:
        if row.coordinate is not None:
            coordinates.setdefault(row.id, row.coordinate)

    features = assembler.assemble_features(
        kind,
        geo_rows,
        clean_properties,
        id_column=request.id_column,
        coordinates=coordinates,
    )
    result = assembler.wrap_result(features, use_geojson=request.use_geojson)

    metric = kind.value + (".wdqs" if request.sparql_query else ".ids")
    logger.info(
        "geoshapes_done metric=%s ids=%s features=%s elapsed_ms=%.1f",
        metric,
        len(all_ids),
        len(features),
        (time.monotonic() - start) * 1000,
    )
    return result
