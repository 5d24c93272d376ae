"""
Geometry lookups (raw SQL) against the OSM/Wikidata tables.

Templates come from `GeoShapesConfig.queries`. The table name is substituted
into `{table}`; the id array is $1 and the template params are $2, $3, ...
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from core import db
from core.config import GeoShapesConfig, QueryTemplate

from .errors import InvalidParam, UnknownTable
from .schemas import EntityKind

NUMBER_RE = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def table_for(kind: EntityKind, config: GeoShapesConfig) -> str:
    table = config.polygon_table if kind == EntityKind.SHAPE else config.line_table
    if not table:
        raise UnknownTable(f"No table is configured for {kind.value}")
    return table


def template_for(query_name: str | None, config: GeoShapesConfig) -> QueryTemplate:
    return config.queries.get(query_name or "default") or config.queries["default"]


def template_args(template: QueryTemplate, raw_params: Mapping[str, Any]) -> list[float]:
    """
    Values for the template params, in declared order.

    A param without a name can't be set by the caller. Caller-supplied
    values must be plain decimal numbers.
    """
    args: list[float] = []
    for param in template.params:
        value = raw_params.get(param.name) if param.name else None
        if not value:
            args.append(param.default)
            continue
        if not NUMBER_RE.fullmatch(str(value)):
            raise InvalidParam(f"Invalid value for param {param.name}")
        args.append(float(value))
    return args


def check_params(
    kind: EntityKind,
    query_name: str | None,
    raw_params: Mapping[str, Any],
    *,
    config: GeoShapesConfig,
) -> None:
    """
    Fail on a bad table or param before any outbound call is made.
    """
    if kind == EntityKind.POINT:
        return None
    table_for(kind, config)
    template_args(template_for(query_name, config), raw_params)


async def fetch_geometries(
    kind: EntityKind,
    ids: list[str],
    query_name: str | None,
    raw_params: Mapping[str, Any],
    *,
    config: GeoShapesConfig,
) -> list[dict[str, Any]]:
    """
    Rows of `{"id": "Q...", "data": "<GeoJSON geometry>"}` for the given ids.
    Points never come from the database.
    """
    if not ids or kind == EntityKind.POINT:
        return []

    table = table_for(kind, config)
    template = template_for(query_name, config)
    args = template_args(template, raw_params)

    sql = template.sql.replace("{table}", db.quote_ident(table))
    return await db.fetch_all(sql, list(ids), *args)
