"""
Service configuration.

Everything is read from environment variables once at startup
(`load_config()` in `api/main.py`) and passed explicitly to the
geoshapes components. Nothing here is mutated after it is built.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any


DEFAULT_MAX_ID_COUNT = 500
DEFAULT_COORDINATE_PREDICATE = "wdt:P625"
DEFAULT_MWAPI_URL = "https://en.wikipedia.org/w/api.php"
DEFAULT_USER_AGENT = "geoshapes-service"

# Templates use `{table}` for the (quoted) table name, $1 for the id array
# and $2.. for the declared params, in order.
DEFAULT_QUERIES: dict[str, dict[str, Any]] = {
    "default": {
        "sql": (
            "SELECT id, ST_AsGeoJSON(ST_Transform(ST_Collect(geometry), 4326)) AS data "
            "FROM {table} WHERE id = ANY($1) GROUP BY id"
        ),
    },
    "simplify": {
        "sql": (
            "SELECT id, ST_AsGeoJSON(ST_Transform(ST_Simplify(ST_Collect(geometry), $2::float8), 4326)) AS data "
            "FROM {table} WHERE id = ANY($1) GROUP BY id"
        ),
        "params": [{"name": "arg1", "default": 10000}],
    },
    "simplifyarea": {
        "sql": (
            "SELECT id, ST_AsGeoJSON(ST_Transform(ST_ForceRHR(ST_Simplify(ST_Collect(geometry), "
            "$2::float8 * sqrt(ST_Area(ST_Collect(geometry))) / $3::float8)), 4326)) AS data "
            "FROM {table} WHERE id = ANY($1) GROUP BY id"
        ),
        "params": [
            {"name": "arg1", "default": 0.001},
            {"name": "arg2", "default": 1},
        ],
    },
}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class QueryParam:
    name: str | None
    default: float


@dataclass(frozen=True)
class QueryTemplate:
    sql: str
    params: tuple[QueryParam, ...] = ()


@dataclass(frozen=True)
class GeoShapesConfig:
    max_id_count: int = DEFAULT_MAX_ID_COUNT
    wdqs_url: str = ""
    sparql_headers: dict[str, str] = field(default_factory=dict)
    coordinate_predicate: str = DEFAULT_COORDINATE_PREDICATE
    mwapi_url: str = DEFAULT_MWAPI_URL
    mwapi_headers: dict[str, str] = field(default_factory=dict)
    line_table: str = "wikidata_relation_members"
    polygon_table: str = "wikidata_relation_polygon"
    queries: dict[str, QueryTemplate] = field(default_factory=dict)
    http_timeout_s: float = 30.0

    @property
    def graph_query_enabled(self) -> bool:
        return bool(self.wdqs_url)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def parse_queries(raw: dict[str, Any]) -> dict[str, QueryTemplate]:
    """
    Turn `{"name": {"sql": ..., "params": [{"name": ..., "default": ...}]}}`
    into QueryTemplate objects. A `default` entry is required.
    """
    if "default" not in raw:
        raise ConfigError('Query templates must include a "default" entry.')

    queries: dict[str, QueryTemplate] = {}
    for key, entry in raw.items():
        sql = str((entry or {}).get("sql") or "").strip()
        if not sql:
            raise ConfigError(f"Query template {key!r} has no sql.")
        params = tuple(
            QueryParam(name=p.get("name") or None, default=float(p["default"]))
            for p in (entry.get("params") or [])
        )
        queries[key] = QueryTemplate(sql=sql, params=params)
    return queries


def _load_queries() -> dict[str, QueryTemplate]:
    path = os.environ.get("GEOSHAPES_QUERIES_FILE", "").strip()
    if not path:
        return parse_queries(DEFAULT_QUERIES)
    with open(path, encoding="utf-8") as fh:
        return parse_queries(json.load(fh))


def load_config() -> GeoShapesConfig:
    return GeoShapesConfig(
        max_id_count=_env_int("GEOSHAPES_MAX_ID_COUNT", DEFAULT_MAX_ID_COUNT),
        wdqs_url=os.environ.get("WDQS_URL", "").strip(),
        sparql_headers={"User-Agent": _env_str("WDQS_USER_AGENT", DEFAULT_USER_AGENT)},
        coordinate_predicate=_env_str("GEOSHAPES_COORDINATE_PREDICATE", DEFAULT_COORDINATE_PREDICATE),
        mwapi_url=_env_str("MWAPI_URL", DEFAULT_MWAPI_URL),
        mwapi_headers={"User-Agent": _env_str("MWAPI_USER_AGENT", DEFAULT_USER_AGENT)},
        line_table=os.environ.get("GEOSHAPES_LINE_TABLE", "wikidata_relation_members").strip(),
        polygon_table=os.environ.get("GEOSHAPES_POLYGON_TABLE", "wikidata_relation_polygon").strip(),
        queries=_load_queries(),
        http_timeout_s=_env_float("GEOSHAPES_HTTP_TIMEOUT_S", 30.0),
    )
