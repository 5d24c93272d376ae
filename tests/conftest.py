import json
from typing import Any, Callable

import httpx
import pytest

from core.config import DEFAULT_QUERIES, GeoShapesConfig, parse_queries

WDQS_URL = "https://query.example.org/sparql"
MWAPI_URL = "https://wiki.example.org/w/api.php"
SPARQL_JSON = "application/sparql-results+json; charset=utf-8"


def entity(entity_id: str) -> dict:
    return {"type": "uri", "value": f"http://www.wikidata.org/entity/{entity_id}"}


def literal(value: str, datatype: str | None = None) -> dict:
    binding = {"type": "literal", "value": value}
    if datatype:
        binding["datatype"] = datatype
    return binding


def wkt_point(lon: float, lat: float) -> dict:
    return literal(f"Point({lon} {lat})", "http://www.opengis.net/ont/geosparql#wktLiteral")


def sparql_response(bindings: list[dict], content_type: str = SPARQL_JSON) -> httpx.Response:
    body = {"head": {"vars": []}, "results": {"bindings": bindings}}
    return httpx.Response(200, content=json.dumps(body).encode(), headers={"content-type": content_type})


def sanitize_response(features: list[dict]) -> httpx.Response:
    sanitized = [{"id": f["id"], "properties": f["properties"]} for f in features]
    return httpx.Response(200, json={"sanitize-mapdata": {"sanitized": json.dumps(sanitized)}})


def sent_features(request: httpx.Request) -> list[dict]:
    form = dict(httpx.QueryParams(request.content.decode()))
    return json.loads(form["text"])


@pytest.fixture
def config() -> GeoShapesConfig:
    return GeoShapesConfig(
        max_id_count=5,
        wdqs_url=WDQS_URL,
        sparql_headers={"User-Agent": "geoshapes-tests"},
        mwapi_url=MWAPI_URL,
        mwapi_headers={"User-Agent": "geoshapes-tests"},
        queries=parse_queries(DEFAULT_QUERIES),
    )


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """
    Replace `db.fetch_all`; queued rows are returned and calls are recorded.
    """
    from core import db

    state: dict[str, Any] = {"rows": [], "calls": []}

    async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
        state["calls"].append((sql, args))
        return state["rows"]

    monkeypatch.setattr(db, "fetch_all", fetch_all)
    return state
