"""
Geoshapes API endpoints.

GET /geoshape?ids=Q1,Q2          polygons from the polygon table
GET /geoline?ids=Q1&sql=simplify lines from the line table
GET /geopoint?query=SELECT...    points from the query service
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request

from core.config import GeoShapesConfig

from . import dependencies, schemas, service

router = APIRouter(responses={400: {"model": schemas.ErrorResponse}})


async def _run(
    kind: schemas.EntityKind,
    request: Request,
    config: GeoShapesConfig,
    client: httpx.AsyncClient,
    client_ip: str | None,
) -> dict:
    return await service.execute(
        kind,
        request.query_params,
        config=config,
        client=client,
        client_ip=client_ip,
    )


@router.get("/geoshape")
async def geoshape(
    request: Request,
    config: GeoShapesConfig = Depends(dependencies.get_config),
    client: httpx.AsyncClient = Depends(dependencies.get_http_client),
    client_ip: str | None = Depends(dependencies.get_client_ip),
) -> dict:
    return await _run(schemas.EntityKind.SHAPE, request, config, client, client_ip)


@router.get("/geoline")
async def geoline(
    request: Request,
    config: GeoShapesConfig = Depends(dependencies.get_config),
    client: httpx.AsyncClient = Depends(dependencies.get_http_client),
    client_ip: str | None = Depends(dependencies.get_client_ip),
) -> dict:
    return await _run(schemas.EntityKind.LINE, request, config, client, client_ip)


@router.get("/geopoint")
async def geopoint(
    request: Request,
    config: GeoShapesConfig = Depends(dependencies.get_config),
    client: httpx.AsyncClient = Depends(dependencies.get_http_client),
    client_ip: str | None = Depends(dependencies.get_client_ip),
) -> dict:
    return await _run(schemas.EntityKind.POINT, request, config, client, client_ip)
