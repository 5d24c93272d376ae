"""
Service information endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

router = APIRouter(prefix="/_info")


class ServiceInfo(BaseModel):
    name: str = "geoshapes-service"
    version: str = "0.1.0"
    description: str = "GeoJSON and TopoJSON shapes for Wikidata items"
    home: str = "https://www.mediawiki.org/wiki/Maps"


INFO = ServiceInfo()


@router.get("/")
def info() -> ServiceInfo:
    return INFO


@router.get("/home")
def home() -> RedirectResponse:
    return RedirectResponse(INFO.home, status_code=301)


@router.get("/{field}")
def info_field(field: str) -> dict:
    if field not in ServiceInfo.model_fields:
        raise HTTPException(status_code=404, detail="Unknown info field.")
    return {field: getattr(INFO, field)}
