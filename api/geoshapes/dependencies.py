"""
FastAPI dependencies for the geoshapes routes.
"""

from __future__ import annotations

import httpx
from fastapi import Header, Request

from core import http
from core.config import GeoShapesConfig


def get_config(request: Request) -> GeoShapesConfig:
    return request.app.state.config


def get_http_client() -> httpx.AsyncClient:
    return http.client()


def get_client_ip(request: Request, x_client_ip: str | None = Header(default=None)) -> str | None:
    """
    The caller's IP, forwarded to the query service for rate limiting.
    """
    if x_client_ip:
        return x_client_ip.strip()
    return request.client.host if request.client else None
