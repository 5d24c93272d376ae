"""
Geoshapes data types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel


class EntityKind(str, Enum):
    POINT = "geopoint"
    LINE = "geoline"
    SHAPE = "geoshape"


@dataclass(frozen=True)
class GeoShapesRequest:
    kind: EntityKind
    ids: tuple[str, ...] = ()
    sparql_query: str | None = None
    id_column: str | None = None
    use_geojson: bool = False
    query_name: str | None = None


@dataclass
class RawPropertyRow:
    """
    One query-service result row.

    `columns` holds the raw SPARQL bindings (`{"type": ..., "value": ...}`)
    of every column except the id column.
    """

    id: str
    columns: dict[str, dict[str, Any]] = field(default_factory=dict)
    coordinate: list[float] | None = None


class ErrorResponse(BaseModel):
    detail: str
