"""
Geoshapes request errors.

All of these end the request with HTTP 400 (see `api/main.py`). `code` is the
short name used in logs.
"""

from __future__ import annotations


class GeoShapesError(Exception):
    code = "err.unknown"

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.code


class InvalidInput(GeoShapesError):
    code = "err.req.input"


class FeatureDisabled(GeoShapesError):
    code = "err.req.disabled"


class TooManyIds(GeoShapesError):
    code = "err.req.ids"


class InvalidId(GeoShapesError):
    code = "err.req.ids"


class InvalidParam(GeoShapesError):
    code = "err.req.param"


class UnknownTable(GeoShapesError):
    code = "err.config.table"


class UnexpectedContentType(GeoShapesError):
    code = "err.wdqs.content_type"


class MalformedGraphResponse(GeoShapesError):
    code = "err.wdqs.response"


class MissingIdColumn(GeoShapesError):
    code = "err.wdqs.idcolumn"


class InvalidGraphId(GeoShapesError):
    code = "err.wdqs.id"


class SanitizationError(GeoShapesError):
    code = "err.mwapi.sanitize"
