import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core import db, http
from core.config import load_config
from geoshapes import router as geoshapes_router
from geoshapes.errors import GeoShapesError
from info import router as info_router

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("geoshapes")

# Bad requests are cacheable for a short while.
ERROR_CACHE_CONTROL = "public, s-maxage=30, max-age=30"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build config, the DB pool and the outbound HTTP client once per process.
    app.state.config = load_config()
    await db.init_pool()
    await http.init_client(timeout_s=app.state.config.http_timeout_s)
    try:
        yield
    finally:
        await http.close_client()
        await db.close_pool()


app = FastAPI(lifespan=lifespan)


@app.exception_handler(GeoShapesError)
async def geoshapes_error_handler(request: Request, exc: GeoShapesError) -> JSONResponse:
    logger.info("request_failed path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message},
        headers={"Cache-Control": ERROR_CACHE_CONTROL},
    )


app.include_router(geoshapes_router.router, tags=["geoshapes"])
app.include_router(info_router.router, tags=["info"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
