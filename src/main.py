"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.sx_common.database import engine
from src.sx_common.errors import AppError, InternalError, RequestValidationFailed
from src.sx_common.logging_config import setup_logging
from src.sx_common.response import error_response
from src.sx_gateway.api.router import router as auth_router
from src.sx_gateway.api.users_router import router as users_router
from src.sx_gateway.middleware.request_log import RequestLogMiddleware, request_id_of
from src.sx_product.api.bid_records_router import router as bid_records_router
from src.sx_product.api.bids_router import router as product_bids_router
from src.sx_product.api.router import router as posts_router
from src.sx_user_lists.api.router import router as user_lists_router

VERSION = "0.1.0"

setup_logging(settings.LOG_LEVEL, debug=settings.DEBUG)
logger = logging.getLogger("stakex")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection. Shutdown: dispose the pool."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("%s %s started, api prefix %s", settings.APP_NAME, VERSION, settings.API_PREFIX)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(request: Request, status_code: int, err: AppError) -> JSONResponse:
    resp = error_response(err.code, err.message)
    resp.request_id = request_id_of(request)
    return JSONResponse(status_code=status_code, content=resp.to_wire())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(request, exc.http_status, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    detail = first.get("msg", "Invalid request")
    message = f"{where}: {detail}" if where else detail
    return _envelope(request, 400, RequestValidationFailed(message))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    err = AppError(exc.status_code, str(exc.detail), exc.status_code)
    response = _envelope(request, exc.status_code, err)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _envelope(request, 500, InternalError())


for _router in (
    auth_router,
    users_router,
    posts_router,
    product_bids_router,
    bid_records_router,
    user_lists_router,
):
    app.include_router(_router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": VERSION, "app": settings.APP_NAME}
