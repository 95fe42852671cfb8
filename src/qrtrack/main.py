"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qrtrack.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from qrtrack.api.router import api_router
from qrtrack.api.tracking import router as tracking_router
from qrtrack.config import settings
from qrtrack.database import create_stores, open_custom_store
from qrtrack.errors import AppError
from qrtrack.logging import setup_logging

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the store clients for the process lifetime."""
    setup_logging()
    app.state.account_store, app.state.project_store = create_stores(settings)
    app.state.custom_store_factory = open_custom_store
    logger.info(f"Started with {settings.store_backend} document store")
    yield
    await app.state.account_store.close()
    await app.state.project_store.close()


app = FastAPI(
    title="QR Track API",
    description="Accounts and trackable QR code projects",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)


def _error_response(status_code: int, message: str, detail: object | None = None) -> JSONResponse:
    content: dict[str, object] = {"message": message}
    if detail is not None and settings.debug_enabled:
        content["error"] = detail
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message} ({exc.detail})")
    return _error_response(exc.status_code, exc.message, exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, "Invalid request.", jsonable_encoder(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled {type(exc).__name__}")
    return _error_response(500, "Internal server error.", repr(exc))


app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]
# Added after the logging middleware so it wraps it and sets the request id first
app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(api_router, prefix="/api")
app.include_router(tracking_router, tags=["tracking"])


if __name__ == "__main__":
    import uvicorn

    from qrtrack.logging import get_uvicorn_log_config

    uvicorn.run(
        "qrtrack.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )
