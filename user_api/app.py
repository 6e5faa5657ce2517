from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from starlette.middleware.base import BaseHTTPMiddleware

from user_api import __version__
from user_api.core.config import Settings, get_settings
from user_api.core.metrics import UserMetrics
from user_api.repositories.json_storage import JSONUserStore
from user_api.routers import users as users_router
from user_api.services.user_service import UserService

logger = logging.getLogger(__name__)

SERVICE_NAME = "user-api"
SERVICE_VERSION = __version__


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request on the way in and its status on the way out."""

    async def dispatch(self, request, call_next):
        method = request.method
        path = request.url.path
        logger.info("Incoming request method=%s path=%s client_ip=%s", method, path, _client_ip(request))
        response = await call_next(request)
        logger.info("Request completed method=%s path=%s status=%d", method, path, response.status_code)
        return response


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "Invalid request body"
    logger.warning("Invalid request body error=%s", message)
    return JSONResponse({"error": message}, status_code=400)


def create_app(settings: Optional[Settings] = None, store: Optional[JSONUserStore] = None) -> FastAPI:
    """
    Build the API with its own store/service instances.

    Raises PersistenceError when the snapshot at settings.data_path cannot be
    loaded. Also usable as a uvicorn factory (--factory).
    """
    settings = settings or get_settings()
    if store is None:
        store = JSONUserStore(settings.data_path)
        logger.info("Storage initialized path=%s", settings.data_path)

    metrics = UserMetrics()
    app = FastAPI(title="User API", version=SERVICE_VERSION, debug=settings.app_env == "dev")
    app.state.settings = settings
    app.state.store = store
    app.state.metrics = metrics
    app.state.user_service = UserService(store, metrics)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.get("/metrics")
    def metrics_snapshot(request: Request):
        return request.app.state.metrics.snapshot()

    app.include_router(users_router.router)
    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")
    return app
