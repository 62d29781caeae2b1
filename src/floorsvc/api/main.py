from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from floorsvc.api.error_handling import register_exception_handlers
from floorsvc.api.middleware.request_id import RequestIDMiddleware
from floorsvc.api.routes.admin import router as admin_router
from floorsvc.api.routes.health import router as health_router
from floorsvc.api.routes.menu import router as menu_router
from floorsvc.api.routes.metrics import router as metrics_router
from floorsvc.api.routes.orders import router as orders_router
from floorsvc.api.routes.tables import router as tables_router
from floorsvc.api.routes.users import router as users_router
from floorsvc.infrastructure.observability.logging_config import configure_logging
from floorsvc.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("floorsvc.api.access")

APP_VERSION = "0.1.0"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_template(request: Request) -> str:
    # Label by route template so per-id paths do not explode metric cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            path = _route_template(request)
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        path = _route_template(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Floor Service", version=APP_VERSION)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(users_router)
    app.include_router(menu_router)
    app.include_router(tables_router)
    app.include_router(orders_router)
    app.include_router(admin_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id"],
    )

    configure_otel(app, service_version=APP_VERSION)
    return app


app = create_app()
