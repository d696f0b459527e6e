"""HTTP middleware: request ids + access log, CORS, hardening headers."""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..logging_utils import request_id_var

access_logger = logging.getLogger("taskflow.request")

# Swagger/ReDoc load scripts and styles from the CDN and inline them
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' https://cdn.jsdelivr.net 'unsafe-inline'; "
    "style-src 'self' https://cdn.jsdelivr.net 'unsafe-inline'; "
    "img-src 'self' https: data:; "
    "frame-ancestors 'none'"
)
DOCS_PATHS = ("/docs", "/redoc")


def _hardening_headers(path: str) -> dict:
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
    }
    if settings.SECURITY_CSP:
        headers["Content-Security-Policy"] = (
            DOCS_CSP if path.startswith(DOCS_PATHS) else settings.SECURITY_CSP
        )
    if settings.SECURITY_ENABLE_HSTS:
        headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
    return headers


def install_middleware(app: FastAPI) -> None:
    # Registration order matters: the last one added runs first (outermost)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in _hardening_headers(request.url.path).items():
            response.headers.setdefault(name, value)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[settings.REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        req_id = request.headers.get(settings.REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = req_id
        token = request_id_var.set(req_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers.setdefault(settings.REQUEST_ID_HEADER, req_id)
            access_logger.info(
                "method=%s path=%s status=%s duration_ms=%d",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response
        finally:
            request_id_var.reset(token)
