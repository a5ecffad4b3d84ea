"""Request correlation, access logging and response hardening."""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.responses import JSONResponse

from src.storefront.runtime.context import get_config

REQUEST_ID_HEADER = "X-Request-ID"

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
_HSTS = "max-age=31536000; includeSubDomains; preload"

CallNext = Callable[[Request], Awaitable[Response]]


def client_ip(request: Request) -> str:
    """First hop of ``X-Forwarded-For``, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "-"


async def security_headers(request: Request, call_next: CallNext) -> Response:
    response = await call_next(request)
    for name, value in _SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    if get_config().app.environment == "production":
        response.headers.setdefault("Strict-Transport-Security", _HSTS)
    return response


async def request_context(request: Request, call_next: CallNext) -> Response:
    """Tag the request with an id, log its outcome and contain crashes.

    Log records emitted while the request is handled carry ``request_id``,
    ``method`` and ``path``. Unhandled exceptions become a 500 JSON body.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    with logger.contextualize(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_ip(request),
    ):
        logger.info("request.start")
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.bind(
                status_code=500,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
            )
        else:
            logger.bind(
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            ).info("request.end")

    response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response
