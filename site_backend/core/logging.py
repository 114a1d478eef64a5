from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware

_request_logger = logging.getLogger("site_backend.requests")


def configure_logging(level: int | str = logging.INFO, *, verbose_http: bool = False) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    if not verbose_http:
        for noisy_logger in ("httpx", "uvicorn.access", "multipart"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def _remote_address(request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per request: remote address, method and path."""

    async def dispatch(self, request, call_next):
        _request_logger.info("%s - %s - %s", _remote_address(request), request.method, request.url.path)
        return await call_next(request)
