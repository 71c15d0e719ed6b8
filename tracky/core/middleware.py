"""Request middleware: identity resolution on protected paths and access logging."""

import logging
import time
from collections.abc import Iterable

from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from tracky.core.errors import IdentityError
from tracky.core.identity import IdentityVerifier

logger = logging.getLogger(__name__)

UNAUTHORIZED_DETAIL = "Unauthorized"


def is_public_path(path: str, exact: Iterable[str], prefixes: Iterable[str]) -> bool:
    """True if path is in the allow-list by exact match or directory prefix."""
    if path in exact:
        return True
    return any(path.startswith(prefix) for prefix in prefixes)


def _unauthorized() -> JSONResponse:
    return JSONResponse({"detail": UNAUTHORIZED_DETAIL}, status_code=401)


class IdentityMiddleware(BaseHTTPMiddleware):
    """
    Resolve the caller's identity before any handler runs.

    Public paths pass straight through. Everything else needs a cookie the
    verifier accepts; otherwise the request ends here with a 401 whose body
    does not say why. On success the user id is put on request.state.user_id.

    Resolution runs in the threadpool: the session registry can block on its
    read lock while a login or logout holds the write lock.
    """

    def __init__(
        self,
        app: ASGIApp,
        verifier: IdentityVerifier,
        public_paths: Iterable[str] = (),
        public_prefixes: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self.verifier = verifier
        self.public_paths = frozenset(public_paths)
        self.public_prefixes = tuple(public_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if is_public_path(path, self.public_paths, self.public_prefixes):
            return await call_next(request)

        token = request.cookies.get(self.verifier.cookie_name)
        if not token:
            logger.info("auth_rejected", extra={"reason": "MissingToken", "path": path})
            return _unauthorized()

        try:
            user_id = await run_in_threadpool(self.verifier.resolve, token)
        except IdentityError as e:
            logger.info(
                "auth_rejected",
                extra={"reason": type(e).__name__, "path": path, "detail": e.message},
            )
            return _unauthorized()

        request.state.user_id = user_id
        return await call_next(request)


async def log_requests(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """Log method, path, status and latency for every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %s %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": round(elapsed_ms, 1),
        },
    )
    return response
