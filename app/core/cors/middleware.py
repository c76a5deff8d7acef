"""
CORS Middleware

ASGI middleware applying origin-matched CORS headers to every HTTP response
and answering preflight requests directly.
"""
from __future__ import annotations

from typing import Sequence

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.utils import get_logger
from .origins import build_cors_headers, resolve_cors_origin

logger = get_logger(__name__)


class CorsOriginMiddleware:
    """
    Origin-matching CORS handling.

    OPTIONS requests never reach the application: they get an empty 204 with
    the preflight header set.  All other responses have the CORS headers
    overwritten after the application produced them.  A rejected origin
    (resolver returned None) gets no `Access-Control-Allow-Origin`, which
    makes the browser block the response.  Exceptions escaping the
    application before a response started become a JSON 500 that still
    carries the CORS headers.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Sequence[str] = ()) -> None:
        self.app = app
        self.allowed_origins = tuple(allowed_origins)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_origin = Headers(scope=scope).get("origin")
        origin = resolve_cors_origin(request_origin, self.allowed_origins)
        if origin is None:
            logger.debug("CORS: origin not in allow-list", extra={"origin": request_origin})

        if scope["method"] == "OPTIONS":
            response = Response(
                status_code=204,
                headers=build_cors_headers(origin, preflight=True),
            )
            await response(scope, receive, send)
            return

        cors_headers = build_cors_headers(origin)
        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = MutableHeaders(scope=message)
                for name, value in cors_headers.items():
                    if name == "Vary":
                        headers.add_vary_header(value)
                    else:
                        headers[name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception:
            if response_started:
                raise
            logger.error(f"Unhandled error on {scope['path']}", exc_info=True)
            response = JSONResponse(
                {"error": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
                status_code=500,
                headers=cors_headers,
            )
            await response(scope, receive, send)
