"""
CORS Layer

Origin resolution against a configured allow-list, plus the ASGI middleware
that applies it.

Usage:
    from app.core.cors import CorsOriginMiddleware, parse_allowed_origins

    app.add_middleware(
        CorsOriginMiddleware,
        allowed_origins=parse_allowed_origins("https://a.com, https://*.pages.dev"),
    )
"""
from .origins import (
    ALLOW_HEADERS,
    ALLOW_METHODS,
    EXPOSE_HEADERS,
    PREFLIGHT_MAX_AGE,
    build_cors_headers,
    matches_origin,
    parse_allowed_origins,
    resolve_cors_origin,
    wildcard_to_regex,
)
from .middleware import CorsOriginMiddleware

__all__ = [
    "ALLOW_HEADERS",
    "ALLOW_METHODS",
    "EXPOSE_HEADERS",
    "PREFLIGHT_MAX_AGE",
    "build_cors_headers",
    "matches_origin",
    "parse_allowed_origins",
    "resolve_cors_origin",
    "wildcard_to_regex",
    "CorsOriginMiddleware",
]
