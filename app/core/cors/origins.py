"""
Origin Resolver

Decides which origin (if any) is echoed back in `Access-Control-Allow-Origin`
for a request, given the configured allow-list.

Allow-list entries come in three forms:
  - "*"                      matches any origin
  - "https://*.pages.dev"    wildcard; "*" spans any run of characters
  - "https://example.com"    literal, exact string equality

All functions here are pure and never raise.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, Optional, Sequence, Tuple

ALLOW_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
ALLOW_HEADERS = ("Content-Type", "Authorization", "x-mastra-client-type", "x-request-id")
EXPOSE_HEADERS = ("Content-Length", "X-Requested-With", "x-request-id")

PREFLIGHT_MAX_AGE = 24 * 60 * 60   # seconds

WILDCARD = "*"


def _strip_trailing_slash(value: str) -> str:
    """Remove exactly one trailing '/'."""
    return value[:-1] if value.endswith("/") else value


def parse_allowed_origins(raw: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-separated allow-list string.

    Each entry is trimmed and loses one trailing slash; empty entries are
    dropped.  ``None`` or "" yields an empty tuple.
    """
    if not raw:
        return ()
    entries = (_strip_trailing_slash(part.strip()) for part in raw.split(","))
    return tuple(entry for entry in entries if entry)


@lru_cache(maxsize=256)
def wildcard_to_regex(pattern: str) -> "re.Pattern[str]":
    """
    Compile a wildcard allow-list entry to an anchored regular expression.

    Every segment between '*' is escaped, so all other characters keep their
    literal meaning and compilation cannot fail.
    """
    escaped = ".*".join(re.escape(segment) for segment in pattern.split(WILDCARD))
    return re.compile(f"^{escaped}$")


def matches_origin(pattern: str, origin: str) -> bool:
    """Test a single allow-list entry against a normalized origin."""
    if pattern == WILDCARD:
        return True
    if WILDCARD in pattern:
        return wildcard_to_regex(pattern).match(origin) is not None
    return pattern == origin


def resolve_cors_origin(
    request_origin: Optional[str],
    allowed_origins: Sequence[str],
) -> Optional[str]:
    """
    Resolve the origin to echo in `Access-Control-Allow-Origin`.

    Args:
        request_origin: Value of the request's Origin header (may be absent).
        allowed_origins: Parsed allow-list, in configuration order.

    Returns:
        - no request origin: the first allow-list entry, or "*" for an empty list
        - empty allow-list: the normalized request origin (permissive)
        - otherwise the normalized origin when any entry matches, else None
    """
    if not request_origin:
        return allowed_origins[0] if allowed_origins else WILDCARD

    normalized = _strip_trailing_slash(request_origin)

    if not allowed_origins:
        return normalized

    if any(matches_origin(pattern, normalized) for pattern in allowed_origins):
        return normalized
    return None


def build_cors_headers(origin: Optional[str], preflight: bool = False) -> Dict[str, str]:
    """
    Build the CORS header set for a response.

    `Access-Control-Allow-Origin` is only present when ``origin`` resolved;
    `Vary: Origin` only when a concrete origin (not "*") is echoed.
    Preflight responses additionally carry `Access-Control-Max-Age`.
    """
    headers: Dict[str, str] = {}
    if origin is not None:
        headers["Access-Control-Allow-Origin"] = origin
        if origin != WILDCARD:
            headers["Vary"] = "Origin"

    headers["Access-Control-Allow-Methods"] = ", ".join(ALLOW_METHODS)
    headers["Access-Control-Allow-Headers"] = ", ".join(ALLOW_HEADERS)
    headers["Access-Control-Expose-Headers"] = ", ".join(EXPOSE_HEADERS)

    if preflight:
        headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
    return headers
