"""
Unit Tests for the CORS Layer

Origin resolution against allow-lists, header construction, and the ASGI
middleware wired into a minimal Starlette app.
"""
import httpx
import pytest
from starlette.applications import Starlette
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from app.core.cors import (
    CorsOriginMiddleware,
    PREFLIGHT_MAX_AGE,
    build_cors_headers,
    matches_origin,
    parse_allowed_origins,
    resolve_cors_origin,
    wildcard_to_regex,
)

ALLOW_LIST = ["https://a.com", "https://b.com"]


class TestParseAllowedOrigins:
    """Tests for allow-list parsing."""

    def test_none_and_empty(self):
        assert parse_allowed_origins(None) == ()
        assert parse_allowed_origins("") == ()

    def test_trims_and_drops_empty_entries(self):
        parsed = parse_allowed_origins(" https://a.com , ,https://b.com/ ,")
        assert parsed == ("https://a.com", "https://b.com")

    def test_strips_single_trailing_slash(self):
        assert parse_allowed_origins("https://a.com//") == ("https://a.com/",)


class TestResolveCorsOrigin:
    """Tests for resolve_cors_origin."""

    def test_wildcard_entry_echoes_any_origin(self):
        for origin in ("https://x.com", "http://localhost:3000", "null"):
            assert resolve_cors_origin(origin, ["*"]) == origin

    def test_literal_match_with_trailing_slash(self):
        assert resolve_cors_origin("https://a.com/", ALLOW_LIST) == "https://a.com"

    def test_unlisted_origin_rejected(self):
        assert resolve_cors_origin("https://evil.com", ALLOW_LIST) is None

    def test_empty_allow_list_is_permissive(self):
        assert resolve_cors_origin("https://x.com", []) == "https://x.com"

    def test_missing_origin_returns_first_entry(self):
        assert resolve_cors_origin(None, ALLOW_LIST) == "https://a.com"
        assert resolve_cors_origin("", ALLOW_LIST) == "https://a.com"

    def test_missing_origin_with_empty_list(self):
        assert resolve_cors_origin(None, []) == "*"

    def test_wildcard_subdomain(self):
        allowed = ["https://*.pages.dev"]
        assert resolve_cors_origin("https://449cdfa5.pages.dev", allowed) == "https://449cdfa5.pages.dev"
        assert resolve_cors_origin("https://pages.dev.evil.com", allowed) is None

    def test_literal_match_is_case_sensitive(self):
        assert resolve_cors_origin("https://A.com", ALLOW_LIST) is None

    def test_first_matching_entry_wins_result_is_origin(self):
        allowed = ["https://*.example.com", "*"]
        assert resolve_cors_origin("https://app.example.com", allowed) == "https://app.example.com"


class TestWildcardMatching:
    """Tests for wildcard pattern compilation."""

    def test_dots_are_literal(self):
        assert not matches_origin("https://*.pages.dev", "https://abc.pagesXdev")

    def test_regex_metacharacters_are_escaped(self):
        pattern = "https://*.ex(ample)+.com"
        assert matches_origin(pattern, "https://a.ex(ample)+.com")
        assert not matches_origin(pattern, "https://a.example.com")

    def test_multiple_wildcards(self):
        assert matches_origin("http://*:*", "http://localhost:5173")

    def test_anchored(self):
        regex = wildcard_to_regex("https://*.a.com")
        assert regex.match("https://x.a.com.evil") is None


class TestBuildCorsHeaders:
    """Tests for header construction."""

    def test_concrete_origin(self):
        headers = build_cors_headers("https://a.com")
        assert headers["Access-Control-Allow-Origin"] == "https://a.com"
        assert headers["Vary"] == "Origin"
        assert "OPTIONS" in headers["Access-Control-Allow-Methods"]
        assert "x-request-id" in headers["Access-Control-Allow-Headers"]
        assert "Content-Length" in headers["Access-Control-Expose-Headers"]
        assert "Access-Control-Max-Age" not in headers

    def test_star_origin_has_no_vary(self):
        headers = build_cors_headers("*")
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert "Vary" not in headers

    def test_rejected_origin_omits_allow_origin(self):
        headers = build_cors_headers(None)
        assert "Access-Control-Allow-Origin" not in headers
        assert "Vary" not in headers
        assert "Access-Control-Allow-Methods" in headers

    def test_preflight_max_age(self):
        headers = build_cors_headers("https://a.com", preflight=True)
        assert headers["Access-Control-Max-Age"] == str(PREFLIGHT_MAX_AGE) == "86400"


# ---- Middleware ----

async def _ok(request):
    return JSONResponse({"ok": True})


async def _text(request):
    return PlainTextResponse("hello", headers={"Vary": "Accept-Encoding"})


async def _boom(request):
    raise RuntimeError("boom")


def _build_app(allowed_origins):
    app = Starlette(routes=[
        Route("/ok", _ok, methods=["GET", "POST"]),
        Route("/text", _text),
        Route("/boom", _boom),
    ])
    app.add_middleware(CorsOriginMiddleware, allowed_origins=allowed_origins)
    return app


@pytest.fixture
async def cors_client():
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=_build_app(ALLOW_LIST)),
        base_url="http://test",
    ) as client:
        yield client


@pytest.mark.asyncio
class TestCorsOriginMiddleware:
    """Tests for the ASGI middleware."""

    async def test_preflight(self, cors_client):
        response = await cors_client.options(
            "/ok",
            headers={"Origin": "https://b.com", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "https://b.com"
        assert response.headers["access-control-max-age"] == "86400"
        assert response.content == b""

    async def test_preflight_for_unknown_route(self, cors_client):
        response = await cors_client.options("/missing", headers={"Origin": "https://a.com"})
        assert response.status_code == 204

    async def test_allowed_origin_echoed(self, cors_client):
        response = await cors_client.get("/ok", headers={"Origin": "https://a.com/"})
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://a.com"
        assert response.headers["vary"] == "Origin"
        assert response.json() == {"ok": True}

    async def test_rejected_origin_omits_allow_origin(self, cors_client):
        response = await cors_client.get("/ok", headers={"Origin": "https://evil.com"})
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers
        assert "access-control-allow-methods" in response.headers

    async def test_no_origin_gets_first_entry(self, cors_client):
        response = await cors_client.get("/ok")
        assert response.headers["access-control-allow-origin"] == "https://a.com"

    async def test_existing_vary_is_extended(self, cors_client):
        response = await cors_client.get("/text", headers={"Origin": "https://a.com"})
        assert response.headers["vary"] == "Accept-Encoding, Origin"

    async def test_unhandled_error_keeps_cors_headers(self, cors_client):
        response = await cors_client.get("/boom", headers={"Origin": "https://a.com"})
        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "https://a.com"
        assert response.json()["error"] == "INTERNAL_ERROR"

    async def test_permissive_when_unconfigured(self):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=_build_app(())),
            base_url="http://test",
        ) as client:
            response = await client.get("/ok", headers={"Origin": "https://anything.io"})
        assert response.headers["access-control-allow-origin"] == "https://anything.io"
