"""Tests for middleware — security headers, GZip, CORS, error bodies.

Tests the SecurityHeadersMiddleware, GZipMiddleware and exception handlers
wired in cotador/main.py.
"""

import pytest
from httpx import AsyncClient

# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------

class TestSecurityHeaders:
    @pytest.mark.parametrize("header,expected_value", [
        ("x-content-type-options", "nosniff"),
        ("x-frame-options", "DENY"),
        ("referrer-policy", "strict-origin-when-cross-origin"),
    ])
    async def test_security_header_present(self, client: AsyncClient, header: str, expected_value: str):
        resp = await client.get("/health/live")
        assert resp.headers.get(header) == expected_value

    async def test_no_hsts_in_debug(self, client: AsyncClient):
        resp = await client.get("/health/live")
        assert "strict-transport-security" not in resp.headers


# ---------------------------------------------------------------------------
# GZip middleware
# ---------------------------------------------------------------------------

class TestGZipMiddleware:
    async def test_catalog_compressed(self, client: AsyncClient, auth_headers: dict[str, str]):
        resp = await client.get(
            "/api/v1/catalog",
            headers={**auth_headers, "Accept-Encoding": "gzip"},
        )
        assert resp.status_code == 200
        assert resp.headers.get("content-encoding") == "gzip"


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

class TestCors:
    async def test_preflight_for_allowed_origin(self, client: AsyncClient):
        resp = await client.options(
            "/api/v1/cart",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

class TestExceptionHandlers:
    async def test_404_returns_json(self, client: AsyncClient):
        resp = await client.get("/nonexistent-endpoint-xyz")
        assert resp.status_code == 404
        body = resp.json()
        assert "detail" in body or "error" in body

    async def test_401_uses_error_envelope(self, client: AsyncClient):
        resp = await client.get("/api/v1/cart")
        assert resp.json() == {"error": {"message": "Authentication required"}}
