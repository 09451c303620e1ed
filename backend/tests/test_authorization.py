"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Cashier role denied admin operations (403)
- Admin role can perform privileged operations
"""

import pytest


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/items"),
            ("GET", "/api/items/1"),
            ("POST", "/api/items"),
            ("PUT", "/api/items/1"),
            ("DELETE", "/api/items/1"),
            ("GET", "/api/customers"),
            ("POST", "/api/customers"),
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("PUT", "/api/orders/1"),
            ("DELETE", "/api/orders/1"),
            ("GET", "/api/users"),
            ("GET", "/api/users/1"),
            ("PUT", "/api/users/1"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["success"] is False


# =============================================================================
# CASHIER DENIED ADMIN OPERATIONS - 403
# =============================================================================


class TestCashierDenied:
    """Cashier role cannot perform privileged operations."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/users"),
            ("POST", "/api/users"),
            ("DELETE", "/api/users/1"),
            ("GET", "/api/customers"),
            ("POST", "/api/customers"),
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("POST", "/api/items"),
        ],
    )
    def test_admin_routes(self, client, cashier_headers, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=cashier_headers)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Admin access required"


# =============================================================================
# ADMIN ALLOWED
# =============================================================================


class TestAdminAllowed:
    @pytest.mark.parametrize("path", ["/api/users", "/api/customers", "/api/orders", "/api/items"])
    def test_admin_reads(self, client, admin_headers, path):
        resp = client.get(path, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["success"] is True


# =============================================================================
# ENVELOPE / FALLBACKS
# =============================================================================


def test_unknown_route(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "API endpoint not found"}


def test_health_is_public(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["database"]["status"] == "healthy"


def test_cors_header_for_allowed_origin(client):
    resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    resp = client.get("/health", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_development_500_includes_stack(app, client):
    app.config["APP_ENV"] = "development"

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.get_json()
    assert body["error"] == "kaboom"
    assert "RuntimeError" in body["data"]["stack"]
