"""
tests/integration/test_admin.py — Account deactivation by an admin.

Endpoint covered:
  PATCH /admin/users/<id>/status → 200

Deactivation takes effect at the next login or refresh. An access token
issued before deactivation keeps authenticating GET /auth/me until it
expires on its own.
"""

from __future__ import annotations

from .conftest import auth_headers, create_admin, login, post_refresh, register


def _set_status(client, admin_token: str, user_id: int, is_active: bool):
    return client.patch(
        f"/api/v1/admin/users/{user_id}/status",
        json={"isActive": is_active},
        headers=auth_headers(admin_token),
    )


class TestDeactivation:

    def test_deactivated_user_keeps_access_until_token_expires(self, app, client, clock):
        alice = register(client)
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")

        resp = _set_status(client, admin["accessToken"], alice["user"]["id"], False)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["isActive"] is False

        me = client.get("/api/v1/auth/me", headers=auth_headers(alice["accessToken"]))
        assert me.status_code == 200
        assert me.get_json()["data"]["email"] == "alice@x.com"
        assert me.get_json()["data"]["isActive"] is False

        clock.advance(seconds=6)
        me = client.get("/api/v1/auth/me", headers=auth_headers(alice["accessToken"]))
        assert me.get_json()["error"]["code"] == "TOKEN_EXPIRED"

    def test_deactivated_user_cannot_login(self, app, client):
        alice = register(client)
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")
        _set_status(client, admin["accessToken"], alice["user"]["id"], False)

        resp = client.post("/api/v1/auth/login", json={"email": "alice@x.com", "password": "secret1"})
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "ACCOUNT_DEACTIVATED"

    def test_deactivated_user_cannot_refresh_and_it_is_not_reuse(self, app, client):
        alice = register(client)
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")
        _set_status(client, admin["accessToken"], alice["user"]["id"], False)

        first = post_refresh(client, alice["refreshToken"])
        second = post_refresh(client, alice["refreshToken"])
        assert first.status_code == second.status_code == 403
        assert first.get_json()["error"]["code"] == "ACCOUNT_DEACTIVATED"
        assert second.get_json()["error"]["code"] == "ACCOUNT_DEACTIVATED"

    def test_reactivated_user_can_refresh_existing_session(self, app, client):
        alice = register(client)
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")
        _set_status(client, admin["accessToken"], alice["user"]["id"], False)
        _set_status(client, admin["accessToken"], alice["user"]["id"], True)

        assert post_refresh(client, alice["refreshToken"]).status_code == 200
        assert login(client)["user"]["isActive"] is True


class TestAdminGuard:

    def test_non_admin_gets_403_forbidden(self, client):
        alice = register(client)
        bob = register(client, email="bob@x.com")
        resp = _set_status(client, alice["accessToken"], bob["user"]["id"], False)
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "FORBIDDEN"

    def test_anonymous_gets_401(self, client):
        resp = client.patch("/api/v1/admin/users/1/status", json={"isActive": False})
        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"

    def test_unknown_user_returns_404(self, app, client):
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")
        resp = _set_status(client, admin["accessToken"], 9999, False)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "USER_NOT_FOUND"

    def test_missing_is_active_returns_400(self, app, client):
        create_admin(app)
        admin = login(client, "admin@x.com", "adminpass")
        resp = client.patch(
            "/api/v1/admin/users/1/status",
            json={},
            headers=auth_headers(admin["accessToken"]),
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["details"][0]["field"] == "isActive"
