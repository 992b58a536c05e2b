"""tests/integration/test_cli.py — `flask create-admin`."""

from __future__ import annotations

from .conftest import login


def _create_admin(app, *args):
    return app.test_cli_runner().invoke(args=["create-admin", *args])


def test_create_admin_then_login(app, client):
    result = _create_admin(app, "--email", "Root@X.com", "--password", "adminpass", "--full-name", "Root")
    assert result.exit_code == 0, result.output
    assert "email=root@x.com" in result.output

    data = login(client, "root@x.com", "adminpass")
    assert data["user"]["role"] == "ADMIN"
    assert data["user"]["fullName"] == "Root"
    assert data["user"]["patientProfile"] is None
    assert data["user"]["doctorProfile"] is None


def test_create_admin_refuses_existing_email(app):
    _create_admin(app, "--email", "root@x.com", "--password", "adminpass")
    result = _create_admin(app, "--email", "root@x.com", "--password", "adminpass")
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_create_admin_rejects_short_password(app):
    result = _create_admin(app, "--email", "root@x.com", "--password", "123")
    assert result.exit_code == 2
    assert "at least 6 characters" in result.output
