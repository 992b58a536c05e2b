"""
cli.py — Flask CLI commands.

  flask --app consult_backend.wsgi create-admin --email admin@healthconsult.com

ADMIN accounts cannot self-register through the API; this command is the
only way to create one.
"""

from __future__ import annotations

import click
from flask import Flask
from flask.cli import with_appcontext

from consult_backend.app.constants import Role
from consult_backend.app.extensions import db, get_auth_components
from consult_backend.app.services.user_directory import DuplicateEmail, UserDirectory


@click.command("create-admin")
@click.option("--email", required=True, help="Login email of the new admin.")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--full-name", default="Administrator", show_default=True)
@with_appcontext
def create_admin_command(email: str, password: str, full_name: str) -> None:
    """Create an ADMIN account."""
    if len(password) < 6:
        raise click.BadParameter("Password must be at least 6 characters.", param_hint="--password")

    users = UserDirectory(db.session)
    if users.find_by_email(email) is not None:
        raise click.ClickException(f"A user with email {email!r} already exists.")

    verifier = get_auth_components().verifier
    try:
        user = users.create_user(
            email=email,
            password_hash=verifier.hash_password(password),
            full_name=full_name,
            role=Role.ADMIN,
        )
        db.session.commit()
    except DuplicateEmail:
        db.session.rollback()
        raise click.ClickException(f"A user with email {email!r} already exists.")

    click.echo(f"Created admin user id={user.id} email={user.email}")


def register_commands(app: Flask) -> None:
    app.cli.add_command(create_admin_command)
