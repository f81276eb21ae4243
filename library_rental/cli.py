import click
from flask import Blueprint

from library_rental.errors import LibraryError
from library_rental.extensions import db
from library_rental.services.auth_service import AuthService

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("init-db")
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Tables created.")


@cli_bp.cli.command("create-admin")
@click.argument("name")
@click.argument("phone")
@click.argument("password")
def create_admin(name, phone, password):
    """Create an administrator account (registration only makes users)."""
    try:
        customer = AuthService.register(
            db.session,
            {"name": name, "phone": phone, "password": password},
            role="admin",
        )
    except LibraryError as e:
        raise click.ClickException(e.message)
    click.echo(f"Admin created: id={customer.id}")
