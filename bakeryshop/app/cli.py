from __future__ import annotations

import click
from flask import Blueprint, current_app
from werkzeug.security import generate_password_hash

from bakeryshop.app.extensions import db, get_store
from bakeryshop.store.base import ROLE_ADMIN, ROLES

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create tables."""
    db.create_all()
    click.echo("DB initialized (tables created).")


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed a demo admin and a demo customer.

    Safe to run multiple times; existing phone numbers are left alone.
    """
    store = get_store()
    admin_phone = current_app.config["SEED_ADMIN_PHONE"]
    password = current_app.config["SEED_ADMIN_PASSWORD"]
    country = current_app.config["DEFAULT_COUNTRY"]

    if not store.find_user(phone=admin_phone):
        store.add_user(
            first_name="Bakery",
            last_name="Admin",
            phone=admin_phone,
            street="Hauptstraße",
            house_number="1",
            postal_code="10115",
            city="Berlin",
            state="Berlin",
            country=country,
            password_hash=generate_password_hash(password),
            role=ROLE_ADMIN,
        )

    if not store.find_user(phone="+49 30 2000000"):
        store.add_user(
            first_name="Demo",
            last_name="Customer",
            phone="+49 30 2000000",
            street="Bergmannstraße",
            house_number="12",
            postal_code="10961",
            city="Berlin",
            state="Berlin",
            country=country,
            password_hash=generate_password_hash(password),
        )

    click.echo(f"Seed complete. Admin login: {admin_phone}")


@cli_bp.cli.command("set-role")
@click.argument("phone")
@click.argument("role", type=click.Choice(sorted(ROLES)))
def set_role(phone: str, role: str) -> None:
    """Give the user with PHONE a new ROLE."""
    store = get_store()
    user = store.find_user(phone=phone.strip())
    if not user:
        raise click.ClickException(f"No user with phone {phone}")
    store.update_user(user.id, role=role)
    click.echo(f"User {user.id} is now {role}.")
