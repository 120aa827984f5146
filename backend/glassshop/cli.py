# Overview: Flask CLI command groups for bootstrap and shop inspection.

# backend/glassshop/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Shops (tenants):
# - python -m flask shops register --shop-name "Sharma Glass" --username owner --password secret
#   Create a shop together with its first admin.
# - python -m flask shops list
#   List shops with their user counts.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Shop, User
from .services import auth_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """Drop and recreate every table. All data is lost."""
    if not yes:
        click.echo("Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("Database reset.")


@click.group('shops')
def shops_group():
    """Shop (tenant) management."""


@shops_group.command('register')
@click.option('--shop-name', prompt=True)
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--email', default=None)
@click.option('--state', default=None, help='Place of supply for GST')
@with_appcontext
def register_shop(shop_name, username, password, email, state):
    """Create a shop and its first admin user."""
    try:
        shop, user = auth_service.register_shop(
            username=username,
            password=password,
            shop_name=shop_name,
            email=email,
            state=state,
        )
    except (ValidationError, PasswordValidationError, ConflictError) as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    click.echo(f"Created shop {shop.id} ({shop.shop_name}) with admin {user.username}")


@shops_group.command('list')
@with_appcontext
def list_shops():
    """List all shops."""
    shops = db.session.query(Shop).order_by(Shop.id.asc()).all()
    if not shops:
        click.echo("No shops.")
        return
    for shop in shops:
        users = db.session.query(User).filter_by(shop_id=shop.id).count()
        click.echo(f"{shop.id:>4}  {shop.shop_name:<30}  state={shop.state or '-':<16} users={users}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(shops_group)
