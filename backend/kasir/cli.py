# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/kasir/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app wsgi <group> <command> [options]
#
# System bootstrap/repair:
# - flask --app wsgi system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app wsgi system cleanup-sessions
#   Delete expired/revoked session tokens older than 30 days.
#
# User inspection/bootstrap:
# - flask --app wsgi users list
#   List all users with active status.
# - flask --app wsgi users create --username kasir1 --email kasir1@example.com --password "Password123!"
#   Create a user (prompts if options are omitted).
#
# Catalog inspection:
# - flask --app wsgi products list --user kasir1 [--category Drinks]
#   List active products visible to a user.

import click
from flask.cli import with_appcontext

from .errors import PosError
from .extensions import db
from .models import User
from .services import auth_service, catalog_service, session_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (idempotent)."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@system_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions():
    """Delete expired and revoked sessions older than 30 days."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"PASS Deleted {deleted} session(s)")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.username:<20} {user.email:<32} {status}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--name', default=None)
@with_appcontext
def create_user_cmd(username, email, password, name):
    """Create a user account."""
    try:
        user = auth_service.create_user(username=username, email=email, password=password, name=name)
    except PosError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Created user: {user.username} ({user.email}) id={user.id}")


@click.group('products')
def products_group():
    """Catalog inspection commands."""


@products_group.command('list')
@click.option('--user', 'username', required=True, help='Username whose view of the catalog to list')
@click.option('--category', default=None)
@with_appcontext
def list_products_cmd(username, category):
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        click.echo(f"FAIL User '{username}' not found")
        raise SystemExit(1)

    products = catalog_service.list_active(user.id, category=category)
    if not products:
        click.echo("No products found")
        return
    for p in products:
        owner = "shared" if p.owner_id is None else f"owner={p.owner_id}"
        click.echo(f"{p.id:>4}  {p.name:<30} {p.category:<16} price={p.unit_price} stock={p.stock_quantity} {owner}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
