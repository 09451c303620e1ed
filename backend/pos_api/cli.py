# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/pos_api/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables if missing and the default admin when no users exist.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with their role.
# - python -m flask users create --username alice --email alice@pos.com --password "secret1" --role cashier
#   Create a user (prompts if options are omitted).
#
# Inventory inspection:
# - python -m flask items list [--low-stock 5]
#   List items, optionally only those at or below a stock threshold.
#
# Maintenance:
# - python -m flask sessions cleanup --retention-days 30
#   Delete expired or revoked session tokens older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Item, USER_ROLES
from .money import format_money
from .services.auth_service import (
    create_user,
    create_default_admin,
    PasswordValidationError,
    DEFAULT_ADMIN_USERNAME,
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_PASSWORD,
)
from .services import session_service
from .validation import ConflictError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the POS database.

    Creates all tables that do not exist yet and, when the users table is
    empty, the default admin account. Safe to run repeatedly.

    SECURITY: Change the default admin password immediately in production!
    """
    click.echo("START Initializing POS backend...")

    db.create_all()
    click.echo("PASS Tables ready")

    user = create_default_admin()
    if user:
        click.echo(f"PASS Created default admin: {user.username} ({user.email})")
        click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
        click.echo(f"   {DEFAULT_ADMIN_USERNAME} -> {DEFAULT_ADMIN_EMAIL} / {DEFAULT_ADMIN_PASSWORD}")
    else:
        click.echo("WARN  Users already exist, skipping default admin")

    click.echo("DONE POS backend initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(USER_ROLES), default='cashier', show_default=True, help='Role')
@with_appcontext
def create_user_cli(username, email, password, role):
    """Create a new user (password hashed with bcrypt)."""
    try:
        user = create_user(username=username, email=email, password=password, role=role)
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ConflictError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.userid).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Role'}")
    click.echo("="*70)

    for user in users:
        click.echo(f"{user.userid:<5} {user.username:<20} {user.email:<30} {user.role}")

    click.echo("="*70 + "\n")


# =============================================================================
# INVENTORY COMMANDS
# =============================================================================

@click.group('items')
def items_group():
    """Inventory inspection commands."""


@items_group.command('list')
@click.option('--low-stock', type=int, default=None, help='Only items with stock at or below this level')
@with_appcontext
def list_items_cli(low_stock):
    """List inventory items with price and stock."""
    query = db.session.query(Item)
    if low_stock is not None:
        query = query.filter(Item.stock_quantity <= low_stock)

    items = query.order_by(Item.category, Item.name).all()
    if not items:
        click.echo("No items found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Category':<20} {'Price':>10} {'Stock':>8}")
    click.echo("="*80)

    for item in items:
        click.echo(
            f"{item.itemid:<5} {item.name[:30]:<30} {item.category[:20]:<20} "
            f"{format_money(item.price):>10} {item.stock_quantity:>8}"
        )

    click.echo("="*80 + "\n")


# =============================================================================
# MAINTENANCE COMMANDS
# =============================================================================

@click.group('sessions')
def sessions_group():
    """Session token maintenance commands."""


@sessions_group.command('cleanup')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions(retention_days):
    """Delete expired or revoked session tokens older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} session tokens")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(items_group)
    app.cli.add_command(sessions_group)
