# Overview: Flask CLI command groups for bootstrap, seeding, and maintenance.

# backend/posadmin/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app posadmin <group> <command> [options]
#
# Schema:
# - flask --app posadmin db upgrade
#   Apply Alembic migrations (Flask-Migrate).
# - flask --app posadmin system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - flask --app posadmin users create --name "Rudi" --email rudi@example.com --password secret123
#   Create a cashier account (prompts if options are omitted).
# - flask --app posadmin users list
#
# Catalog:
# - flask --app posadmin catalog seed
#   Create sample categories and products (idempotent by name).
#
# Maintenance:
# - flask --app posadmin maintenance cleanup-sessions --retention-days 30
#   Delete expired/revoked bearer tokens older than the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Category, Product, User
from .services import catalog_service, session_service
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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
    click.echo("CREATE  Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(name, email, password):
    """Create a user who can log in and place orders."""
    try:
        user = create_user(name=name, email=email, password=password)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.name} ({user.email}) ID {user.id}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<35} {active_str}")


@click.group('catalog')
def catalog_group():
    """Catalog seeding commands."""


SAMPLE_CATALOG = {
    "Food": [
        ("Nasi Goreng", "25000.00", 40),
        ("Mie Ayam", "20000.00", 30),
    ],
    "Drink": [
        ("Es Teh", "5000.00", 100),
        ("Kopi Susu", "18000.00", 60),
    ],
    "Snack": [
        ("Keripik Singkong", "8000.00", 50),
    ],
}


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Create sample categories and products, skipping names that exist."""
    created_categories = 0
    created_products = 0

    for category_name, products in SAMPLE_CATALOG.items():
        category = db.session.query(Category).filter_by(name=category_name).first()
        if not category:
            category = catalog_service.create_category(category_name)
            created_categories += 1

        for name, price, stock in products:
            if db.session.query(Product).filter_by(name=name).first():
                continue
            catalog_service.create_product(
                name=name,
                category_id=category.id,
                price=price,
                stock=stock,
            )
            created_products += 1

    click.echo(f"PASS Seeded {created_categories} categories and {created_products} products.")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked bearer tokens older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} session tokens older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(maintenance_group)
