# Overview: Flask CLI command group for seeding, inspecting and resetting collections.

# backend/kontainar/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask storage <command> [options]
#
# - python -m flask storage init
#   Seed every collection that is not stored yet. Existing collections are left alone.
# - python -m flask storage list
#   List storage keys with record counts.
# - python -m flask storage reset products --yes
#   Drop one collection (products, users, sellers, suppliers, inventory, purchases) and reseed it.
# - python -m flask storage reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import StorageEntry
from .storage import SqlStorage
from .services.registry import get_services

DOMAINS = ("products", "users", "sellers", "suppliers", "inventory", "purchases")


@click.group('storage')
def storage_group():
    """Collection bootstrap and maintenance commands."""


@storage_group.command('init')
@with_appcontext
def init_storage():
    """Seed absent collections with their default records."""
    services = get_services()
    db.create_all()
    for name, service in services.domains().items():
        if service.store.exists():
            click.echo(f"SKIP {name}: already stored under '{service.store.key}'")
            continue
        service.initialize()
        click.echo(f"PASS {name}: seeded {len(service.store.load_all())} records")


@storage_group.command('list')
@with_appcontext
def list_storage():
    """List collections and their record counts."""
    services = get_services()
    for name, service in services.domains().items():
        if not service.store.exists():
            click.echo(f"{name:<10} {service.store.key:<22} (absent)")
            continue
        click.echo(f"{name:<10} {service.store.key:<22} {len(service.store.load_all())} records")

    if isinstance(services.storage, SqlStorage):
        for entry in db.session.query(StorageEntry).order_by(StorageEntry.key.asc()).all():
            info = entry.to_dict()
            click.echo(f"  row {info['key']}: {info['size']} bytes, updated {info['updated_at']}")


@storage_group.command('reset')
@click.argument('domain', type=click.Choice(DOMAINS))
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_collection(domain, yes):
    """Drop one collection and write its seed records again."""
    if not yes:
        click.confirm(f"WARN This will DELETE every {domain} record. Are you sure?", abort=True)

    count = get_services().reset(domain)
    click.echo(f"PASS {domain} reset ({count} seed records)")


@storage_group.command('reset-db')
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

    click.echo("PASS Database reset complete. Run 'python -m flask storage init' to seed.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(storage_group)
