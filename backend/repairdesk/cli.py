# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/repairdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Store bootstrap/inspection:
# - python -m flask stores register --store-name "Fix It" --owner-name "Ana" --store-email ana@fixit.test --pin 1234
#   Register a store with its OWNER employee.
# - python -m flask stores list
#   List all stores with employee counts.
#
# Inventory:
# - python -m flask inventory verify-ledger [--store-id 1]
#   Report stock items whose quantity on hand disagrees with their movement ledger.
#
# Maintenance:
# - python -m flask sessions cleanup
#   Delete expired and revoked sessions past the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Employee, Store
from .services import auth_service, inventory_service, session_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (no-op for existing ones)."""
    db.create_all()
    click.echo("PASS Database tables created")


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
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete")


@click.group('stores')
def stores_group():
    """Store bootstrap and inspection commands."""


@stores_group.command('register')
@click.option('--store-name', prompt=True)
@click.option('--owner-name', prompt=True)
@click.option('--store-email', prompt=True)
@click.option('--pin', prompt=True, hide_input=True)
@click.option('--store-phone', default=None)
@with_appcontext
def register_store(store_name, owner_name, store_email, pin, store_phone):
    """Register a store and its OWNER employee."""
    result = auth_service.register_store({
        "store_name": store_name,
        "owner_name": owner_name,
        "store_email": store_email,
        "pin": pin,
        "store_phone": store_phone,
    })
    if not result.ok:
        raise click.ClickException(result.error.message)

    store = result.value["store"]
    click.echo(f"PASS Registered store: {store['name']} (ID: {store['id']}, Email: {store['store_email']})")


@stores_group.command('list')
@with_appcontext
def list_stores():
    """List all stores."""
    stores = db.session.query(Store).order_by(Store.id.asc()).all()
    if not stores:
        click.echo("No stores found")
        return

    for store in stores:
        employee_count = db.session.query(Employee).filter_by(store_id=store.id, is_active=True).count()
        click.echo(f"{store.id:>4}  {store.name:<30} {store.store_email:<30} employees={employee_count}")


@click.group('inventory')
def inventory_group():
    """Inventory ledger inspection commands."""


@inventory_group.command('verify-ledger')
@click.option('--store-id', type=int, default=None, help='Limit to one store')
@with_appcontext
def verify_ledger(store_id):
    """Check initial_quantity + movements == quantity_on_hand for every item."""
    discrepancies = inventory_service.verify_ledger(store_id)
    if not discrepancies:
        click.echo("PASS Ledger reconciles for all stock items")
        return

    for row in discrepancies:
        click.echo(
            f"FAIL item {row['stock_item_id']} (store {row['store_id']}, sku {row['sku']}): "
            f"on hand {row['quantity_on_hand']}, ledger {row['ledger_quantity']}"
        )
    raise click.ClickException(f"{len(discrepancies)} stock item(s) out of balance")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('cleanup')
@with_appcontext
def cleanup_sessions():
    """Delete expired and revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"PASS Deleted {deleted} session(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stores_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(sessions_group)
