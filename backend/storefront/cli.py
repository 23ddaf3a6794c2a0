# Overview: Flask CLI command groups for bootstrap and reference-data inspection.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask db upgrade
#   Apply migrations (preferred over init-db outside dev/test).
# - python -m flask system init-db
#   DEV/TEST only: create all tables from the models.
# - python -m flask system create-person --login alice --firstname Alice
#   Register a person under an identity-provider login.
#
# Reference data:
# - python -m flask catalog seed
#   Create the status enumerations the order workflow needs (idempotent).
# - python -m flask catalog show
#   List every status value with its id.
# - python -m flask catalog add-category --code TOOLS --label "Tools"
# - python -m flask catalog add-product --code HAMMER --sku SKU-1 --label Hammer --category-id 1 --price 9.99 --quantity 10

import click
from flask.cli import with_appcontext

from .errors import StorefrontError
from .extensions import db
from .services import person_service, product_service, reference_service


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables (DEV/TEST). Existing tables are left alone."""
    click.echo("BUILD  Creating all tables...")
    db.create_all()
    created = reference_service.seed_statuses()
    click.echo(f"PASS Database ready ({created} status value(s) seeded).")


@system_group.command('create-person')
@click.option('--login', 'user_login', required=True, help='Identity-provider login')
@click.option('--firstname', default=None)
@click.option('--lastname', default=None)
@click.option('--phone', default=None)
@with_appcontext
def create_person_cli(user_login, firstname, lastname, phone):
    """Register a person (client or manager)."""
    try:
        person = person_service.create_person(
            user_login,
            firstname=firstname,
            lastname=lastname,
            phone=phone,
        )
    except StorefrontError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created person: {person.user_login} (ID: {person.id})")


# =============================================================================
# REFERENCE DATA COMMANDS
# =============================================================================

@click.group('catalog')
def catalog_group():
    """Reference data (status enumerations, categories, products)."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Create OrderStatus, OrderItemStatus, CartItemStatus and ProductStatus values."""
    created = reference_service.seed_statuses()
    if created:
        click.echo(f"PASS Seeded {created} status value(s)")
    else:
        click.echo("PASS Status catalog already seeded")


@catalog_group.command('show')
@with_appcontext
def show_catalog():
    """List status values with their ids."""
    rows = reference_service.list_statuses()
    if not rows:
        click.echo("No status values found. Run: python -m flask catalog seed")
        return

    click.echo("\n" + "=" * 50)
    click.echo(f"{'ID':<6} {'Enum':<20} {'Value'}")
    click.echo("=" * 50)
    for enum_code, value_code, status_id in rows:
        click.echo(f"{status_id:<6} {enum_code:<20} {value_code}")
    click.echo("=" * 50 + "\n")


@catalog_group.command('add-category')
@click.option('--code', required=True)
@click.option('--label', required=True)
@click.option('--parent-id', type=int, default=None)
@with_appcontext
def add_category_cli(code, label, parent_id):
    try:
        category = product_service.create_category(code, label, parent_id=parent_id)
    except StorefrontError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created category: {category.code} (ID: {category.id})")


@catalog_group.command('add-product')
@click.option('--code', required=True)
@click.option('--sku', required=True)
@click.option('--label', required=True)
@click.option('--category-id', type=int, required=True)
@click.option('--price', default="0", help='Decimal price, e.g. 9.99')
@click.option('--quantity', type=int, default=0, help='Initial stock')
@click.option('--unavailable', is_flag=True, help='Create with status Unavailable')
@with_appcontext
def add_product_cli(code, sku, label, category_id, price, quantity, unavailable):
    try:
        product = product_service.create_product(
            code=code,
            sku=sku,
            label=label,
            category_id=category_id,
            price=price,
            quantity=quantity,
            available=not unavailable,
        )
    except StorefrontError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created product: {product.code} (ID: {product.id}, quantity: {product.quantity})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
