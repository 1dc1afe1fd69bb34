# Overview: Flask CLI command groups for directory inspection.

# backend/stampcard/cli.py
# Commands Legend (run from the backend directory):
# - python -m flask --app wsgi stores list
#   List configured stores.
# - python -m flask --app wsgi users list [--store-id s1]
#   List users with their store and role (never password hashes).
# - python -m flask --app wsgi users hash-password --password "..."
#   Print a bcrypt hash for a directory file's "passwordHash" field.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import get_services
from .services.auth_service import hash_password


@click.group('stores')
def stores_group():
    """Store directory commands."""


@stores_group.command('list')
@with_appcontext
def list_stores():
    stores = get_services().stores.list_stores()
    if not stores:
        click.echo("No stores configured.")
        return
    for store in stores:
        click.echo(f"{store.id}\t{store.name}")


@click.group('users')
def users_group():
    """User directory commands."""


@users_group.command('list')
@click.option('--store-id', help='Only users of this store')
@with_appcontext
def list_users(store_id):
    services = get_services()
    if store_id is not None and store_id not in services.stores:
        raise click.BadParameter(f"Unknown store {store_id}", param_hint="--store-id")

    users = services.users.list_users(store_id)
    if not users:
        click.echo("No users found.")
        return
    for user in users:
        click.echo(f"{user.id}\t{user.store_id}\t{user.username}\t{user.role}")


@users_group.command('hash-password')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password to hash')
@with_appcontext
def hash_password_cli(password):
    if not password:
        raise click.BadParameter("Password must not be empty", param_hint="--password")
    click.echo(hash_password(password, current_app.config["BCRYPT_ROUNDS"]))


def register_commands(app):
    app.cli.add_command(stores_group)
    app.cli.add_command(users_group)
