# Overview: Flask CLI command groups for bootstrap and user inspection.

# backend/mealvilla/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init --staff-id 100001 --name "Dev Account"
#   Create all tables and seed a developer account (prompts for the password).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--role supervisor]
#   List directory records.
# - python -m flask users create --staff-id 200001 --name "Ada Obi" --role staff
#   Create a user directly, bypassing the request workflow.

import click
from flask.cli import with_appcontext

from .errors import WorkflowError
from .extensions import db
from .models import User
from .roles import ALL_ROLES, ROLE_DEVELOPER, ROLE_NONE
from .services.user_directory import (
    find_by_staff_id,
    insert_user,
    validate_assignable_role,
    validate_name,
    validate_staff_id,
)


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--staff-id', prompt=True, help='6-digit staff ID for the developer account')
@click.option('--name', prompt=True, help='Display name for the developer account')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def init_system(staff_id, name, password):
    """
    Create the schema and seed the first developer account.

    Idempotent: an existing record with the same staff ID is left untouched.
    Every other account is created through the app by this developer.
    """
    click.echo("START Initializing Meal Villa...")

    db.create_all()
    click.echo("PASS Tables created")

    try:
        staff_id = validate_staff_id(staff_id)
        name = validate_name(name)
    except WorkflowError as e:
        click.echo(f"FAIL {e.message}")
        return

    existing = find_by_staff_id(staff_id)
    if existing:
        click.echo(f"WARN  Staff ID {staff_id} already exists ({existing.name}, {existing.role}), skipping...")
        return

    try:
        user = insert_user(name=name, staff_id=staff_id, role=ROLE_DEVELOPER, password=password)
    except WorkflowError as e:
        db.session.rollback()
        click.echo(f"FAIL Failed to create developer: {e.message}")
        return

    click.echo(f"PASS Created developer: {user.name} ({user.email})")
    click.echo(f"     User ID: {user.id}")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' next.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--staff-id', prompt=True, help='6-digit staff ID')
@click.option('--name', prompt=True, help='Display name')
@click.option('--role', type=click.Choice([r for r in ALL_ROLES if r != ROLE_NONE]), prompt=True, help='Role')
@click.option('--password', default=None, help='Initial password (defaults to DEFAULT_INITIAL_PASSWORD)')
@with_appcontext
def create_user_cli(staff_id, name, role, password):
    """Create a user directly, without an approval request."""
    try:
        user = insert_user(
            name=validate_name(name),
            staff_id=validate_staff_id(staff_id),
            role=validate_assignable_role(role),
            password=password,
        )
    except WorkflowError as e:
        db.session.rollback()
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS Created user: {user.name} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), help='Filter by role')
@with_appcontext
def list_users(role):
    """List directory records."""
    query = db.session.query(User)

    if role:
        query = query.filter_by(role=role)

    users = query.order_by(User.name.asc(), User.staff_id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'Staff ID':<10} {'Name':<30} {'Role':<12} {'Email':<28} {'User ID'}")
    click.echo("="*100)

    for user in users:
        click.echo(f"{user.staff_id:<10} {user.name:<30} {user.role:<12} {user.email:<28} {user.id}")

    click.echo("="*100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
