"""
Pytest fixtures for Meal Villa backend tests.

Provides an in-memory application, a clean database per test, one actor
per role, and the Flask test client.
"""

import pytest

from mealvilla import create_app
from mealvilla.extensions import db
from mealvilla.roles import Actor, ROLE_DEVELOPER, ROLE_MANAGER, ROLE_STAFF, ROLE_SUPERVISOR
from mealvilla.services.identity_service import LocalIdentityProvisioner
from mealvilla.services.user_directory import insert_user


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'BUSINESS_TIMEZONE': 'Africa/Lagos',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        app.extensions['identity_provisioner'] = LocalIdentityProvisioner()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: insert a directory record and return it as an Actor."""
    def _make(role: str, staff_id: str, name: str | None = None) -> Actor:
        user = insert_user(name=name or f"{role.capitalize()} {staff_id}", staff_id=staff_id, role=role)
        return Actor.from_user(user)
    return _make


@pytest.fixture(scope='function')
def manager(make_user):
    return make_user(ROLE_MANAGER, "100001", "Mary Manager")


@pytest.fixture(scope='function')
def developer(make_user):
    return make_user(ROLE_DEVELOPER, "100002", "Dele Developer")


@pytest.fixture(scope='function')
def supervisor(make_user):
    return make_user(ROLE_SUPERVISOR, "100003", "Sade Supervisor")


@pytest.fixture(scope='function')
def staff(make_user):
    return make_user(ROLE_STAFF, "100004", "Tunde Staff")


def actor_headers(actor: Actor) -> dict:
    """Helper to create the gateway identity header for an actor."""
    return {'X-Actor-Uid': actor.uid}


@pytest.fixture(scope='function')
def headers():
    return actor_headers
