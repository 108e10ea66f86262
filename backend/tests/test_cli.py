"""CLI bootstrap tests."""

from mealvilla.models import LoginCredential, User
from mealvilla.extensions import db


def test_system_init_seeds_developer(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "system", "init", "--staff-id", "900001", "--name", "Dev Account", "--password", "devpass",
    ])

    assert result.exit_code == 0, result.output
    assert "PASS Created developer" in result.output
    user = db.session.query(User).filter_by(staff_id="900001").one()
    assert user.role == "developer"
    assert db.session.get(LoginCredential, user.id) is not None


def test_system_init_is_idempotent(app, db_session):
    runner = app.test_cli_runner()
    args = ["system", "init", "--staff-id", "900001", "--name", "Dev Account", "--password", "devpass"]

    runner.invoke(args=args)
    result = runner.invoke(args=args)

    assert "already exists" in result.output
    assert db.session.query(User).filter_by(staff_id="900001").count() == 1


def test_users_create_and_list(app, db_session):
    runner = app.test_cli_runner()

    created = runner.invoke(args=["users", "create", "--staff-id", "300001", "--name", "Cli User", "--role", "staff"])
    listed = runner.invoke(args=["users", "list", "--role", "staff"])

    assert "PASS Created user" in created.output
    assert "300001" in listed.output
    assert "Cli User" in listed.output


def test_users_create_rejects_bad_staff_id(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "create", "--staff-id", "12", "--name", "Bad", "--role", "staff"])

    assert "FAIL" in result.output
    assert db.session.query(User).count() == 0
