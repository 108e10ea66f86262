# backend/mealvilla/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate


def _engine_options(uri: str, timeout: float) -> dict:
    """
    Bound connect, lock wait and pool checkout by STORE_TIMEOUT_SECONDS.

    In-memory SQLite runs on a StaticPool, which takes no pool_timeout.
    """
    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout}}

    if uri.startswith("postgresql"):
        return {
            "pool_timeout": timeout,
            "pool_pre_ping": True,
            "connect_args": {
                "connect_timeout": int(max(timeout, 1)),
                "options": f"-c statement_timeout={int(timeout * 1000)}",
            },
        }

    return {"pool_timeout": timeout, "pool_pre_ping": True}


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)

    # Overrides must land before db.init_app; the engine is built there
    if config_overrides:
        app.config.update(config_overrides)

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        _engine_options(app.config["SQLALCHEMY_DATABASE_URI"], app.config["STORE_TIMEOUT_SECONDS"]),
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services.identity_service import LocalIdentityProvisioner
    app.extensions.setdefault("identity_provisioner", LocalIdentityProvisioner())

    # Register blueprints
    from .routes.system import system_bp
    from .routes.staff import staff_bp
    from .routes.requests import requests_bp
    from .routes.sales import sales_bp
    from .routes.notifications import notifications_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(requests_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(notifications_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
