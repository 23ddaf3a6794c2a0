# backend/storefront/__init__.py
from flask import Flask
from sqlalchemy import inspect
from sqlalchemy.engine import make_url

from .config import Config
from .extensions import db, migrate


def _engine_options(app: Flask) -> dict:
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    isolation = app.config.get("TRANSACTION_ISOLATION_LEVEL")
    url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    # SQLite serialises writers with BEGIN IMMEDIATE instead (see unit_of_work)
    if isolation and url.get_backend_name() != "sqlite":
        options.setdefault("isolation_level", isolation)
    return options


def _warm_status_catalog(app: Flask) -> None:
    from .errors import StorefrontError
    from .services.status_catalog import status_catalog
    from .services.unit_of_work import with_transaction

    with app.app_context():
        if not inspect(db.engine).has_table("enum_values"):
            app.logger.info("Status catalog warm-up skipped: schema not created yet")
            return
        try:
            resolved = with_transaction(lambda u: status_catalog.load(u), write=False)
        except StorefrontError as e:
            app.logger.warning("Status catalog warm-up skipped: %s", e.message)
            return
        app.logger.info("Status catalog warmed with %s statuses", len(resolved))


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = _engine_options(app)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from .services.status_catalog import status_catalog
    status_catalog.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.carts import carts_bp
    from .routes.orders import orders_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(carts_bp)
    app.register_blueprint(orders_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("STATUS_CATALOG_WARMUP"):
        _warm_status_catalog(app)

    return app
