"""
Development Tracker
Flask Application Factory.

Usage:
    from devtracker import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from devtracker.config import config
from devtracker.models import db
from devtracker.auth import init_auth
from devtracker.middleware.logging_config import configure_logging
from devtracker.middleware.timing import init_request_timing
from devtracker.middleware.rate_limiter import init_rate_limits
from devtracker.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
# Storage comes from RATELIMIT_STORAGE_URI in the app config
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # limits are applied per blueprint
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing, then the authorization gate ──────────────────────
    init_request_timing(app)
    init_auth(app)

    app.config.setdefault("MAX_CONTENT_LENGTH", 2 * 1024 * 1024)  # 2 MB

    # ── Import all models so create_all / Alembic see them ───────────────
    from devtracker.models import lookups as _lookup_models        # noqa: F401
    from devtracker.models import development as _development_models  # noqa: F401
    from devtracker.models import task as _task_models             # noqa: F401

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and ":memory:" not in (
        app.config["SQLALCHEMY_DATABASE_URI"]
    ):
        os.makedirs(app.instance_path, exist_ok=True)

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from devtracker.blueprints.development_bp import development_bp
    from devtracker.blueprints.panel_config_bp import panel_config_bp
    from devtracker.blueprints.task_bp import task_bp
    from devtracker.blueprints.dashboard_bp import dashboard_bp
    from devtracker.blueprints.health_bp import health_bp

    app.register_blueprint(development_bp)
    app.register_blueprint(panel_config_bp)
    app.register_blueprint(task_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
