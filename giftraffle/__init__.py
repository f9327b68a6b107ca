from __future__ import annotations

import logging
import os

import click
from flask import Flask
from flask_wtf.csrf import CSRFError

from .extensions import db, login_manager, migrate, csrf
from .policies import error_response
from .services.keys import DEFAULT_KEY_LENGTH, MAX_KEY_LENGTH
from .views.auth import auth_bp
from .views.raffles import raffles_bp


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///giftraffle.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    app.config["RAFFLE_JOIN_KEY_LENGTH"] = int(os.environ.get("RAFFLE_JOIN_KEY_LENGTH", str(DEFAULT_KEY_LENGTH)))
    # Re-runs of the one-shot matching reduction before giving up
    app.config["RAFFLE_MATCH_ATTEMPTS"] = int(os.environ.get("RAFFLE_MATCH_ATTEMPTS", "25"))
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO").upper()

    if config:
        app.config.update(config)

    # Raffle.join_key column width caps the key length
    app.config["RAFFLE_JOIN_KEY_LENGTH"] = min(max(1, int(app.config["RAFFLE_JOIN_KEY_LENGTH"])), MAX_KEY_LENGTH)

    _configure_logging(app)

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response("error.auth.required", 401)

    @app.errorhandler(CSRFError)
    def csrf_failed(e):
        app.logger.info("Rejected request without valid CSRF token: %s", e.description)
        return error_response("error.request.csrf", 400)

    # Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(raffles_bp)

    @app.cli.command("init-db")
    def init_db():
        """Create all tables without going through migrations."""
        db.create_all()
        click.echo("Database initialized.")

    return app


def _configure_logging(app: Flask) -> None:
    level = app.config["LOG_LEVEL"]
    app.logger.setLevel(level)
    package_logger = logging.getLogger(__name__)
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)
