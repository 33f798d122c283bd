# app/__init__.py
import logging
import os
import time
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

import click
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from flask_jwt_extended import JWTManager
from psycopg2.errors import UniqueViolation
from werkzeug.exceptions import HTTPException

from app.errors import AppError
from app.routes import (
    auth_bp,
    core,
    user,
    functions_bp,
    donations_bp,
    servers_bp,
    streamers_bp,
    catalog_bp,
    public,
    admin_bp,
)

load_dotenv(dotenv_path=".env")

logger = logging.getLogger(__name__)

CORS_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"


class AppJSONProvider(DefaultJSONProvider):
    """Money as JSON numbers, timestamps as ISO-8601."""

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, UUID):
            return str(o)
        return DefaultJSONProvider.default(o)


def _configure_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status_code >= 500:
            logger.error("[%s] %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(UniqueViolation)
    def handle_unique(e):
        return jsonify({"error": "already exists", "code": "conflict"}), 409

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"error": "not found", "code": "not_found"}), 404

    @app.errorhandler(405)
    def handle_method(e):
        return jsonify({"error": "method not allowed", "code": "method_not_allowed"}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description, "code": "http_error"}), e.code
        logger.exception("[app] unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "internal error", "code": "internal_error"}), 500


def _register_cors(app):
    origins = os.getenv("CORS_ORIGINS", "*")

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return "", 204

    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = origins
        resp.headers["Access-Control-Allow-Headers"] = CORS_HEADERS
        resp.headers["Access-Control-Allow-Methods"] = CORS_METHODS
        return resp


def _register_cli(app):
    @app.cli.command("sweep-pending")
    @click.option("--once", is_flag=True, help="Run a single pass and exit.")
    @click.option(
        "--interval",
        type=int,
        default=lambda: int(os.getenv("SWEEP_INTERVAL_SECONDS", "120")),
        help="Seconds between passes.",
    )
    def sweep_pending(once, interval):
        """Poll Mercado Pago for every pending donation."""
        from app.services.payment_service import reconcile_pending_donations

        while True:
            try:
                result = reconcile_pending_donations()
                click.echo(
                    f"checked={result['checked']} updated={result['updated']} "
                    f"failed={result['failed']}"
                )
            except AppError as e:
                logger.error("[sweep] pass aborted: %s", e.message)
                if once:
                    raise click.ClickException(e.message)
            if once:
                return
            time.sleep(interval)


def create_app(test_config=None):
    _configure_logging()

    app = Flask(__name__)
    app.json = AppJSONProvider(app)
    app.url_map.strict_slashes = False

    # JWT
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET", "dev-secret")
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=15)
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = timedelta(days=30)
    if test_config:
        app.config.update(test_config)
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"error": reason, "code": "unauthorized"}), 401

    @jwt.invalid_token_loader
    def _bad_token(reason):
        return jsonify({"error": reason, "code": "unauthorized"}), 401

    @jwt.expired_token_loader
    def _expired_token(header, payload):
        return jsonify({"error": "token expired", "code": "unauthorized"}), 401

    _register_error_handlers(app)
    _register_cors(app)
    _register_cli(app)

    app.register_blueprint(core)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user, url_prefix="/api/admin")
    app.register_blueprint(functions_bp)
    app.register_blueprint(donations_bp)
    app.register_blueprint(servers_bp)
    app.register_blueprint(streamers_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(public)
    app.register_blueprint(admin_bp)

    logger.debug("[app] %d routes registered", len(list(app.url_map.iter_rules())))
    return app
