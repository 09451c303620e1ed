# backend/pos_api/__init__.py
import traceback

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .config import Config, engine_options
from .extensions import db, migrate
from .responses import failure


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        engine_options(app.config["SQLALCHEMY_DATABASE_URI"], app.config["DB_TIMEOUT_SECONDS"]),
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.items import items_bp
    from .routes.customers import customers_bp
    from .routes.orders import orders_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(orders_bp)

    from .services.rate_limit_service import init_rate_limiter
    limiter = init_rate_limiter(app)

    @app.before_request
    def throttle_requests():
        if not app.config["RATE_LIMIT_ENABLED"] or request.path == "/health":
            return None
        if request.method == "OPTIONS":
            return None

        allowed, retry_after = limiter.hit(request.remote_addr or "unknown")
        if not allowed:
            app.logger.warning("Rate limit exceeded for %s", request.remote_addr)
            response, status = failure("Too many requests from this IP, please try again later.", 429)
            response.headers["Retry-After"] = str(retry_after)
            return response, status
        return None

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(_e):
        return failure("API endpoint not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return failure("Method not allowed", 405)

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return failure(e.description or e.name, e.code or 500)

        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)

        if app.config.get("APP_ENV") == "development":
            return failure(
                "Internal Server Error",
                500,
                error=str(e),
                data={"stack": traceback.format_exc()},
            )
        return failure("Internal Server Error", 500)
