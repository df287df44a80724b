from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, g, render_template
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from restofind.app.config import Config
from restofind.app.extensions import db, migrate
from restofind.app.common.auth import load_current_user
from restofind.app.common.errors import AppError, ErrorKind, DEFAULT_MESSAGE, PAGE_NOT_FOUND
from restofind.app.common.images import ImageStore, init_image_store
from restofind.app.common.method_override import MethodOverrideMiddleware
from restofind.app.common.request_context import echo_request_id, init_request_id
from restofind.app.cli import cli_bp
from restofind.modules.restaurants.routes import bp as restaurants_bp
from restofind.modules.reviews.routes import bp as reviews_bp
from restofind.modules.users.routes import bp as users_bp


def create_app(config_object: type[Config] = Config, image_store: Optional[ImageStore] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    app.wsgi_app = MethodOverrideMiddleware(app.wsgi_app)  # type: ignore[method-assign]

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    init_image_store(app, image_store)

    @app.before_request
    def _before_request():
        init_request_id()
        load_current_user()

    app.after_request(echo_request_id)

    @app.context_processor
    def inject_user():
        return {"current_user": g.get("user")}

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    @app.get("/")
    def home():
        return render_template("home.html")

    app.register_blueprint(restaurants_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(users_bp)

    # CLI (flask init-db / flask seed)
    app.register_blueprint(cli_bp)

    register_error_handlers(app)
    return app


def render_error(err: AppError):
    err = err.normalized()
    return render_template("error.html", err=err, request_id=g.get("request_id")), err.status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if (err.status_code or 500) >= 500:
            db.session.rollback()
            app.logger.error("Request %s failed: %s", g.get("request_id"), err, exc_info=err)
        return render_error(err)

    # Anything that matched no route (path or method) gets the same 404 page
    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def handle_unmatched(err: HTTPException):
        return render_error(AppError.not_found(PAGE_NOT_FOUND))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        kind = ErrorKind.CLIENT if (err.code or 500) < 500 else ErrorKind.INTERNAL
        return render_error(AppError(kind, err.description, err.code))

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled exception (request %s)", g.get("request_id"))
        return render_error(AppError.internal(DEFAULT_MESSAGE))
