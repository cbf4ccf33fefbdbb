
import logging
from flask import Flask
from flask.logging import default_handler
from flask_sqlalchemy import SQLAlchemy
from .config import Config

db = SQLAlchemy()


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    package_logger = logging.getLogger(__name__)
    package_logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    package_logger.addHandler(default_handler)

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def healthz():
        return {"ok": True}, 200

    db.init_app(app)

    # Ensure tables exist
    with app.app_context():
        from . import models  # noqa
        db.create_all()

    from .errors import register_error_handlers
    from .identity import LocalIdentityProvider, RoleResolver, lookup_barista_email
    register_error_handlers(app, db)

    app.extensions["identity_provider"] = app.config.get("IDENTITY_PROVIDER") or LocalIdentityProvider(
        app.config["SECRET_KEY"],
        access_max_age=app.config["ACCESS_TOKEN_MAX_AGE"],
        refresh_max_age=app.config["REFRESH_TOKEN_MAX_AGE"],
    )
    app.extensions["role_resolver"] = RoleResolver(
        app.config["BARISTA_EMAILS"],
        app.config.get("BARISTA_LOOKUP") or lookup_barista_email,
    )

    # Blueprints
    from .auth.routes import auth_bp
    from .orders.routes import orders_bp
    from .products.routes import products_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(orders_bp, url_prefix="/orders")
    app.register_blueprint(products_bp, url_prefix="/products")

    return app
