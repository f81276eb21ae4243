from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from library_rental.config import Config
from library_rental.errors import LibraryError, StoreError, Unauthenticated
from library_rental.extensions import db, migrate, jwt
from library_rental.utils.responses import json_error


def _register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def _library_error(e):
        return json_error(e)

    @app.errorhandler(SQLAlchemyError)
    def _store_error(e):
        db.session.rollback()
        app.logger.exception(f"[app] unhandled store error: {e}")
        return json_error(StoreError())

    # flask-jwt-extended answers its own failures; keep the same error shape
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return json_error(Unauthenticated(reason))

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return json_error(Unauthenticated(f"Invalid token: {reason}"))

    @jwt.expired_token_loader
    def _expired_token(_header, _payload):
        return json_error(Unauthenticated("Token has expired"))


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    # 1) db first (models need db.engine / db.session)
    db.init_app(app)

    # models must be imported before create_all / migrations see them
    from library_rental.models import book, customer, rental  # noqa: F401

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 2) other extensions
    migrate.init_app(app, db)
    jwt.init_app(app)
    _register_error_handlers(app)

    # 3) blueprints
    from library_rental.cli import cli_bp
    from library_rental.controllers.auth_controller import auth_bp
    from library_rental.controllers.book_controller import book_bp
    from library_rental.controllers.rental_controller import rental_bp
    from library_rental.controllers.customer_controller import customer_bp
    from library_rental.controllers.admin_controller import admin_bp
    app.register_blueprint(cli_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(rental_bp, url_prefix="/rentals")
    app.register_blueprint(customer_bp, url_prefix="/customers")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # inventory drift audit
    from library_rental.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
