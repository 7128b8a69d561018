import logging

from flask import Flask, render_template, request
from sqlalchemy.exc import SQLAlchemyError

from renttracker.config import Config
from renttracker.extensions import csrf, db, limiter, login_manager, migrate
from renttracker.throttle import LoginThrottle

log = logging.getLogger(__name__)


def configure_logging(app):
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()],
    )


def create_app(config_object=None, **overrides):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(config_object or Config)
    app.config.update(overrides)

    configure_logging(app)

    # -----------------------
    # Init extensions
    # -----------------------
    db.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    migrate.init_app(app, db)

    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message_category = "warning"

    app.extensions["login_throttle"] = LoginThrottle.from_config(app.config)

    # -----------------------
    # Blueprints
    # -----------------------
    from renttracker.auth import auth_bp
    from renttracker.rent import rent_bp
    from renttracker.tenants import tenants_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(rent_bp)
    app.register_blueprint(tenants_bp)

    register_error_handlers(app)
    register_cli(app)

    @app.before_request
    def log_request_info():
        log.debug("%s %s", request.method, request.path)

    with app.app_context():
        db.create_all()

    return app


# -----------------------
# Errors
# -----------------------
def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return render_template("error.html", code=404, message="Not Found"), 404

    @app.errorhandler(SQLAlchemyError)
    def database_error(e):
        db.session.rollback()
        log.exception("Database error: %s", e)
        return render_template("error.html", code=500, message="Database error"), 500

    @app.errorhandler(500)
    def server_error(e):
        return render_template("error.html", code=500, message="Server Error"), 500


# -----------------------
# CLI
# -----------------------
def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        db.create_all()
        print("Database initialized at:", app.config["SQLALCHEMY_DATABASE_URI"])
