# In app.py (project root)
import logging
import os

from flask import Flask
from flask_migrate import Migrate

from cli import register_cli
from config import Config
from logging_conf import configure_logging
from routes.auth import auth_bp
from routes.dashboard import dashboard_bp
from modules import module_blueprints
from database.models import db

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(config or Config())

    if not app.testing:
        configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
        os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        db.create_all()

    # Register Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)

    for name, blueprint, prefix in module_blueprints:
        logger.debug("Registering %s at %s", name, prefix)
        app.register_blueprint(blueprint, url_prefix=prefix)

    register_cli(app)
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
