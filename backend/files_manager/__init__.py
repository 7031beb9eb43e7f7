from __future__ import annotations

from pathlib import Path
from typing import Any

from flask import Flask

from .auth import auth_bp
from .common.errors import register_error_handlers
from .config import Config
from .extensions import cors, db, migrate
from .files import files_bp
from .services import init_services, start_worker_pools
from .status import status_bp
from .users import users_bp


MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_override:
        app.config.update(config_override)

    db.init_app(app)
    migrate.init_app(app, db, directory=str(MIGRATIONS_DIR))
    cors.init_app(app, resources={r"/*": {"origins": app.config["FRONTEND_ORIGINS"]}})
    init_services(app)

    app.register_blueprint(status_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(files_bp)

    register_error_handlers(app)

    app.extensions["worker_pools"] = start_worker_pools(app)

    return app
