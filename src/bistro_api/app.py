"""
Factory for the Bistro API service (REST).

All resources are served under ``/api``. The database handle, the realtime
notifier and every domain service are built once here and shared through
``app.extensions``.
"""

from __future__ import annotations

from pathlib import Path

from flask import Flask, abort, jsonify, send_from_directory
from flask_cors import CORS

from bistro_api.error_handlers import register_error_handlers
from bistro_api.extensions import Services, get_services, init_services
from bistro_api.routes import api_bp
from bistro_shared.config import AppConfig, load_config, validate_required_env_vars
from bistro_shared.db import Database
from bistro_shared.jwt_service import TokenService
from bistro_shared.logging_config import configure_logging
from bistro_shared.models import Base
from bistro_shared.realtime import Notifier, build_notifier
from bistro_shared.services.auth_service import AuthService
from bistro_shared.services.image_service import ImageStore
from bistro_shared.services.menu_service import MenuService
from bistro_shared.services.order_service import OrderService
from bistro_shared.services.order_state_machine import OrderStateMachine
from bistro_shared.services.report_service import ReportService
from bistro_shared.services.table_service import TableService
from bistro_shared.services.user_service import UserService

APP_NAME = "bistro-api"


def build_services(config: AppConfig, db: Database, notifier: Notifier) -> Services:
    images = ImageStore(config.upload_folder)
    tokens = TokenService(config.jwt_secret, config.jwt_expires_days)
    return Services(
        config=config,
        db=db,
        notifier=notifier,
        images=images,
        auth=AuthService(db, tokens, staff_require_auth=config.staff_endpoints_require_auth),
        menu=MenuService(db, images),
        orders=OrderService(
            db, notifier, OrderStateMachine(strict=config.strict_order_transitions)
        ),
        tables=TableService(db, notifier),
        users=UserService(db),
        reports=ReportService(db, config.report_revenue_policy, config.report_timezone),
    )


def create_app(config: AppConfig | None = None, notifier: Notifier | None = None) -> Flask:
    if config is None:
        # Fail fast on missing or insecure settings
        validate_required_env_vars()
        config = load_config(APP_NAME)

    logger = configure_logging(config.app_name, config.log_level)

    app = Flask(__name__)
    app.config["APP_NAME"] = config.app_name
    app.config["IS_PRODUCTION"] = config.is_production
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_mb * 1024 * 1024

    # Database
    db = Database(config.database_url)
    db.create_all(Base.metadata)

    init_services(app, build_services(config, db, notifier or build_notifier(config)))

    app.register_blueprint(api_bp, url_prefix="/api")
    register_error_handlers(app)

    # Kiosks and staff screens are served from other origins
    CORS(app, resources={r"/*": {"origins": "*"}}, send_wildcard=True)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "service": config.app_name}), 200

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename: str):
        path = get_services().images.resolve(filename)
        if path is None:
            abort(404)
        return send_from_directory(Path(config.upload_folder).resolve(), path.name)

    logger.info(
        "Bistro API ready",
        extra={
            "realtime": config.notifier_backend,
            "report_policy": config.report_revenue_policy,
            "strict_transitions": config.strict_order_transitions,
        },
    )
    return app
