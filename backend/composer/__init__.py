import logging
import os
from flask import Flask, send_file, current_app
from .config import config_by_name
from .extensions import db, migrate, jwt, scheduler
from .api.v1 import v1_bp
from .application.editor.sessions import EditorSessions
from .errors import register_error_handlers
from flask_swagger_ui import get_swaggerui_blueprint


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # -------------------------------------------------
    # Logging
    # -------------------------------------------------
    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Models must be imported for create_all / migrations
    from .models import audit_log, page, page_version  # noqa: F401

    # -------------------------------------------------
    # Editor sessions + autosave scheduler
    # -------------------------------------------------
    EditorSessions(app)

    if app.config["SCHEDULER_ENABLED"] and not scheduler.running:
        scheduler.start()
        app.logger.info("Autosave scheduler started")

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    # -------------------------------------------------
    # Serve OpenAPI YAML (PUBLIC)
    # -------------------------------------------------
    @app.route("/openapi/editor.yaml", methods=["GET"], endpoint="openapi_editor")
    def serve_openapi():
        spec_path = os.path.join(
            current_app.root_path,
            "api",
            "v1",
            "editor_openapi.yaml",
        )

        if not os.path.exists(spec_path):
            raise FileNotFoundError("editor_openapi.yaml not found")

        return send_file(
            spec_path,
            mimetype="application/yaml",
            as_attachment=False,
        )

    # -------------------------------------------------
    # Swagger UI
    # -------------------------------------------------
    SWAGGER_URL = "/swagger"
    API_URL = "/openapi/editor.yaml"

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            "app_name": "Page Composer API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )

    app.register_blueprint(swaggerui_blueprint, url_prefix=SWAGGER_URL)

    return app
