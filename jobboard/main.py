"""Flask application setup and blueprint wiring."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from jobboard import database
from jobboard.routes import register_routes

REQUEST_LIMIT_BYTES = 1 * 1024 * 1024  # 1 MB per request


def create_app() -> Flask:
    """Configure and return the Flask application instance."""
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    app.config["MAX_CONTENT_LENGTH"] = REQUEST_LIMIT_BYTES

    register_routes(app)

    # Initialize MongoDB indexes if enabled
    if database.mongodb_enabled():
        try:
            from jobboard.services import credential_service, user_data_service
            with app.app_context():
                credential_service.create_indexes()
                user_data_service.create_indexes()
                app.logger.info("MongoDB indexes created successfully")
        except Exception as e:
            app.logger.warning(f"Failed to create MongoDB indexes: {e}")

    return app
