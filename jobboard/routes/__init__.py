"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask, jsonify

from .auth import bp as auth_bp
from .user_data import bp as user_data_bp
from .users import bp as users_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(user_data_bp)

    @app.get("/")
    def index():
        return jsonify(message="Hello from the job board API"), 200
