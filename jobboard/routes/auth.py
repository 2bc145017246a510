"""/api/auth route checking credentials for login."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from jobboard.services import credential_service

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("")
def login():
    """Return the identity matching the given email and password."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    email = payload.get("email")
    password = payload.get("password")

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify(error="Email and password are required"), 400

    try:
        user = credential_service.find_by_email_and_password(email, password)
    except Exception:
        current_app.logger.exception("Error during login")
        return jsonify(error="Authentication failed"), 500

    if not user:
        return jsonify(error="Invalid email or password"), 401

    return jsonify(credential_service.public_identity(user)), 200
