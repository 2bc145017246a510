"""/api/users routes for signup and the administrative listing."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from jobboard.errors import ConflictError, ValidationError
from jobboard.services import credential_service

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("")
def list_users():
    """List every registered identity, passwords stripped."""
    try:
        users = credential_service.list_users()
    except Exception:
        current_app.logger.exception("Error retrieving users")
        return jsonify(error="Failed to retrieve users"), 500

    return jsonify(users=[credential_service.public_identity(user) for user in users]), 200


@bp.post("")
def signup():
    """Register a new identity and return it without its password."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}

    try:
        user = credential_service.create_user(
            name=payload.get("name"),
            email=payload.get("email"),
            password=payload.get("password"),
            dob=payload.get("dob"),
        )
    except ValidationError as e:
        return jsonify(error=str(e)), 400
    except ConflictError as e:
        return jsonify(error=str(e)), 409
    except Exception:
        current_app.logger.exception("Error creating user")
        return jsonify(error="Failed to create user"), 500

    return jsonify(credential_service.public_identity(user)), 201
