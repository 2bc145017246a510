"""/api/user-data routes for applied and bookmarked job ids."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from jobboard.errors import ValidationError
from jobboard.services import user_data_service

bp = Blueprint("user_data", __name__, url_prefix="/api/user-data")

# Field names accepted from older clients.
LEGACY_FIELDS = {
    "appliedJobIds": "appliedJobs",
    "bookmarkedJobIds": "bookmarkedJobs",
}


def _job_id_field(payload: Dict[str, Any], field: str) -> Optional[list]:
    """Return the list sent for ``field``, or None when it was left out."""
    value = payload.get(field)
    if value is None:
        value = payload.get(LEGACY_FIELDS[field])
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a list of job ids")
    return value


@bp.get("")
def get_user_data():
    """Return the stored record for ``userId`` or an empty default."""
    user_id = request.args.get("userId", "").strip()
    if not user_id:
        return jsonify(error="User ID is required"), 400

    try:
        record = user_data_service.get_user_data(user_id)
    except Exception:
        current_app.logger.exception("Error retrieving user data")
        return jsonify(error="Failed to retrieve user data"), 500

    return jsonify(record), 200


@bp.post("")
def update_user_data():
    """Upsert the record for ``userId``; omitted fields keep their stored value."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    user_id = str(payload.get("userId") or "").strip()
    if not user_id:
        return jsonify(error="User ID is required"), 400

    try:
        user_data_service.put_user_data(
            user_id,
            applied_job_ids=_job_id_field(payload, "appliedJobIds"),
            bookmarked_job_ids=_job_id_field(payload, "bookmarkedJobIds"),
        )
    except ValidationError as e:
        return jsonify(error=str(e)), 400
    except Exception:
        current_app.logger.exception("Error updating user data")
        return jsonify(error="Failed to update user data"), 500

    return jsonify(success=True), 200
