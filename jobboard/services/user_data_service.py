"""Service for storing applied and bookmarked job ids per user."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pymongo.collection import Collection

from jobboard import database, storage
from jobboard.errors import ValidationError


def _get_user_data_collection() -> Optional[Collection]:
    """Get the MongoDB user data collection if MongoDB is enabled."""
    if not database.mongodb_enabled():
        return None
    return database.get_database()["user_data"]


def create_indexes() -> None:
    """Enforce at most one user data record per user id."""
    collection = _get_user_data_collection()
    if collection is None:
        return
    collection.create_index("userId", unique=True)


def default_user_data(user_id: str) -> Dict[str, Any]:
    """Return the empty record served for users that never saved anything."""
    return {"userId": user_id, "appliedJobIds": [], "bookmarkedJobIds": []}


def _job_ids(values: Iterable[Any]) -> List[int]:
    try:
        return [int(value) for value in values]
    except (TypeError, ValueError):
        raise ValidationError("Job ids must be integers") from None


def get_user_data(user_id: str) -> Dict[str, Any]:
    """
    Retrieve the applied and bookmarked job ids for a user.

    Args:
        user_id: The identity id owning the record

    Returns:
        The stored record, or an unsaved default record with empty lists
    """
    collection = _get_user_data_collection()
    if collection is None:
        with storage.lock:
            record = storage.user_data.get(user_id)
            if record is None:
                return default_user_data(user_id)
            return {
                "userId": user_id,
                "appliedJobIds": list(record["appliedJobIds"]),
                "bookmarkedJobIds": list(record["bookmarkedJobIds"]),
            }

    record = collection.find_one(
        {"userId": user_id},
        {"_id": 0, "userId": 1, "appliedJobIds": 1, "bookmarkedJobIds": 1},
    )
    if record is None:
        return default_user_data(user_id)
    record.setdefault("appliedJobIds", [])
    record.setdefault("bookmarkedJobIds", [])
    return record


def put_user_data(
    user_id: str,
    applied_job_ids: Optional[Iterable[Any]] = None,
    bookmarked_job_ids: Optional[Iterable[Any]] = None,
) -> None:
    """
    Upsert the record for a user.

    A field passed as None keeps its stored value. A list, even an empty one,
    replaces it. Records created here start with empty lists for the fields
    that were not given.

    Args:
        user_id: The identity id owning the record
        applied_job_ids: New applied job ids, or None to keep the stored ones
        bookmarked_job_ids: New bookmarked job ids, or None to keep the stored ones
    """
    changes: Dict[str, Any] = {}
    if applied_job_ids is not None:
        changes["appliedJobIds"] = _job_ids(applied_job_ids)
    if bookmarked_job_ids is not None:
        changes["bookmarkedJobIds"] = _job_ids(bookmarked_job_ids)

    collection = _get_user_data_collection()
    if collection is None:
        with storage.lock:
            record = storage.user_data.setdefault(user_id, default_user_data(user_id))
            record.update(changes)
        return

    on_insert: Dict[str, Any] = {"created_at": datetime.utcnow()}
    for field in ("appliedJobIds", "bookmarkedJobIds"):
        if field not in changes:
            on_insert[field] = []

    collection.update_one(
        {"userId": user_id},
        {
            "$set": {**changes, "updated_at": datetime.utcnow()},
            "$setOnInsert": on_insert,
        },
        upsert=True,
    )
